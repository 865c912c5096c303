from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_message_sender, get_object_store
from src.api.main import app
from tests.fakes import FakeMessageSender, FakeObjectStore


@pytest.fixture()
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def message_sender() -> FakeMessageSender:
    return FakeMessageSender()


@pytest_asyncio.fixture()
async def client(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
) -> AsyncGenerator[AsyncClient]:
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_message_sender] = lambda: message_sender

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client

    app.dependency_overrides.clear()


@pytest.fixture()
def sample_csv_bytes() -> bytes:
    return (
        "ID,Nom,Prix,Quantité,Note_Client\n"
        "1,A,5,10,3\n"
        "2,B,600,0,6\n"
        "3,C,50,1500,2\n"
    ).encode("utf-8")
