"""Process-wide collaborator clients injected into API routes."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.core.config import settings
from src.services.notifications import MessageSender, build_notification_sender
from src.services.storage import ObjectStore, S3ObjectStore, build_s3_client


@lru_cache(maxsize=1)
def get_object_store() -> ObjectStore:
    return S3ObjectStore(build_s3_client(), settings.s3_bucket_uploads)


@lru_cache(maxsize=1)
def get_message_sender() -> MessageSender:
    return build_notification_sender()


T_ObjectStore = Annotated[ObjectStore, Depends(get_object_store)]
T_MessageSender = Annotated[MessageSender, Depends(get_message_sender)]
