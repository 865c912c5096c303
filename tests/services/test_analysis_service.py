import json

from src.core.schemas import AnalysisFailed, AnalysisFound, AnalysisSucceeded
from src.services import analysis as analysis_service
from src.services.notifications import decode_notification
from tests.fakes import FakeMessageSender, FakeObjectStore


def test_result_key_prefixes_file_name() -> None:
    assert analysis_service.result_key("data.csv") == "analysis-result-data.csv"


def test_analyze_file_stores_result_and_notifies(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
    sample_csv_bytes: bytes,
) -> None:
    object_store.objects["data.csv"] = sample_csv_bytes

    outcome = analysis_service.analyze_file(object_store, message_sender, "data.csv")

    assert isinstance(outcome, AnalysisSucceeded)
    assert outcome.file_name == "analysis-result-data.csv"
    assert outcome.notification_sent is True
    assert outcome.warning is None
    stored = json.loads(object_store.objects["analysis-result-data.csv"])
    assert stored["total_records"] == 3
    assert stored["statistics"]["price"] == {"mean": 218.33, "median": 50.0, "stddev": 270.5}
    assert decode_notification(message_sender.messages[0]).file_name == "data.csv"


def test_analyze_file_missing_source_returns_failure(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
) -> None:
    outcome = analysis_service.analyze_file(object_store, message_sender, "missing.csv")

    assert isinstance(outcome, AnalysisFailed)
    assert outcome.message == "Error analyzing file: File not found: missing.csv"
    assert message_sender.messages == []


def test_analyze_file_malformed_csv_returns_failure(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
) -> None:
    object_store.objects["bad.csv"] = b'ID,Nom,Prix,Quantit\xc3\xa9,Note_Client\n1,"A,5,10,3\n'

    outcome = analysis_service.analyze_file(object_store, message_sender, "bad.csv")

    assert isinstance(outcome, AnalysisFailed)
    assert outcome.message.startswith("Error analyzing file: Malformed CSV")
    assert "analysis-result-bad.csv" not in object_store.objects


def test_analyze_file_store_failure_returns_failure(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
    sample_csv_bytes: bytes,
) -> None:
    object_store.objects["data.csv"] = sample_csv_bytes
    object_store.failing.add("store")

    outcome = analysis_service.analyze_file(object_store, message_sender, "data.csv")

    assert isinstance(outcome, AnalysisFailed)
    assert "store failed" in outcome.message
    assert message_sender.messages == []


def test_analyze_file_notification_failure_keeps_stored_result(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
    sample_csv_bytes: bytes,
) -> None:
    object_store.objects["data.csv"] = sample_csv_bytes
    message_sender.fail = True

    outcome = analysis_service.analyze_file(object_store, message_sender, "data.csv")

    assert isinstance(outcome, AnalysisSucceeded)
    assert outcome.notification_sent is False
    assert outcome.warning is not None
    assert "broker unreachable" in outcome.warning
    assert "analysis-result-data.csv" in object_store.objects


def test_get_analysis_result_missing(object_store: FakeObjectStore) -> None:
    outcome = analysis_service.get_analysis_result(object_store, "data.csv")

    assert outcome == AnalysisFailed(message="No analysis results found for file: data.csv")


def test_get_analysis_result_found(
    object_store: FakeObjectStore,
    message_sender: FakeMessageSender,
    sample_csv_bytes: bytes,
) -> None:
    object_store.objects["data.csv"] = sample_csv_bytes
    analysis_service.analyze_file(object_store, message_sender, "data.csv")

    outcome = analysis_service.get_analysis_result(object_store, "data.csv")

    assert isinstance(outcome, AnalysisFound)
    assert outcome.file_name == "analysis-result-data.csv"
    assert outcome.results["total_records"] == 3


def test_get_analysis_result_invalid_json(object_store: FakeObjectStore) -> None:
    object_store.objects["analysis-result-data.csv"] = b"{not json"

    outcome = analysis_service.get_analysis_result(object_store, "data.csv")

    assert isinstance(outcome, AnalysisFailed)
    assert outcome.message.startswith("Error retrieving analysis results:")


def test_get_analysis_result_storage_failure(object_store: FakeObjectStore) -> None:
    object_store.failing.add("exists")

    outcome = analysis_service.get_analysis_result(object_store, "data.csv")

    assert isinstance(outcome, AnalysisFailed)
    assert "exists failed" in outcome.message
