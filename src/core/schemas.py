from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class AnomalyReason(str, Enum):
    negative_price = "negative price"
    price_below_10 = "price below 10"
    price_above_500 = "price above 500"
    negative_quantity = "negative quantity"
    zero_quantity = "zero quantity"
    excessive_quantity = "excessively high quantity"
    rating_below_1 = "rating below 1"
    rating_above_5 = "rating above 5"
    unparseable_value = "unparseable value"


class MetricStats(BaseModel):
    """Mean, median and population standard deviation of one field."""

    model_config = ConfigDict(frozen=True)

    mean: float = 0.0
    median: float = 0.0
    stddev: float = 0.0

    @field_validator("mean", "median", "stddev", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class Anomaly(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=2)
    value: float | None
    reason: AnomalyReason


class AnalysisStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: MetricStats = Field(default_factory=MetricStats)
    quantity: MetricStats = Field(default_factory=MetricStats)
    rating: MetricStats = Field(default_factory=MetricStats)

    @field_validator("price", "quantity", "rating", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return MetricStats() if value is None else value


class AnalysisAnomalies(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: tuple[Anomaly, ...] = ()
    quantity: tuple[Anomaly, ...] = ()
    rating: tuple[Anomaly, ...] = ()

    @field_validator("price", "quantity", "rating", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def total(self) -> int:
        return len(self.price) + len(self.quantity) + len(self.rating)


class AnalysisResult(BaseModel):
    """Statistics and anomalies produced by one analysis run."""

    model_config = ConfigDict(frozen=True)

    total_records: int = Field(default=0, ge=0)
    statistics: AnalysisStatistics = Field(default_factory=AnalysisStatistics)
    anomalies: AnalysisAnomalies = Field(default_factory=AnalysisAnomalies)

    @field_validator("total_records", "statistics", "anomalies", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AnomalyCounts(_CamelModel):
    price: int
    quantity: int
    rating: int
    total: int


class MetricAverages(_CamelModel):
    price: float
    quantity: float
    rating: float


class NotificationSummary(_CamelModel):
    """Condensed view of an analysis result published to the notification queue."""

    file_name: str
    timestamp: datetime
    total_records: int
    anomaly_counts: AnomalyCounts
    averages: MetricAverages


class ErrorResponse(BaseModel):
    detail: str


class FileUploadPublic(BaseModel):
    file_name: str
    content_type: str
    size_bytes: int
    checksum_sha256: str


class StoredFilePublic(BaseModel):
    name: str
    size_bytes: int | None = None
    content_type: str | None = None
    last_modified: datetime | None = None


class StoredFileList(BaseModel):
    files: list[StoredFilePublic]


class AnalysisSucceeded(BaseModel):
    success: Literal[True] = True
    file_name: str
    results: AnalysisResult
    notification_sent: bool
    warning: str | None = None


class AnalysisFound(BaseModel):
    success: Literal[True] = True
    file_name: str
    results: dict[str, JsonValue]


class AnalysisFailed(BaseModel):
    success: Literal[False] = False
    message: str


class NotificationRequest(BaseModel):
    file_name: str = Field(min_length=1)
    results: dict[str, JsonValue] = Field(default_factory=dict)


class NotificationPublic(BaseModel):
    success: bool
    message: str
    notification: NotificationSummary
