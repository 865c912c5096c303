"""Application configuration loaded from environment variables."""

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings object shared by the API and its collaborators."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    s3_scheme: str = Field(default="http", alias="S3_SCHEME")
    s3_host: str = Field(default="minio", alias="S3_HOST")
    s3_port: int = Field(default=9000, alias="S3_PORT")
    s3_access_key: str = Field(default="minio", alias="S3_ACCESS_KEY")
    s3_secret_key: str = Field(default="minio123", alias="S3_SECRET_KEY")
    s3_region: str = Field(default="us-east-1", alias="S3_REGION")
    s3_bucket_uploads: str = Field(default="uploads", alias="S3_BUCKET_UPLOADS")

    rabbitmq_user: str = Field(default="analysis", alias="RABBITMQ_USER")
    rabbitmq_password: str = Field(default="analysis", alias="RABBITMQ_PASSWORD")
    rabbitmq_host: str = Field(default="rabbitmq", alias="RABBITMQ_HOST")
    rabbitmq_port: int = Field(default=5672, alias="RABBITMQ_PORT")
    rabbitmq_vhost: str = Field(default="/", alias="RABBITMQ_VHOST")
    notification_queue: str = Field(default="analysis-notifications", alias="NOTIFICATION_QUEUE")
    notification_max_retries: int = Field(default=3, ge=0, alias="NOTIFICATION_MAX_RETRIES")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")
    service_name: str = Field(default="product-analysis", alias="SERVICE_NAME")
    environment: str = Field(default="local", alias="ENVIRONMENT")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def broker_url(self) -> str:
        """Build the AMQP broker URL from RabbitMQ settings."""
        vhost = self.rabbitmq_vhost.lstrip("/")
        suffix = f"/{vhost}" if vhost else "//"
        return (
            f"amqp://{self.rabbitmq_user}:{self.rabbitmq_password}"
            f"@{self.rabbitmq_host}:{self.rabbitmq_port}{suffix}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def s3_endpoint_url(self) -> str:
        """Build S3-compatible endpoint URL."""
        return f"{self.s3_scheme}://{self.s3_host}:{self.s3_port}"


settings = Settings()
