from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_base_url: str = Field("http://localhost/api/forge", validation_alias="API_BASE_URL")
    upload_filename: str = Field("recording.zip", validation_alias="UPLOAD_FILENAME")
    http_connect_timeout_seconds: float = Field(5.0, validation_alias="HTTP_CONNECT_TIMEOUT_SECONDS")
    http_read_timeout_seconds: float = Field(60.0, validation_alias="HTTP_READ_TIMEOUT_SECONDS")

    recordings_dir: str = Field("recordings", validation_alias="RECORDINGS_DIR")

    wallet_address: str = Field("", validation_alias="WALLET_ADDRESS")
    connect_token: str = Field("", validation_alias="CONNECT_TOKEN")

    gateway_backend: str = Field("http", validation_alias="GATEWAY_BACKEND")
    producer_backend: str = Field("zip", validation_alias="PRODUCER_BACKEND")

    poll_interval_seconds: float = Field(5.0, validation_alias="POLL_INTERVAL_SECONDS")
    eviction_delay_seconds: float = Field(5.0, validation_alias="EVICTION_DELAY_SECONDS")
    processing_progress: int = Field(50, ge=0, le=100, validation_alias="PROCESSING_PROGRESS")

    # Status query attempts per poll tick. 1 means the first failed query marks the item FAILED.
    poll_max_attempts: int = Field(1, ge=1, validation_alias="POLL_MAX_ATTEMPTS")
    initial_backoff_seconds: float = Field(1.0, validation_alias="INITIAL_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(10.0, validation_alias="MAX_BACKOFF_SECONDS")
    backoff_multiplier: float = Field(2.0, validation_alias="BACKOFF_MULTIPLIER")
