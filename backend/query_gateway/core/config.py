import warnings
from typing import Annotated, Any, Literal

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    PostgresDsn,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from query_gateway.core.security import CredentialKey, CredentialKeyring


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    PROJECT_NAME: str = "Query Gateway"
    SENTRY_DSN: HttpUrl | None = None

    # Metadata store (query definitions + database profiles)
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> PostgresDsn:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Per-field AES-256-CBC keys for stored connection secrets.
    # Key strings are 32 bytes, IV strings 16 bytes (UTF-8).
    DATABASES_HOST_ENCRYPTION_KEY: str | None = None
    DATABASES_HOST_IV_STRING: str | None = None
    DATABASES_DATABASE_ENCRYPTION_KEY: str | None = None
    DATABASES_DATABASE_IV_STRING: str | None = None
    DATABASES_USERNAME_ENCRYPTION_KEY: str | None = None
    DATABASES_USERNAME_IV_STRING: str | None = None
    DATABASES_PASSWORD_ENCRYPTION_KEY: str | None = None
    DATABASES_PASSWORD_IV_STRING: str | None = None
    DATABASES_CONNECT_STRING_ENCRYPTION_KEY: str | None = None
    DATABASES_CONNECT_STRING_IV_STRING: str | None = None

    # External DB execution
    EXTERNAL_DB_CONNECT_TIMEOUT: int = 10  # seconds
    # Request timeout applied to batch executions only; ad hoc queries run without one.
    BATCH_REQUEST_TIMEOUT_MS: int = 30_000
    BATCH_MAX_WORKERS: int = 16

    @property
    def credential_keyring(self) -> CredentialKeyring:
        """Key/IV pairs for every encrypted DatabaseProfile field."""
        return CredentialKeyring(
            host=CredentialKey(
                self.DATABASES_HOST_ENCRYPTION_KEY, self.DATABASES_HOST_IV_STRING
            ),
            database=CredentialKey(
                self.DATABASES_DATABASE_ENCRYPTION_KEY,
                self.DATABASES_DATABASE_IV_STRING,
            ),
            username=CredentialKey(
                self.DATABASES_USERNAME_ENCRYPTION_KEY,
                self.DATABASES_USERNAME_IV_STRING,
            ),
            password=CredentialKey(
                self.DATABASES_PASSWORD_ENCRYPTION_KEY,
                self.DATABASES_PASSWORD_IV_STRING,
            ),
            connect_string=CredentialKey(
                self.DATABASES_CONNECT_STRING_ENCRYPTION_KEY,
                self.DATABASES_CONNECT_STRING_IV_STRING,
            ),
        )

    def _check_keyring(self) -> None:
        missing = self.credential_keyring.missing_fields()
        if not missing:
            return
        message = (
            "Encryption key/IV not configured for: "
            f"{', '.join(missing)}. Stored credentials for these fields cannot be decrypted."
        )
        if self.ENVIRONMENT == "local":
            warnings.warn(message, stacklevel=1)
        else:
            raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_credential_keys(self) -> Self:
        self._check_keyring()
        return self


settings = Settings()  # type: ignore
