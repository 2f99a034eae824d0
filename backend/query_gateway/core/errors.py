"""
Error taxonomy for the query gateway.

Every error carries a user-facing ``message`` and ``suggestion`` plus the HTTP
status it maps to. Internal detail (driver errors, SQL, credentials) belongs
in the log, never in these fields.
"""

GENERIC_SUGGESTION = (
    "Please try again later. If this issue persists, contact our support team for assistance."
)


class GatewayError(Exception):
    """Base class: message/suggestion pair safe to return to the caller."""

    status_code: int = 500
    default_message: str = "Something went wrong."
    default_suggestion: str = GENERIC_SUGGESTION

    def __init__(
        self,
        message: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.suggestion = suggestion or self.default_suggestion
        super().__init__(self.message)

    def to_body(self) -> dict[str, str]:
        return {"message": self.message, "suggestion": self.suggestion}


class ValidationError(GatewayError):
    """Malformed request shape."""

    status_code = 400
    default_message = "Invalid request format. Request body must be a valid JSON object."
    default_suggestion = (
        "Please check your request format and ensure you are sending a properly structured JSON object."
    )


class NotFoundError(GatewayError):
    """Unknown database reference."""

    status_code = 404
    default_message = "Database not found."
    default_suggestion = "Please verify the database name and ensure it exists in the system."


class UnsupportedDialectError(GatewayError):
    status_code = 500
    default_suggestion = (
        "This operation only supports Oracle, SQL Server, and MySQL databases. "
        "Please use a supported database type."
    )

    def __init__(self, dialect: object) -> None:
        self.dialect = dialect
        super().__init__(f"Unsupported database type: {dialect}.")


class DatabaseConnectionError(GatewayError):
    """Opening the connection to the target database failed."""


class QueryExecutionError(GatewayError):
    """The SQL failed on the target database (transaction rolled back)."""


class ConfigurationError(GatewayError):
    """Missing or invalid encryption key/IV. Fatal misconfiguration."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__()

    def __str__(self) -> str:
        return f"Credential key for '{self.field}' is misconfigured: {self.detail}"


class DecryptionError(GatewayError):
    """Stored ciphertext is malformed or was encrypted with another key."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__()

    def __str__(self) -> str:
        return f"Could not decrypt '{self.field}': {self.detail}"
