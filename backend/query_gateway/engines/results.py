"""
Per-query execution results: Success(rows) or Error(message, suggestion).

Both carry the originating definition's identity for traceability; only the
payload is serialised into the batch response.
"""

from dataclasses import dataclass, field
from typing import Any

from query_gateway.models import QueryDefinition

BATCH_ERROR_MESSAGE = "The query data creation process encountered a technical issue."
BATCH_ERROR_SUGGESTION = "Please try again later or contact support if the issue persists."


@dataclass(frozen=True)
class QueryIdentity:
    id: int | None
    name: str
    group_name: str | None
    database_id: Any

    @classmethod
    def of(cls, definition: QueryDefinition) -> "QueryIdentity":
        return cls(
            id=definition.id,
            name=definition.name,
            group_name=definition.group_name,
            database_id=definition.database_id,
        )


@dataclass(frozen=True)
class QuerySuccess:
    query: QueryIdentity
    rows: list[dict[str, Any]] = field(default_factory=list)
    ok: bool = field(default=True, init=False)

    def payload(self) -> list[dict[str, Any]]:
        return self.rows


@dataclass(frozen=True)
class QueryError:
    query: QueryIdentity
    message: str = BATCH_ERROR_MESSAGE
    suggestion: str = BATCH_ERROR_SUGGESTION
    ok: bool = field(default=False, init=False)

    def payload(self) -> dict[str, str]:
        return {"message": self.message, "suggestion": self.suggestion}


ExecutionResult = QuerySuccess | QueryError
