"""
Batch execution: select definitions with the request's filter map, run each
one concurrently with its own connection, and collect a result per name.

A failing definition only ever produces its own QueryError entry; siblings
and the batch call itself are unaffected. Results are keyed by query name,
so definitions sharing a name overwrite each other (last to finish wins).
"""

import logging
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any

from query_gateway.core.repository import QueryRepository
from query_gateway.core.security import CredentialCodec
from query_gateway.engines.executor import QueryEngine
from query_gateway.engines.resolver import (
    EffectiveParameters,
    resolve_effective_parameters,
)
from query_gateway.engines.results import ExecutionResult, QueryError, QueryIdentity
from query_gateway.models import DatabaseProfile, QueryDefinition

logger = logging.getLogger(__name__)

_Unit = tuple[QueryIdentity, DatabaseProfile | None, EffectiveParameters]


class BatchCoordinator:
    def __init__(
        self,
        repository: QueryRepository,
        codec: CredentialCodec,
        *,
        request_timeout_ms: int | None,
        max_workers: int = 16,
    ) -> None:
        self.repository = repository
        self.engine = QueryEngine(repository, codec)
        self.request_timeout_ms = request_timeout_ms
        self.max_workers = max(1, max_workers)

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def select_definitions(self, request_body: Any) -> list[QueryDefinition]:
        """Definitions matching ``filterMap``; all active ones when it is absent or not an object."""
        filter_map = (
            request_body.get("filterMap") if isinstance(request_body, Mapping) else None
        )
        if not isinstance(filter_map, Mapping):
            filter_map = None
        return self.repository.find_query_definitions(filter_map)

    def execute_batch(self, request_body: Any) -> dict[str, ExecutionResult]:
        definitions = self.select_definitions(request_body)
        return self.execute_definitions(definitions, request_body)

    def execute_definitions(
        self, definitions: list[QueryDefinition], request_body: Any
    ) -> dict[str, ExecutionResult]:
        """Run every definition concurrently and join them all."""
        if not definitions:
            return {}
        units = self._prepare(definitions, request_body)
        results: dict[str, ExecutionResult] = {}
        workers = min(self.max_workers, len(units))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="query-batch"
        ) as pool:
            futures: dict[Future[ExecutionResult], QueryIdentity] = {
                pool.submit(self._run_unit, *unit): unit[0] for unit in units
            }
            for future in as_completed(futures):
                identity = futures[future]
                try:
                    result = future.result()
                except Exception:
                    logger.exception("Batch unit for %s crashed", identity.name)
                    result = QueryError(identity)
                results[identity.name] = result
        failed = sum(1 for r in results.values() if not r.ok)
        logger.info(
            "Batch finished: %d selected, %d failed", len(definitions), failed
        )
        return results

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare(
        self, definitions: list[QueryDefinition], request_body: Any
    ) -> list[_Unit]:
        """Resolve parameters and load profiles on the calling thread.

        The repository (and its session) is never touched by worker threads.
        """
        profiles: dict[Any, DatabaseProfile | None] = {}
        units: list[_Unit] = []
        for definition in definitions:
            identity = QueryIdentity.of(definition)
            params = resolve_effective_parameters(definition, request_body)
            units.append((identity, self._profile(params.database_id, profiles), params))
        return units

    def _profile(
        self, database_id: Any, cache: dict[Any, DatabaseProfile | None]
    ) -> DatabaseProfile | None:
        key = (type(database_id), database_id)  # True and 1.0 must not share 1's entry
        try:
            if key in cache:
                return cache[key]
        except TypeError:  # unhashable override value
            return None
        try:
            profile = self.repository.find_database_profile(database_id)
        except Exception:
            logger.exception("Failed to load database %r", database_id)
            profile = None
        cache[key] = profile
        return profile

    def _run_unit(
        self,
        identity: QueryIdentity,
        profile: DatabaseProfile | None,
        params: EffectiveParameters,
    ) -> ExecutionResult:
        return self.engine.process(
            identity, profile, params, request_timeout_ms=self.request_timeout_ms
        )


def serialize_results(results: Mapping[str, ExecutionResult]) -> dict[str, Any]:
    """``{name: rows | {message, suggestion}}`` for the HTTP response."""
    return {name: result.payload() for name, result in results.items()}
