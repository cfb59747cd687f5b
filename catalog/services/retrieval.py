from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, Sequence, Tuple, TypeVar

from catalog.core.config import settings
from catalog.core.logger import service_logger
from catalog.schemas.filters import FilterState
from catalog.schemas.results import Facets, ResultPage
from catalog.services.catalog_client import CatalogApiClient
from catalog.services.domains import CatalogDomain
from catalog.services.relaxation import FACETS_PLAN, LISTING_PLAN, expand_attempts


# Generic return type of one attempt.
T = TypeVar("T")


async def first_success(
    attempts: Sequence[Tuple[str, FilterState]],
    call: Callable[[FilterState], Awaitable[T]],
    timeout: float,
    label: str,
) -> Optional[Tuple[int, str, T]]:
    """
    Run `call` for each attempt, one at a time, until one succeeds.

    Returns `(index, attempt name, result)` for the first success, or None
    when every attempt failed. An attempt fails when it raises or exceeds
    `timeout` seconds; failures are logged and never propagated. Attempts
    after the first success are not issued.
    """
    for index, (name, state) in enumerate(attempts):
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(call(state), timeout=timeout)
        except Exception as exc:
            service_logger.log_attempt_failed(
                label=label,
                attempt=name,
                index=index,
                error=exc,
                duration_ms=(time.perf_counter() - start) * 1000,
                params=state.model_dump(mode="json"),
            )
            continue
        return index, name, result
    return None


async def fetch_listing(
    client: CatalogApiClient,
    domain: CatalogDomain,
    state: FilterState,
    timeout: float | None = None,
) -> ResultPage:
    """Listing for `state`, relaxed as needed; an empty page if nothing works."""
    label = f"{domain.name}.listing"
    attempts = expand_attempts(state, LISTING_PLAN)
    outcome = await first_success(
        attempts,
        lambda s: client.list_items(domain, s),
        timeout=settings.ATTEMPT_TIMEOUT_SECONDS if timeout is None else timeout,
        label=label,
    )

    if outcome is None:
        service_logger.log_exhausted(label, len(attempts))
        return ResultPage.empty()

    index, name, page = outcome
    if index > 0:
        service_logger.log_degraded_result(label, name, index, len(attempts))
    page.applied_relaxation = name
    return page


async def fetch_facets(
    client: CatalogApiClient,
    domain: CatalogDomain,
    state: FilterState,
    timeout: float | None = None,
) -> Facets:
    """Facets for `state`, relaxed as needed; empty dimensions if nothing works."""
    label = f"{domain.name}.facets"
    attempts = expand_attempts(state, FACETS_PLAN)
    outcome = await first_success(
        attempts,
        lambda s: client.get_facets(domain, s),
        timeout=settings.ATTEMPT_TIMEOUT_SECONDS if timeout is None else timeout,
        label=label,
    )

    if outcome is None:
        service_logger.log_exhausted(label, len(attempts))
        return Facets.empty(domain.dimensions)

    index, name, facets = outcome
    if index > 0:
        service_logger.log_degraded_result(label, name, index, len(attempts))
    return facets
