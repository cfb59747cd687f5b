"""
Ordered relaxation plans for degraded catalog queries.

A plan is plain data: a tuple of named, pure `FilterState -> FilterState`
steps. Every step is applied to the requested state (not to the previous
step's output), and the runner in `retrieval` tries them in order.
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Sequence, Tuple

from catalog.schemas.filters import FilterState


Relaxation = Callable[[FilterState], FilterState]


class RelaxationStep(NamedTuple):
    name: str
    relax: Relaxation


def as_requested(state: FilterState) -> FilterState:
    return state


def drop_secondary(state: FilterState) -> FilterState:
    return state.replace(**{state.SECONDARY_FIELD: None})


def drop_taxonomy(state: FilterState) -> FilterState:
    return state.replace(**{state.TAXONOMY_FIELD: None})


def drop_facets(state: FilterState) -> FilterState:
    return state.replace(**{state.TAXONOMY_FIELD: None, state.SECONDARY_FIELD: None})


def drop_price(state: FilterState) -> FilterState:
    return state.replace(min_price=None, max_price=None)


def minimal(state: FilterState) -> FilterState:
    """Keep only the search term, sort and pagination."""
    return type(state).model_validate(
        {
            "q": state.q,
            "sort": state.sort,
            "page": state.page,
            "per_page": state.per_page,
        }
    )


LISTING_PLAN: Tuple[RelaxationStep, ...] = (
    RelaxationStep("as_requested", as_requested),
    RelaxationStep("drop_secondary", drop_secondary),
    RelaxationStep("drop_taxonomy", drop_taxonomy),
    RelaxationStep("drop_facets", drop_facets),
    RelaxationStep("drop_price", drop_price),
    RelaxationStep("minimal", minimal),
)

FACETS_PLAN: Tuple[RelaxationStep, ...] = (
    RelaxationStep("as_requested", as_requested),
    RelaxationStep("drop_secondary", drop_secondary),
    RelaxationStep("drop_taxonomy", drop_taxonomy),
    RelaxationStep("drop_price", drop_price),
    RelaxationStep("minimal", minimal),
)


def expand_attempts(
    state: FilterState, plan: Sequence[RelaxationStep]
) -> List[Tuple[str, FilterState]]:
    """
    Materialise a plan into `(step name, state)` attempts.

    Steps that produce a state already scheduled are skipped, e.g.
    `drop_secondary` when no secondary facet is selected.
    """
    attempts: List[Tuple[str, FilterState]] = []
    for step in plan:
        candidate = step.relax(state)
        if any(candidate == existing for _, existing in attempts):
            continue
        attempts.append((step.name, candidate))
    return attempts
