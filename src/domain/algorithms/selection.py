from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from src.domain.exceptions.export import PrerequisiteMissing
from src.domain.models.transit import Pattern, Route, Shape


class SelectionStage(str, Enum):
    IDLE = "idle"
    ROUTE_CHOSEN = "route_chosen"
    PATTERN_CHOSEN = "pattern_chosen"
    SHAPE_READY = "shape_ready"


@dataclass(frozen=True, slots=True)
class FetchPatterns:
    route_id: str
    generation: int


@dataclass(frozen=True, slots=True)
class FetchShape:
    shape_id: str
    generation: int


Effect = FetchPatterns | FetchShape


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Route -> Pattern -> Shape selection.

    Invariants:
      - pattern is set only if it belongs to route
      - shape is set only if it is the pattern's shape
      - generation increases on every selection change; a shape result carrying
        another generation is stale
      - route_generation is the generation at which the route was chosen; a
        pattern list carrying another one is stale, so picking a pattern does
        not invalidate the pending list of the same route
    """

    route: Route | None = None
    patterns: tuple[Pattern, ...] = ()
    pattern: Pattern | None = None
    shape: Shape | None = None
    generation: int = 0
    route_generation: int = 0
    loading_patterns: bool = False
    loading_shape: bool = False
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.loading_patterns or self.loading_shape

    @property
    def stage(self) -> SelectionStage:
        if self.route is None:
            return SelectionStage.IDLE
        if self.pattern is None:
            return SelectionStage.ROUTE_CHOSEN
        if self.shape is None:
            return SelectionStage.PATTERN_CHOSEN
        return SelectionStage.SHAPE_READY

    @property
    def can_export(self) -> bool:
        return self.stage is SelectionStage.SHAPE_READY


@dataclass(frozen=True, slots=True)
class Transition:
    state: SelectionState
    effects: tuple[Effect, ...] = field(default_factory=tuple)


def select_route(state: SelectionState, route: Route) -> Transition:
    generation = state.generation + 1
    next_state = SelectionState(
        route=route,
        generation=generation,
        route_generation=generation,
        loading_patterns=True,
    )
    return Transition(
        next_state, (FetchPatterns(route_id=route.route_id, generation=generation),)
    )


def patterns_loaded(
    state: SelectionState, generation: int, patterns: tuple[Pattern, ...]
) -> Transition:
    if generation != state.route_generation or state.route is None:
        return Transition(state)
    route_id = state.route.route_id
    own = tuple(p for p in patterns if p.route_id == route_id)
    return Transition(replace(state, patterns=own, loading_patterns=False, error=None))


def patterns_failed(state: SelectionState, generation: int, message: str) -> Transition:
    if generation != state.route_generation or state.route is None:
        return Transition(state)
    return Transition(replace(state, patterns=(), loading_patterns=False, error=message))


def select_pattern(state: SelectionState, pattern: Pattern) -> Transition:
    """Select a pattern of the current route and request its shape.

    Raises PrerequisiteMissing if no route is selected or the pattern belongs
    to another route; the given state is left as is.
    """

    if state.route is None:
        raise PrerequisiteMissing("Select a route before choosing a pattern")
    if pattern.route_id != state.route.route_id:
        raise PrerequisiteMissing(
            f"Pattern {pattern.pattern_id!r} does not belong to route "
            f"{state.route.route_id!r}"
        )

    generation = state.generation + 1
    next_state = replace(
        state,
        pattern=pattern,
        shape=None,
        generation=generation,
        loading_shape=True,
        error=None,
    )
    return Transition(
        next_state, (FetchShape(shape_id=pattern.shape_id, generation=generation),)
    )


def shape_loaded(state: SelectionState, generation: int, shape: Shape) -> Transition:
    if generation != state.generation or state.pattern is None:
        return Transition(state)
    if shape.shape_id != state.pattern.shape_id:
        return Transition(state)
    return Transition(replace(state, shape=shape, loading_shape=False, error=None))


def shape_failed(state: SelectionState, generation: int, message: str) -> Transition:
    if generation != state.generation or state.pattern is None:
        return Transition(state)
    return Transition(replace(state, shape=None, loading_shape=False, error=message))


def reset(state: SelectionState) -> Transition:
    generation = state.generation + 1
    return Transition(
        SelectionState(generation=generation, route_generation=generation)
    )


def export_triple(state: SelectionState) -> tuple[Route, Pattern, Shape]:
    if state.route is None or state.pattern is None or state.shape is None:
        raise PrerequisiteMissing("Select a route and a pattern before exporting")
    return state.route, state.pattern, state.shape
