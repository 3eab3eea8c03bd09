from __future__ import annotations

import pytest

from src.domain.algorithms import selection
from src.domain.algorithms.selection import (
    FetchPatterns,
    FetchShape,
    SelectionStage,
    SelectionState,
)
from src.domain.exceptions.export import PrerequisiteMissing
from src.domain.models import Pattern, Route, Shape

R1 = Route(route_id="1", short_name="101", long_name="Centro")
R2 = Route(route_id="2", short_name="202", long_name="Praia")
P1 = Pattern(pattern_id="p1", headsign="Sul", shape_id="s1", route_id="1")
P2 = Pattern(pattern_id="p2", headsign="Norte", shape_id="s2", route_id="1")
Q1 = Pattern(pattern_id="q1", headsign="Mar", shape_id="t1", route_id="2")
S1 = Shape(shape_id="s1", coordinates=((-9.14, 38.72),))
S2 = Shape(shape_id="s2", coordinates=((-9.15, 38.73),))


def _shape_ready() -> SelectionState:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_loaded(
        t.state, t.effects[0].generation, (P1, P2)
    ).state
    t = selection.select_pattern(state, P1)
    return selection.shape_loaded(t.state, t.effects[0].generation, S1).state


def test_initial_state_is_idle() -> None:
    state = SelectionState()

    assert state.stage is SelectionStage.IDLE
    assert not state.can_export


def test_select_route_requests_patterns_and_bumps_generation() -> None:
    t = selection.select_route(SelectionState(), R1)

    assert t.state.route == R1
    assert t.state.loading
    assert t.state.stage is SelectionStage.ROUTE_CHOSEN
    assert t.effects == (FetchPatterns(route_id="1", generation=1),)


def test_patterns_loaded_populates_list() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_loaded(t.state, 1, (P1, P2)).state

    assert state.patterns == (P1, P2)
    assert not state.loading
    assert state.error is None
    assert state.stage is SelectionStage.ROUTE_CHOSEN


def test_patterns_loaded_drops_patterns_of_other_routes() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_loaded(t.state, 1, (P1, Q1)).state

    assert state.patterns == (P1,)


def test_patterns_failed_sets_error_and_empty_list() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_failed(t.state, 1, "boom").state

    assert state.stage is SelectionStage.ROUTE_CHOSEN
    assert state.patterns == ()
    assert state.error == "boom"
    assert not state.loading


def test_select_route_clears_downstream_selection() -> None:
    state = _shape_ready()
    assert state.stage is SelectionStage.SHAPE_READY

    t = selection.select_route(state, R2)

    assert t.state.route == R2
    assert t.state.pattern is None
    assert t.state.shape is None
    assert t.state.patterns == ()
    assert t.state.generation == state.generation + 1


def test_stale_patterns_result_is_discarded() -> None:
    first = selection.select_route(SelectionState(), R1)
    second = selection.select_route(first.state, R2)

    late = selection.patterns_loaded(
        second.state, first.effects[0].generation, (P1, P2)
    )

    assert late.state is second.state
    assert late.state.patterns == ()

    late_failure = selection.patterns_failed(
        second.state, first.effects[0].generation, "boom"
    )
    assert late_failure.state.error is None


def test_select_pattern_without_route_is_rejected() -> None:
    state = SelectionState()

    with pytest.raises(PrerequisiteMissing):
        selection.select_pattern(state, P1)

    assert state == SelectionState()


def test_select_pattern_of_other_route_is_rejected() -> None:
    t = selection.select_route(SelectionState(), R1)

    with pytest.raises(PrerequisiteMissing):
        selection.select_pattern(t.state, Q1)


def test_select_pattern_requests_shape_and_clears_previous_shape() -> None:
    state = _shape_ready()

    t = selection.select_pattern(state, P2)

    assert t.state.pattern == P2
    assert t.state.shape is None
    assert t.state.stage is SelectionStage.PATTERN_CHOSEN
    assert t.state.patterns == (P1, P2)
    assert t.effects == (FetchShape(shape_id="s2", generation=state.generation + 1),)


def test_stale_shape_result_is_discarded() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_loaded(t.state, 1, (P1, P2)).state
    first = selection.select_pattern(state, P1)
    second = selection.select_pattern(first.state, P2)

    late = selection.shape_loaded(second.state, first.effects[0].generation, S1)
    assert late.state.shape is None

    ready = selection.shape_loaded(second.state, second.effects[0].generation, S2)
    assert ready.state.shape == S2
    assert ready.state.stage is SelectionStage.SHAPE_READY


def test_shape_failed_stays_in_pattern_chosen() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.patterns_loaded(t.state, 1, (P1,)).state
    t = selection.select_pattern(state, P1)

    state = selection.shape_failed(t.state, t.effects[0].generation, "timeout").state

    assert state.stage is SelectionStage.PATTERN_CHOSEN
    assert state.error == "timeout"
    assert not state.can_export


def test_reset_returns_to_idle_and_invalidates_pending_fetches() -> None:
    t = selection.select_route(SelectionState(), R1)
    state = selection.reset(t.state).state

    assert state.stage is SelectionStage.IDLE
    assert state.generation == t.state.generation + 1

    late = selection.patterns_loaded(state, t.effects[0].generation, (P1,))
    assert late.state.route is None
    assert late.state.patterns == ()


def test_export_triple_requires_loaded_shape() -> None:
    t = selection.select_route(SelectionState(), R1)
    with pytest.raises(PrerequisiteMissing):
        selection.export_triple(t.state)

    assert selection.export_triple(_shape_ready()) == (R1, P1, S1)


def test_pattern_picked_before_list_arrives_keeps_the_list() -> None:
    t = selection.select_route(SelectionState(), R1)
    fetch_patterns = t.effects[0]
    picked = selection.select_pattern(t.state, P1)

    state = selection.patterns_loaded(
        picked.state, fetch_patterns.generation, (P1, P2)
    ).state
    assert state.patterns == (P1, P2)
    assert state.pattern == P1
    assert state.loading

    state = selection.shape_loaded(state, picked.effects[0].generation, S1).state
    assert state.stage is SelectionStage.SHAPE_READY
    assert not state.loading
