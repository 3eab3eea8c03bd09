from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from src.app.ports.output import IFileSaver, ITransitDataProvider
from src.domain.algorithms import gpx, selection
from src.domain.algorithms.selection import (
    Effect,
    FetchPatterns,
    FetchShape,
    SelectionState,
    Transition,
)
from src.domain.exceptions.export import (
    FetchFailed,
    MissingData,
    PrerequisiteMissing,
)
from src.domain.models.gpx import GpxDocument
from src.domain.models.transit import Pattern, Route

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SelectionSession:
    """Drives the route -> pattern -> shape selection for one user session.

    Owns the SelectionState, performs the fetches requested by transitions and
    feeds their results back. Fetch and prerequisite errors are recorded as the
    state's current error message instead of being raised; the next successful
    transition clears it.
    """

    provider: ITransitDataProvider
    author: str = gpx.DEFAULT_AUTHOR
    state: SelectionState = field(default_factory=SelectionState)
    routes: tuple[Route, ...] = ()

    async def load_routes(self) -> tuple[Route, ...]:
        try:
            routes = await self.provider.list_routes()
        except FetchFailed as exc:
            _logger.warning("Fetching routes failed: %s", exc)
            self.routes = ()
            self.state = replace(self.state, error=str(exc))
            return self.routes

        self.routes = tuple(
            sorted(routes, key=lambda r: (r.short_name, r.long_name, r.route_id))
        )
        if self.state.error is not None:
            self.state = replace(self.state, error=None)
        return self.routes

    def find_route(self, route_id: str) -> Route | None:
        return next((r for r in self.routes if r.route_id == route_id), None)

    def find_pattern(self, pattern_id: str) -> Pattern | None:
        return next(
            (p for p in self.state.patterns if p.pattern_id == pattern_id), None
        )

    async def select_route(self, route: Route) -> SelectionState:
        await self._apply(selection.select_route(self.state, route))
        return self.state

    async def select_pattern(self, pattern: Pattern) -> SelectionState:
        try:
            transition = selection.select_pattern(self.state, pattern)
        except PrerequisiteMissing as exc:
            _logger.info("Pattern selection rejected: %s", exc)
            self.state = replace(self.state, error=str(exc))
            return self.state

        await self._apply(transition)
        return self.state

    def reset(self) -> SelectionState:
        self.state = selection.reset(self.state).state
        return self.state

    def export(self, saver: IFileSaver | None = None) -> GpxDocument:
        """Serialize the current selection and hand it to the saver, if any.

        Raises PrerequisiteMissing or MissingData; the message is also kept as
        the state's current error.
        """

        try:
            route, pattern, shape = selection.export_triple(self.state)
            document = gpx.serialize(route, pattern, shape, author=self.author)
        except (PrerequisiteMissing, MissingData) as exc:
            _logger.info("Export aborted: %s", exc)
            self.state = replace(self.state, error=str(exc))
            raise

        if saver is not None:
            saver.save(
                content=document.encode(),
                mime_type=document.mime_type,
                filename=document.filename,
            )
        self.state = replace(self.state, error=None)
        return document

    async def _apply(self, transition: Transition) -> None:
        self.state = transition.state
        for effect in transition.effects:
            await self._run(effect)

    async def _run(self, effect: Effect) -> None:
        if isinstance(effect, FetchPatterns):
            try:
                patterns = await self.provider.list_patterns(effect.route_id)
            except FetchFailed as exc:
                _logger.warning(
                    "Fetching patterns for route %s failed: %s", effect.route_id, exc
                )
                transition = selection.patterns_failed(
                    self.state, effect.generation, str(exc)
                )
            else:
                transition = selection.patterns_loaded(
                    self.state, effect.generation, patterns
                )
        elif isinstance(effect, FetchShape):
            try:
                shape = await self.provider.get_shape(effect.shape_id)
            except FetchFailed as exc:
                _logger.warning(
                    "Fetching shape %s failed: %s", effect.shape_id, exc
                )
                transition = selection.shape_failed(
                    self.state, effect.generation, str(exc)
                )
            else:
                transition = selection.shape_loaded(
                    self.state, effect.generation, shape
                )
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

        if transition.state is self.state:
            _logger.debug(
                "Discarding stale result of %r (current generation %d)",
                effect,
                self.state.generation,
            )
        await self._apply(transition)
