from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.transit import Pattern, Route, Shape


class ITransitDataProvider(ABC):
    """Port for the read-only transit data API.

    Implementations raise FetchFailed on network, HTTP or payload errors.
    """

    @abstractmethod
    async def list_routes(self) -> tuple[Route, ...]:
        raise NotImplementedError

    @abstractmethod
    async def list_patterns(self, route_id: str) -> tuple[Pattern, ...]:
        raise NotImplementedError

    @abstractmethod
    async def get_shape(self, shape_id: str) -> Shape:
        raise NotImplementedError
