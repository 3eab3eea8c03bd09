from __future__ import annotations

from abc import ABC, abstractmethod


class IFileSaver(ABC):
    """Port for handing an exported file to a "save as" capability."""

    @abstractmethod
    def save(self, *, content: bytes, mime_type: str, filename: str) -> None:
        """Save the payload under the suggested file name. Nothing is returned."""
