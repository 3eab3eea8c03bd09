from __future__ import annotations

from dataclasses import dataclass

GPX_MIME_TYPE = "application/gpx+xml"


@dataclass(frozen=True, slots=True)
class GpxDocument:
    content: str
    filename: str
    mime_type: str = GPX_MIME_TYPE

    def encode(self) -> bytes:
        return self.content.encode("utf-8")
