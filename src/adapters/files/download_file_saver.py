from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from src.app.ports.output import IFileSaver


@dataclass(slots=True)
class DownloadFileSaver(IFileSaver):
    """Captures an export so the API can return it as an attachment."""

    content: bytes = b""
    mime_type: str = "application/octet-stream"
    filename: str | None = None

    def save(self, *, content: bytes, mime_type: str, filename: str) -> None:
        self.content = content
        self.mime_type = mime_type
        self.filename = filename

    def content_disposition(self) -> str:
        filename = self.filename or "download"
        ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "download"
        return (
            f'attachment; filename="{ascii_name}"; '
            f"filename*=UTF-8''{quote(filename)}"
        )
