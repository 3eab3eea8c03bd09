from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IFileSaver

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DirectoryFileSaver(IFileSaver):
    """Writes exported files into a single directory.

    Env vars:
      - GPX_EXPORT_DIR: target directory (default 'exports')
    """

    directory: str | Path | None = None

    def _base(self) -> Path:
        value = self.directory or os.getenv("GPX_EXPORT_DIR") or "exports"
        return Path(value)

    def save(self, *, content: bytes, mime_type: str, filename: str) -> None:
        base = self._base().resolve()
        target = (base / filename).resolve()
        if target.parent != base:
            raise ValueError(f"Refusing to write outside {base}: {filename!r}")

        base.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        _logger.info("Saved %s (%s, %d bytes)", target, mime_type, len(content))
