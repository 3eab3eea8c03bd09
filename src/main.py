from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.transit import router as transit_router

app = FastAPI(title="Transit GPX Export")
app.include_router(transit_router)


def _reveal_errors() -> bool:
    raw = os.getenv("GPX_EXPORT_REVEAL_ERRORS") or ""
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer unexpected failures with a JSON body.

    Known failures are mapped to 4xx/5xx by the controllers; whatever reaches
    this handler is a bug, so its message stays server-side unless
    GPX_EXPORT_REVEAL_ERRORS is set.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )
    detail = "Internal Server Error"
    if _reveal_errors():
        detail = str(exc) or exc.__class__.__name__
    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
