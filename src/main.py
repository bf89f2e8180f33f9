from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.commutes import router as commutes_router
from src.adapters.api.controllers.feasibility import router as feasibility_router
from src.adapters.api.controllers.legs import router as legs_router
from src.adapters.api.controllers.systems import router as systems_router
from src.domain.exceptions import (
    InvalidInput,
    NotFound,
    SourceUnavailable,
    UnsupportedSystem,
)

app = FastAPI(title="Commute Tracker")
app.include_router(legs_router)
app.include_router(commutes_router)
app.include_router(feasibility_router)
app.include_router(systems_router)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(UnsupportedSystem)
async def unsupported_system_handler(
    request: Request, exc: UnsupportedSystem
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "unsupported": True, "system": exc.system},
    )


@app.exception_handler(SourceUnavailable)
async def source_unavailable_handler(
    request: Request, exc: SourceUnavailable
) -> JSONResponse:
    logging.getLogger("uvicorn.error").warning(
        "Upstream unavailable: %s", exc, extra={"path": str(request.url.path)}
    )
    return JSONResponse(
        status_code=503, content={"detail": str(exc), "system": exc.system}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the dashboard can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("COMMUTE_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
