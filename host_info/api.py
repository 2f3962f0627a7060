"""FastAPI application exposing host specs and resource usage."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .cache import CacheStore
from .config import Settings, get_settings
from .history import RollingHistory
from .metrics import fetch_specs, fetch_usage
from .probe import SystemProbe


def create_app(settings: Optional[Settings] = None, probe: Optional[SystemProbe] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Host Info Service",
        description="Lightweight FastAPI service exposing host specs and resource usage.",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.probe = probe or SystemProbe(cpu_sample_seconds=settings.cpu_sample_seconds)
    app.state.cache = CacheStore(ttl=settings.cache_ttl_seconds)
    app.state.cpu_history = RollingHistory(capacity=settings.history_length)

    @app.get("/specs", summary="Return host hardware and OS metadata", tags=["system"])
    async def specs(request: Request):
        state = request.app.state
        try:
            return await state.cache.get_cached_data(
                "specs", lambda: run_in_threadpool(fetch_specs, state.probe)
            )
        except Exception:
            logging.exception("Failed to fetch system specs")
            return JSONResponse(status_code=500, content={"error": "Failed to fetch system specs"})

    @app.get("/usage", summary="Return current resource usage", tags=["system"])
    async def usage(request: Request):
        state = request.app.state
        try:
            return await state.cache.get_cached_data(
                "usage", lambda: run_in_threadpool(fetch_usage, state.probe, state.cpu_history)
            )
        except Exception:
            logging.exception("Failed to fetch system usage")
            return JSONResponse(status_code=500, content={"error": "Failed to fetch system usage"})

    @app.get("/health", summary="Service health check", tags=["system"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
