"""
api.py
======
Optional FastAPI reporting server for a running :class:`~sim.sim_bridge.SimBridge`.

Start it alongside the simulation::

    python main.py --api              # → http://localhost:8000/snapshot

Endpoints
---------
* ``GET   /snapshot``      full world snapshot
* ``GET   /stats``         throughput / wait statistics
* ``GET   /export``        the JSON export document
* ``GET   /settings``      current settings (camelCase)
* ``PATCH /settings``      partial settings overrides, applied at the next tick
* ``POST  /mode/{mode}``   switch to ``fixed`` or ``adaptive``
* ``POST  /reset``         drop all vehicles and statistics

.. note::

   This server is **not** required to run the Pygame simulation.
   It exists for external integrations and testing.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

log = logging.getLogger("api")

# ── Pydantic request schemas ─────────────────────────────────────────────────


class SettingsPatch(BaseModel):
    """Partial settings update; omitted or null fields keep their value."""
    mode: Optional[str] = None
    greenDuration: Optional[float] = None
    yellowDuration: Optional[float] = None
    redDuration: Optional[float] = None
    carSpawnRate: Optional[float] = None
    carSpeed: Optional[float] = None
    turnRate: Optional[float] = None
    detectorDistance: Optional[float] = None


# ── FastAPI application ──────────────────────────────────────────────────────


def create_app(bridge: Any) -> FastAPI:
    """Build the app bound to *bridge*."""
    app = FastAPI(
        title="Traffic Intersection API",
        description="Reports a running four-way intersection simulation and accepts settings.",
        version="1.0",
    )

    @app.get("/snapshot")
    def get_snapshot() -> Dict[str, Any]:
        return bridge.get_snapshot()

    @app.get("/stats")
    def get_stats() -> Dict[str, Any]:
        return bridge.get_stats()

    @app.get("/export")
    def get_export() -> Dict[str, Any]:
        return bridge.export_data()

    @app.get("/settings")
    def get_settings() -> Dict[str, Any]:
        return bridge.get_settings()

    @app.patch("/settings")
    def patch_settings(patch: SettingsPatch) -> Dict[str, Any]:
        overrides = patch.model_dump(exclude_none=True)
        try:
            bridge.apply_settings(**overrides)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        log.info("Settings queued: %s", overrides)
        return {"queued": overrides}

    @app.post("/mode/{mode}")
    def post_mode(mode: str) -> Dict[str, Any]:
        try:
            bridge.set_mode(mode)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"mode": bridge.get_settings()["mode"]}

    @app.post("/reset")
    def post_reset() -> Dict[str, Any]:
        bridge.reset()
        return {"status": "reset"}

    return app


def serve(bridge: Any, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the server in the current thread (blocks)."""
    log.info("Starting API server on http://%s:%d", host, port)
    uvicorn.run(create_app(bridge), host=host, port=port, log_level="warning")
