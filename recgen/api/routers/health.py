from __future__ import annotations

import os

from fastapi import APIRouter

from ...core.settings import FrameworkPaths


router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthcheck() -> dict:
    """Liveness plus whether the default framework root has its configuration file."""
    paths = FrameworkPaths.resolve()
    return {
        "status": "ok",
        "service": "recording-test-generator",
        "version": os.getenv("APP_VERSION", "dev"),
        "frameworkRoot": str(paths.root),
        "configurationFound": paths.properties().exists(),
    }
