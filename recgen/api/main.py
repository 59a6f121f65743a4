from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)


def _load_env_files() -> None:
    """Load environment variables from .env files.

    We load from current working directory and from repo root to be robust to different
    launch contexts (e.g., running uvicorn from project root or elsewhere).
    """
    load_dotenv()
    repo_root = Path(__file__).resolve().parents[2]
    root_env = repo_root / ".env"
    if root_env.exists():
        load_dotenv(dotenv_path=root_env, override=False)


_load_env_files()

app = FastAPI(title="Recording Test Generator", version="0.1.0")

# CORS for local UI dev server; adjust via env ALLOW_ORIGINS if needed
allow_origins = os.getenv("ALLOW_ORIGINS", "http://localhost:5178").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in allow_origins if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from .routers import health as r_health
from .routers import generator as r_generator

app.include_router(r_health.router)
app.include_router(r_generator.router)


def run() -> None:
    import uvicorn

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8001"))
    uvicorn.run("recgen.api.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    run()
