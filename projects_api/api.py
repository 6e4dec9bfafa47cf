"""
FastAPI app entry point. Keep as `uvicorn projects_api.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .logs import ensure_log_schema
from .services.project_svc import ensure_project_schema

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="projects-api", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    ensure_log_schema()
    ensure_project_schema()


# base and logs first: "/{project_id}" would otherwise shadow /health and /version
from .routes import base as base_routes
from .routes import logs as logs_routes
from .routes import projects as projects_routes

app.include_router(base_routes.router)
app.include_router(logs_routes.router)
app.include_router(projects_routes.router)
