"""FastAPI app factory.

Endpoints are thin wrappers over :class:`LiaisonService`. Run with, e.g.:
`uvicorn grant_liaison.server.app:create_app --factory`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grant_liaison import __version__
from grant_liaison.liaison.service import LiaisonService
from grant_liaison.server.config import ServerSettings
from grant_liaison.server.router import router

logger = logging.getLogger(__name__)


def create_app(
    *, service: LiaisonService | None = None, settings: ServerSettings | None = None
) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="Grant Liaison",
        version=__version__,
        description="REST API over the grant application workflow and follow-up scheduler.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.settings = settings
    app.state.service = service or LiaisonService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    logger.info(
        "Liaison API ready",
        extra={"state_file": str(settings.state_file), "version": __version__},
    )
    return app
