"""FastAPI server adapter for grant-liaison.

This module exposes a REST API over the liaison service.

Design intent:
- Keep business logic in `grant_liaison.liaison.*`
- Keep server-specific concerns (routing, CORS, HTTP error mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from grant_liaison.server.app import create_app
