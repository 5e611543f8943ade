"""Convenience alias for the CLI entrypoint.

The CLI is implemented in `grant_liaison.liaison.main`.
"""

from __future__ import annotations

from grant_liaison.liaison.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
