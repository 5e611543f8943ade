"""Core liaison engine.

Provides:
- Settings loaded from .env
- Structured logging
- The application workflow, audit trail and follow-up scheduler
- A JSON-file backed store and the service facade over it
"""
