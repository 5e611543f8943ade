"""Error kinds raised by the liaison engine.

Every operation validates its input before mutating anything, so any of these
errors means nothing was applied. None of them are transient.
"""

from __future__ import annotations


class LiaisonError(Exception):
    """Base class for domain errors surfaced to callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LiaisonError):
    """A required field is missing/empty or a value is outside its allowed set."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(LiaisonError):
    """The requested status is not reachable from the current status."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Illegal transition: {current} -> {target}")
        self.current = current
        self.target = target


class NotFound(LiaisonError):
    """Unknown application or call id."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class DoubleCompletionError(LiaisonError):
    """An outcome was already recorded for the call."""

    def __init__(self, call_id: str) -> None:
        super().__init__(f"Call already completed: {call_id}")
        self.call_id = call_id
