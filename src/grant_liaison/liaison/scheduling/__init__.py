"""Follow-up call scheduling."""

__all__: list[str] = []
