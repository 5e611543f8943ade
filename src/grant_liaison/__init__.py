"""Grant Liaison.

The status workflow and follow-up scheduling engine behind the grant liaison
dashboard:
- guarded application status transitions with an append-only audit trail
- follow-up call scheduling and outcome recording
- derived statistics over applications and calls
"""

__version__ = "0.1.0"

from grant_liaison.liaison.config import LiaisonSettings

__all__ = ["__version__", "LiaisonSettings"]
