"""Application status workflow.

This package holds:
- the static transition table with milestones and suggested actions
- the append-only audit trail of transitions
- the state machine that validates and applies transitions

Transitions never happen implicitly; every status change goes through
`ApplicationStateMachine.update_status` and leaves exactly one history entry.
"""

__all__: list[str] = []
