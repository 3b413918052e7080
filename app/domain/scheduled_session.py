"""
Scheduled session lifecycle.

States:
  scheduled  - initial
  completed  - terminal
  cancelled  - terminal

Deletion is allowed from any state and is not a transition.
"""

SESSION_STATUS_SCHEDULED = "scheduled"
SESSION_STATUS_COMPLETED = "completed"
SESSION_STATUS_CANCELLED = "cancelled"

VALID_SESSION_STATUSES = {
    SESSION_STATUS_SCHEDULED,
    SESSION_STATUS_COMPLETED,
    SESSION_STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    SESSION_STATUS_SCHEDULED: {SESSION_STATUS_COMPLETED, SESSION_STATUS_CANCELLED},
    SESSION_STATUS_COMPLETED: set(),
    SESSION_STATUS_CANCELLED: set(),
}


class SessionTransitionError(ValueError):
    pass


def validate_transition(current: str, target: str) -> None:
    """Raises SessionTransitionError if current -> target is not allowed."""
    if target not in VALID_SESSION_STATUSES:
        raise SessionTransitionError(f"Неверный статус сессии: {target}")
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise SessionTransitionError(
            f"Нельзя перевести сессию из статуса {current} в {target}"
        )
