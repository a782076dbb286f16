from enum import Enum

from .core.exceptions import ValidationError


class BookingStatus(str, Enum):
    """Booking lifecycle labels.

    Pending -> InProgress -> Completed, with Cancelled reachable from either
    non-terminal state. Completed and Cancelled are terminal.
    """

    pending = "Pending"
    in_progress = "InProgress"
    completed = "Completed"
    cancelled = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({BookingStatus.completed, BookingStatus.cancelled})

# Forward-only: a status may move to any later rank, never back.
_RANK = {
    BookingStatus.pending: 0,
    BookingStatus.in_progress: 1,
    BookingStatus.completed: 2,
}


def parse_status(value: "str | BookingStatus | None") -> BookingStatus:
    """Return the BookingStatus for *value* or raise ValidationError."""
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value or "").strip())
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}", field="status")


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    if current == target:
        return True
    if current.is_terminal:
        return False
    if target == BookingStatus.cancelled:
        return True
    return _RANK[target] > _RANK[current]


def ensure_transition(current: "str | BookingStatus", target: "str | BookingStatus") -> BookingStatus:
    """Validate ``current -> target`` and return the parsed target."""
    current_status = parse_status(current)
    target_status = parse_status(target)
    if not can_transition(current_status, target_status):
        raise ValidationError(
            f"Cannot change booking status from {current_status.value} to {target_status.value}",
            field="status",
        )
    return target_status
