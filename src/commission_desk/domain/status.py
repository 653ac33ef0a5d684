"""Submission status values, input normalization and allowed transitions."""

from enum import StrEnum

from commission_desk.domain.errors import ValidationError


class SubmissionStatus(StrEnum):
    """Canonical status values stored on submissions."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


COMMISSION_STATUSES = frozenset(SubmissionStatus)
ENQUIRY_STATUSES = frozenset({SubmissionStatus.NEW, SubmissionStatus.COMPLETED})

# Spellings seen from admin clients, folded onto canonical values.
_ALIASES: dict[str, SubmissionStatus] = {
    "new": SubmissionStatus.NEW,
    "in_progress": SubmissionStatus.IN_PROGRESS,
    "progress": SubmissionStatus.IN_PROGRESS,
    "inprogress": SubmissionStatus.IN_PROGRESS,
    "in-progress": SubmissionStatus.IN_PROGRESS,
    "in progress": SubmissionStatus.IN_PROGRESS,
    "completed": SubmissionStatus.COMPLETED,
    "complete": SubmissionStatus.COMPLETED,
    "done": SubmissionStatus.COMPLETED,
}

_TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.NEW: frozenset(SubmissionStatus),
    SubmissionStatus.IN_PROGRESS: frozenset(SubmissionStatus),
    SubmissionStatus.COMPLETED: frozenset(
        {SubmissionStatus.COMPLETED, SubmissionStatus.NEW}
    ),
}


def _status_key(raw: str) -> str:
    return " ".join(raw.lower().split())


def normalize_status(
    raw: str, allowed: frozenset[SubmissionStatus] = COMMISSION_STATUSES
) -> SubmissionStatus:
    """Map client input onto a canonical status or raise ValidationError."""
    status = _ALIASES.get(_status_key(raw))
    if status is None or status not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValidationError(f"Unknown status '{raw}' (expected one of: {choices})")
    return status


def coerce_stored_status(raw: object) -> SubmissionStatus:
    """Read a stored status, treating anything unrecognized as ``new``."""
    if isinstance(raw, str):
        status = _ALIASES.get(_status_key(raw))
        if status is not None:
            return status
    return SubmissionStatus.NEW


def ensure_transition(current: SubmissionStatus, target: SubmissionStatus) -> None:
    """Raise ValidationError when ``current -> target`` is not permitted."""
    if target not in _TRANSITIONS[current]:
        raise ValidationError(f"Cannot move a submission from {current} to {target}")
