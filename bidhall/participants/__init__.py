from .directory import (
    BalanceInvariantError,
    DuplicateNameError,
    InvalidNameError,
    Participant,
    ParticipantDirectory,
    ParticipantError,
)

__all__ = [
    "BalanceInvariantError",
    "DuplicateNameError",
    "InvalidNameError",
    "Participant",
    "ParticipantDirectory",
    "ParticipantError",
]
