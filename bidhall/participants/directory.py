"""In-memory participant directory keyed by generated identifiers."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)


class ParticipantError(ValueError):
    """Raised when a join request is rejected."""


class InvalidNameError(ParticipantError):
    """Raised when a name is empty or too long."""


class DuplicateNameError(ParticipantError):
    """Raised when a name is already taken."""


class BalanceInvariantError(RuntimeError):
    """Raised when a settlement debit would leave a balance negative."""


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    balance: int

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "coins": self.balance}


class ParticipantDirectory:
    def __init__(self, *, initial_balance: int = 500, max_name_length: int = 20) -> None:
        self._initial_balance = initial_balance
        self._max_name_length = max_name_length
        self._participants: dict[str, Participant] = {}
        self._names: set[str] = set()

    def create(self, name: str) -> Participant:
        if not isinstance(name, str) or not name.strip():
            raise InvalidNameError("name is required")
        name = name.strip()
        if len(name) > self._max_name_length:
            raise InvalidNameError(f"name must be at most {self._max_name_length} characters")
        if name in self._names:
            raise DuplicateNameError(f"name {name!r} is already taken")
        participant = Participant(
            id=f"p_{uuid.uuid4().hex}",
            name=name,
            balance=self._initial_balance,
        )
        self._participants[participant.id] = participant
        self._names.add(name)
        logger.info("participant joined id=%s name=%s", participant.id, name)
        return participant

    def get(self, participant_id: str) -> Participant | None:
        return self._participants.get(participant_id)

    def all(self) -> list[Participant]:
        return list(self._participants.values())

    def debit(self, participant_id: str, amount: int) -> Participant:
        if amount < 1:
            raise ValueError("debit amount must be positive")
        participant = self._participants.get(participant_id)
        if participant is None:
            raise BalanceInvariantError(f"cannot debit unknown participant {participant_id}")
        remaining = participant.balance - amount
        if remaining < 0:
            raise BalanceInvariantError(
                f"debit of {amount} would leave {participant_id} at {remaining}"
            )
        updated = replace(participant, balance=remaining)
        self._participants[participant_id] = updated
        return updated

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def __len__(self) -> int:
        return len(self._participants)
