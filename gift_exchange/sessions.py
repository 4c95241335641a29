"""Session state and the registry that owns it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from .config import DEFAULT_CODE_ALPHABET, DEFAULT_CODE_LENGTH
from .errors import CODE_EXHAUSTED, PARTICIPANT_NOT_FOUND, SESSION_NOT_FOUND, ExchangeError
from .identifiers import generate_session_code, normalize_session_code

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 12


class Phase(str, Enum):
    LOBBY = "lobby"
    WRITE = "write"
    REVEAL = "reveal"
    DONE = "done"


@dataclass
class Gift:
    title: str
    body: str


@dataclass
class Participant:
    id: str
    connection_id: str
    display_name: str
    has_submitted: bool = False
    message: Optional[Gift] = None

    def clear_submission(self) -> None:
        self.has_submitted = False
        self.message = None


@dataclass(frozen=True)
class Pair:
    from_id: str
    to_id: str
    title: str
    body: str


@dataclass
class RevealState:
    pairs: List[Pair]
    cursor: int = 0
    opened_current: bool = False
    reveal_start_at: int = 0
    reveal_duration_ms: int = 0

    @property
    def current_pair(self) -> Optional[Pair]:
        if 0 <= self.cursor < len(self.pairs):
            return self.pairs[self.cursor]
        return None

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.pairs)


@dataclass
class Session:
    code: str
    host_connection_id: str
    phase: Phase = Phase.LOBBY
    participants: Dict[str, Participant] = field(default_factory=dict)
    reveal: Optional[RevealState] = None
    submission_chime: int = 0

    def is_host(self, connection_id: str) -> bool:
        return self.host_connection_id == connection_id

    def participant(self, participant_id: str) -> Participant:
        participant = None
        if isinstance(participant_id, str):
            participant = self.participants.get(participant_id)
        if participant is None:
            raise ExchangeError(PARTICIPANT_NOT_FOUND)
        return participant

    def participant_for_connection(self, connection_id: str) -> Optional[Participant]:
        for participant in self.participants.values():
            if participant.connection_id == connection_id:
                return participant
        return None

    def add_participant(self, participant: Participant) -> None:
        self.participants[participant.id] = participant

    def remove_participant(self, participant_id: str) -> Optional[Participant]:
        if not isinstance(participant_id, str):
            return None
        return self.participants.pop(participant_id, None)

    def all_submitted(self) -> bool:
        return len(self.participants) >= 2 and all(
            participant.has_submitted for participant in self.participants.values()
        )


class SessionRegistry:
    """Process-wide code -> Session mapping and the only writer of it."""

    def __init__(
        self,
        code_alphabet: str = DEFAULT_CODE_ALPHABET,
        code_length: int = DEFAULT_CODE_LENGTH,
        code_factory: Optional[Callable[[str, int], str]] = None,
    ) -> None:
        self._sessions: Dict[str, Session] = {}
        self._code_alphabet = code_alphabet
        self._code_length = code_length
        self._code_factory = code_factory or generate_session_code

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, code: object) -> bool:
        return code in self._sessions

    def create(self, host_connection_id: str) -> Session:
        for _ in range(MAX_CODE_ATTEMPTS):
            # Stored in the same form lookups normalize typed codes to.
            candidate = normalize_session_code(
                self._code_factory(self._code_alphabet, self._code_length)
            )
            if candidate and candidate not in self._sessions:
                session = Session(code=candidate, host_connection_id=host_connection_id)
                self._sessions[candidate] = session
                logger.info("Created session %s for host %s", candidate, host_connection_id)
                return session
        raise ExchangeError(CODE_EXHAUSTED, "Unable to allocate a session code right now.")

    def lookup(self, code: Optional[str]) -> Session:
        session = self._sessions.get(code) if code else None
        if session is None:
            raise ExchangeError(SESSION_NOT_FOUND)
        return session

    def delete(self, code: str) -> None:
        if self._sessions.pop(code, None) is not None:
            logger.info("Deleted session %s", code)

    def sessions_for_connection(self, connection_id: str) -> List[Session]:
        return [
            session
            for session in self._sessions.values()
            if session.is_host(connection_id)
            or session.participant_for_connection(connection_id) is not None
        ]
