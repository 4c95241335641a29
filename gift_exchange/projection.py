"""Public views of a session and the addressed messages built from them.

Gift bodies never appear here. They go out only in the private reveal
addressed to the recipient's connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .reveal import current_step
from .sessions import Session

ROOM_UPDATE = "room-update"
ROULETTE_STEP = "roulette-step"
SUBMIT_CHIME = "submit-chime"
OPENED_NOTICE = "opened-notice"
PRIVATE_REVEAL = "private-reveal"
CONFETTI_TRIGGER = "confetti-trigger"
SESSION_CLOSED = "session-closed"
SESSION_DONE = "session-done"


@dataclass(frozen=True)
class Delivery:
    event: str
    payload: Optional[Dict[str, Any]]
    to: str


def public_view(session: Session) -> Dict[str, Any]:
    return {
        "code": session.code,
        "hostConnectionId": session.host_connection_id,
        "phase": session.phase.value,
        "participants": [
            {
                "id": participant.id,
                "name": participant.display_name,
                "submitted": participant.has_submitted,
            }
            for participant in session.participants.values()
        ],
        "step": current_step(session),
    }


def to_session(session: Session, event: str, payload=None) -> Delivery:
    return Delivery(event=event, payload=payload, to=session.code)


def to_connection(connection_id: str, event: str, payload=None) -> Delivery:
    return Delivery(event=event, payload=payload, to=connection_id)


def room_update(session: Session) -> Delivery:
    return to_session(session, ROOM_UPDATE, public_view(session))


def roulette_step(session: Session) -> Optional[Delivery]:
    step = current_step(session)
    if step is None:
        return None
    return to_session(session, ROULETTE_STEP, step)
