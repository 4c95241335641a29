"""Reveal sequencing and the timing hints that keep clients in sync.

The server never waits on these timestamps. They are stamped into payloads
so every client can start the same animation at the same wall-clock
instant regardless of how long the message took to arrive.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ALREADY_OPENED, NO_STEP, NOT_IN_REVEAL, NOT_RECEIVER, ExchangeError
from .sessions import Phase, RevealState, Session

ROULETTE_LEAD_MS = 250
ROULETTE_DURATION_MS = 1700
CONFETTI_LEAD_MS = 120
CONFETTI_SEED_MASK = 0x9E3779B9


def now_ms() -> int:
    return int(time.time() * 1000)


def stamp_envelope(reveal: RevealState, now: int) -> None:
    reveal.reveal_start_at = now + ROULETTE_LEAD_MS
    reveal.reveal_duration_ms = ROULETTE_DURATION_MS


def confetti_seed(start_at: int) -> int:
    """32-bit seed derived from the confetti start time."""
    return (start_at ^ CONFETTI_SEED_MASK) & 0xFFFFFFFF


def current_step(session: Session) -> Optional[Dict[str, Any]]:
    if session.phase is not Phase.REVEAL or session.reveal is None:
        return None
    reveal = session.reveal
    pair = reveal.current_pair
    if pair is None:
        return None

    giver = session.participants.get(pair.from_id)
    recipient = session.participants.get(pair.to_id)
    if giver is None or recipient is None:
        return None

    return {
        "step": reveal.cursor + 1,
        "total": len(reveal.pairs),
        "fromName": giver.display_name,
        "toName": recipient.display_name,
        "toId": recipient.id,
        "title": pair.title,
        "opened": reveal.opened_current,
        "revealStartAt": reveal.reveal_start_at,
        "revealDurationMs": reveal.reveal_duration_ms,
    }


@dataclass(frozen=True)
class OpenedReveal:
    recipient_connection_id: str
    notice: Dict[str, Any]
    private: Dict[str, Any]
    confetti: Dict[str, int]


def open_current(session: Session, user_id: Optional[str], now: int) -> OpenedReveal:
    """Mark the current step opened by its recipient."""
    if session.phase is not Phase.REVEAL or session.reveal is None:
        raise ExchangeError(NOT_IN_REVEAL)
    step = current_step(session)
    if step is None:
        raise ExchangeError(NO_STEP)
    if step["toId"] != user_id:
        raise ExchangeError(NOT_RECEIVER)

    reveal = session.reveal
    if reveal.opened_current:
        raise ExchangeError(ALREADY_OPENED)

    reveal.opened_current = True
    pair = reveal.current_pair
    recipient = session.participants[pair.to_id]

    start_at = now + CONFETTI_LEAD_MS
    return OpenedReveal(
        recipient_connection_id=recipient.connection_id,
        notice={
            "fromName": step["fromName"],
            "toName": step["toName"],
            "title": pair.title,
            "step": step["step"],
            "total": step["total"],
        },
        private={
            "fromName": step["fromName"],
            "title": pair.title,
            "body": pair.body,
        },
        confetti={"startAt": start_at, "seed": confetti_seed(start_at)},
    )
