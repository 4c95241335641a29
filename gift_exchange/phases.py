"""Guarded phase transitions: lobby -> write -> reveal -> done."""

from __future__ import annotations

import logging
import random
from typing import Optional

from .errors import (
    BODY_REQUIRED,
    NEED_2_OR_MORE,
    NOT_HOST,
    NOT_IN_REVEAL,
    NOT_IN_WRITE,
    PAIRING_FAILED,
    TITLE_REQUIRED,
    WAIT_ALL_DONE,
    WAIT_OPEN,
    ExchangeError,
    invalid_phase,
)
from .pairing import derange, verify_derangement
from .reveal import stamp_envelope
from .sessions import Gift, Pair, Phase, RevealState, Session

logger = logging.getLogger(__name__)

CHIME_VARIANTS = 3


def _require_host(session: Session, connection_id: str) -> None:
    if not session.is_host(connection_id):
        raise ExchangeError(NOT_HOST)


def start(session: Session, connection_id: str) -> None:
    _require_host(session, connection_id)
    if session.phase is not Phase.LOBBY:
        raise invalid_phase("start-session", session.phase.value)
    if len(session.participants) < 2:
        raise ExchangeError(NEED_2_OR_MORE)

    session.phase = Phase.WRITE
    session.reveal = None
    session.submission_chime = 0
    for participant in session.participants.values():
        participant.clear_submission()
    logger.info("Session %s entered write with %d participants",
                session.code, len(session.participants))


def submit_gift(session: Session, user_id: str, title, body) -> Optional[int]:
    """Store a participant's gift.

    Returns the chime index (1..3) on a first-time submission and None when
    an earlier gift was overwritten.
    """
    if session.phase is not Phase.WRITE:
        raise ExchangeError(NOT_IN_WRITE)
    participant = session.participant(user_id)

    title = str(title or "").strip()
    body = str(body or "").strip()
    if not title:
        raise ExchangeError(TITLE_REQUIRED)
    if not body:
        raise ExchangeError(BODY_REQUIRED)

    was_submitted = participant.has_submitted
    participant.message = Gift(title=title, body=body)
    participant.has_submitted = True

    if was_submitted:
        return None
    session.submission_chime += 1
    return ((session.submission_chime - 1) % CHIME_VARIANTS) + 1


def begin_pairing(
    session: Session,
    connection_id: str,
    now: int,
    rng: Optional[random.Random] = None,
) -> None:
    _require_host(session, connection_id)
    if session.phase is not Phase.WRITE:
        raise invalid_phase("begin-pairing", session.phase.value)
    if not session.all_submitted():
        raise ExchangeError(WAIT_ALL_DONE)

    ids = list(session.participants)
    to_ids = derange(ids, rng=rng)
    issues = verify_derangement(ids, to_ids)
    if issues:
        logger.error("Pairing for session %s rejected: %s", session.code, "; ".join(issues))
        raise ExchangeError(PAIRING_FAILED)

    pairs = []
    for from_id, to_id in zip(ids, to_ids):
        gift = session.participants[from_id].message
        pairs.append(Pair(from_id=from_id, to_id=to_id, title=gift.title, body=gift.body))

    reveal = RevealState(pairs=pairs)
    stamp_envelope(reveal, now)
    session.reveal = reveal
    session.phase = Phase.REVEAL
    logger.info("Session %s paired %d participants", session.code, len(pairs))


def advance(session: Session, connection_id: str, now: int) -> bool:
    """Move to the next reveal step. Returns True once every step is done."""
    _require_host(session, connection_id)
    if session.phase is not Phase.REVEAL or session.reveal is None:
        raise ExchangeError(NOT_IN_REVEAL)
    reveal = session.reveal
    if not reveal.opened_current:
        raise ExchangeError(WAIT_OPEN)

    reveal.cursor += 1
    if reveal.exhausted:
        session.phase = Phase.DONE
        logger.info("Session %s finished its reveal", session.code)
        return True

    reveal.opened_current = False
    stamp_envelope(reveal, now)
    return False
