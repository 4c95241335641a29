"""Client actions against the session registry.

Each public method of :class:`GiftExchange` is one client action. It
resolves the session by code, applies the transition, and returns an
:class:`ActionResult` holding the acknowledgement and the messages to fan
out, in the order clients must see them. Nothing here knows about
sockets.
"""

from __future__ import annotations

import functools
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from . import phases, projection
from .errors import NOT_HOST, ExchangeError, invalid_phase
from .identifiers import generate_participant_id, normalize_display_name, normalize_session_code
from .projection import Delivery
from .reveal import now_ms, open_current
from .sessions import Participant, Phase, Session, SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    deliveries: List[Delivery] = field(default_factory=list)
    joined: Optional[str] = None
    left: Optional[str] = None
    closed: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, payload=None, **kwargs) -> "ActionResult":
        return cls(ok=True, payload=payload or {}, **kwargs)

    @classmethod
    def failure(cls, code: str) -> "ActionResult":
        return cls(ok=False, error=code)

    def to_ack(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "error": self.error}
        return {"ok": True, **self.payload}


def action(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except ExchangeError as exc:
            logger.debug("%s rejected with %s: %s", method.__name__, exc.code, exc.message)
            return ActionResult.failure(exc.code)

    return wrapper


class GiftExchange:
    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.registry = registry if registry is not None else SessionRegistry()
        self._clock = clock
        self._rng = rng

    def _session(self, code) -> Session:
        return self.registry.lookup(normalize_session_code(code))

    def _close(self, session: Session) -> ActionResult:
        closed = projection.to_session(
            session, projection.SESSION_CLOSED, {"code": session.code}
        )
        self.registry.delete(session.code)
        return ActionResult.success(deliveries=[closed], closed=[session.code])

    @action
    def create_session(self, connection_id: str) -> ActionResult:
        session = self.registry.create(connection_id)
        return ActionResult.success({"code": session.code})

    @action
    def join_session(self, connection_id: str, code, name) -> ActionResult:
        session = self._session(code)
        name = normalize_display_name(name)

        if session.phase is Phase.DONE:
            raise invalid_phase("join-session", session.phase.value)

        participant = session.participant_for_connection(connection_id)
        if participant is None:
            participant = Participant(
                id=generate_participant_id(session.participants),
                connection_id=connection_id,
                display_name=name,
            )
            session.add_participant(participant)
            logger.info("%s joined session %s as %s", name, session.code, participant.id)
        else:
            participant.display_name = name

        return ActionResult.success(
            {
                "room": projection.public_view(session),
                "userId": participant.id,
                "isHost": session.is_host(connection_id),
            },
            deliveries=[projection.room_update(session)],
            joined=session.code,
        )

    @action
    def start_session(self, connection_id: str, code) -> ActionResult:
        session = self._session(code)
        phases.start(session, connection_id)
        return ActionResult.success(deliveries=[projection.room_update(session)])

    @action
    def submit_gift(self, connection_id: str, code, user_id, title, body) -> ActionResult:
        session = self._session(code)
        chime = phases.submit_gift(session, user_id, title, body)

        deliveries = []
        if chime is not None:
            deliveries.append(
                projection.to_session(session, projection.SUBMIT_CHIME, {"index": chime})
            )
        deliveries.append(projection.room_update(session))
        return ActionResult.success(deliveries=deliveries)

    @action
    def begin_pairing(self, connection_id: str, code) -> ActionResult:
        session = self._session(code)
        phases.begin_pairing(session, connection_id, self._clock(), rng=self._rng)

        deliveries = [projection.room_update(session)]
        step = projection.roulette_step(session)
        if step is not None:
            deliveries.append(step)
        return ActionResult.success(deliveries=deliveries)

    @action
    def open_reveal(self, connection_id: str, code, user_id) -> ActionResult:
        session = self._session(code)
        opened = open_current(session, user_id, self._clock())

        return ActionResult.success(
            deliveries=[
                projection.to_session(session, projection.OPENED_NOTICE, opened.notice),
                projection.to_connection(
                    opened.recipient_connection_id, projection.PRIVATE_REVEAL, opened.private
                ),
                projection.to_session(session, projection.CONFETTI_TRIGGER, opened.confetti),
                projection.room_update(session),
            ]
        )

    @action
    def advance_reveal(self, connection_id: str, code) -> ActionResult:
        session = self._session(code)
        finished = phases.advance(session, connection_id, self._clock())

        deliveries = [projection.room_update(session)]
        if finished:
            deliveries.append(
                projection.to_session(session, projection.SESSION_DONE, {"code": session.code})
            )
        else:
            step = projection.roulette_step(session)
            if step is not None:
                deliveries.append(step)
        return ActionResult.success(deliveries=deliveries)

    @action
    def close_session(self, connection_id: str, code) -> ActionResult:
        session = self._session(code)
        if not session.is_host(connection_id):
            raise ExchangeError(NOT_HOST)
        logger.info("Host closed session %s", session.code)
        return self._close(session)

    @action
    def leave_session(self, connection_id: str, code, user_id) -> ActionResult:
        session = self._session(code)
        if session.is_host(connection_id):
            logger.info("Host left session %s, closing it", session.code)
            return self._close(session)

        removed = session.remove_participant(user_id)
        deliveries = []
        if removed is not None:
            logger.info("%s left session %s", removed.display_name, session.code)
            deliveries.append(projection.room_update(session))
        return ActionResult.success(deliveries=deliveries, left=session.code)

    def disconnect(self, connection_id: str) -> ActionResult:
        """Implicit close for hosted sessions, implicit leave elsewhere."""
        result = ActionResult.success()
        for session in self.registry.sessions_for_connection(connection_id):
            if session.is_host(connection_id):
                logger.info("Host of session %s disconnected", session.code)
                closed = self._close(session)
                result.deliveries.extend(closed.deliveries)
                result.closed.extend(closed.closed)
                continue

            gone = [
                participant.id
                for participant in session.participants.values()
                if participant.connection_id == connection_id
            ]
            for participant_id in gone:
                session.remove_participant(participant_id)
            if gone:
                logger.info("Removed %d disconnected participant(s) from %s",
                            len(gone), session.code)
                result.deliveries.append(projection.room_update(session))
        return result
