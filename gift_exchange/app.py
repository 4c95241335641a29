import logging
import threading

import eventlet
from flask import Flask, request
from flask_socketio import SocketIO, close_room, emit, join_room, leave_room

from .config import configure_logging, load_settings
from .exchange import GiftExchange
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


def _payload(data):
    return data if isinstance(data, dict) else {}


def create_app(settings=None, exchange=None):
    """Build the Flask app and its Socket.IO server.

    Returns ``(app, socketio)``. The exchange is reachable afterwards as
    ``app.extensions["gift_exchange"]``.
    """
    settings = settings or load_settings()
    if exchange is None:
        registry = SessionRegistry(
            code_alphabet=settings.code_alphabet, code_length=settings.code_length
        )
        exchange = GiftExchange(registry)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key
    app.extensions["gift_exchange"] = exchange
    socketio = SocketIO(
        app,
        async_mode=settings.async_mode,
        cors_allowed_origins=settings.cors_allowed_origins,
    )

    # One action at a time: mutate, emit, then acknowledge. Created after
    # eventlet.monkey_patch() so it is a green lock in production.
    dispatch_lock = threading.Lock()
    app.extensions["gift_exchange.dispatch_lock"] = dispatch_lock

    def dispatch(run):
        with dispatch_lock:
            result = run()
            if result.joined:
                join_room(result.joined)
            for delivery in result.deliveries:
                socketio.emit(delivery.event, delivery.payload, room=delivery.to)
            if result.left:
                leave_room(result.left)
            for code in result.closed:
                close_room(code)
        return result.to_ack()

    @socketio.on("connect")
    def handle_connect():
        emit("connected", {"connectionId": request.sid})

    @socketio.on("disconnect")
    def handle_disconnect(reason=None):
        logger.debug("Connection %s dropped (%s)", request.sid, reason)
        dispatch(lambda: exchange.disconnect(request.sid))

    @socketio.on("create-session")
    def handle_create_session(data=None):
        return dispatch(lambda: exchange.create_session(request.sid))

    @socketio.on("join-session")
    def handle_join_session(data=None):
        data = _payload(data)
        return dispatch(
            lambda: exchange.join_session(request.sid, data.get("code"), data.get("name"))
        )

    @socketio.on("start-session")
    def handle_start_session(data=None):
        data = _payload(data)
        return dispatch(lambda: exchange.start_session(request.sid, data.get("code")))

    @socketio.on("submit-gift")
    def handle_submit_gift(data=None):
        data = _payload(data)
        return dispatch(
            lambda: exchange.submit_gift(
                request.sid,
                data.get("code"),
                data.get("userId"),
                data.get("title"),
                data.get("body"),
            )
        )

    @socketio.on("begin-pairing")
    def handle_begin_pairing(data=None):
        data = _payload(data)
        return dispatch(lambda: exchange.begin_pairing(request.sid, data.get("code")))

    @socketio.on("open-reveal")
    def handle_open_reveal(data=None):
        data = _payload(data)
        return dispatch(
            lambda: exchange.open_reveal(request.sid, data.get("code"), data.get("userId"))
        )

    @socketio.on("advance-reveal")
    def handle_advance_reveal(data=None):
        data = _payload(data)
        return dispatch(lambda: exchange.advance_reveal(request.sid, data.get("code")))

    @socketio.on("close-session")
    def handle_close_session(data=None):
        data = _payload(data)
        return dispatch(lambda: exchange.close_session(request.sid, data.get("code")))

    @socketio.on("leave-session")
    def handle_leave_session(data=None):
        data = _payload(data)
        return dispatch(
            lambda: exchange.leave_session(request.sid, data.get("code"), data.get("userId"))
        )

    return app, socketio


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    if settings.async_mode == "eventlet":
        eventlet.monkey_patch()
    app, socketio = create_app(settings)
    logger.info("Listening on %s:%d", settings.host, settings.port)
    socketio.run(app, host=settings.host, port=settings.port)
