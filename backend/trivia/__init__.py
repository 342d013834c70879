import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


class TriviaServices:
    """The wired set of services one app instance runs on."""

    def __init__(self, store, clock, gateway, timers, rounds, membership):
        self.store = store
        self.clock = clock
        self.gateway = gateway
        self.timers = timers
        self.rounds = rounds
        self.membership = membership


def _origins(value):
    if isinstance(value, str):
        return [o.strip() for o in value.split(',') if o.strip()]
    return list(value or [])


def build_services(flask_app, transport=None, clock=None) -> TriviaServices:
    from trivia.services import (
        BroadcastGateway,
        ManualClock,
        MembershipManager,
        RoundController,
        SessionStore,
        SocketIOClock,
        SocketIOTransport,
        TimerManager,
    )

    settings = flask_app.config
    logger = flask_app.logger
    if clock is None:
        if settings.get('TRIVIA_CLOCK') == 'manual':
            clock = ManualClock()
        else:
            clock = SocketIOClock(socketio, logger=logger)
    if transport is None:
        transport = SocketIOTransport(socketio, namespace=settings.get('SOCKETIO_NAMESPACE', '/'))

    store = SessionStore()
    gateway = BroadcastGateway(transport, store)
    timers = TimerManager(clock, interval=float(settings.get('TICK_INTERVAL_SEC', 1)), logger=logger)
    rounds = RoundController(store, timers, gateway, clock, settings, logger)
    membership = MembershipManager(store, timers, gateway, settings, logger)
    return TriviaServices(store, clock, gateway, timers, rounds, membership)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = _origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    flask_app.extensions['trivia'] = build_services(flask_app)

    from trivia.main import main
    flask_app.register_blueprint(main)

    from trivia.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
