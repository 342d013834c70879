from functools import wraps
from typing import Any, Dict

from flask import current_app, request

from trivia import socketio
from trivia.errors import GameError, InvalidInput


def _services():
    return current_app.extensions['trivia']


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _payload(data) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('Payload must be an object')
    return data


def acknowledged(handler):
    """Run a handler under the store lock and turn game errors into an ack."""
    @wraps(handler)
    def wrapper(*args):
        services = _services()
        with services.store.lock:
            try:
                return handler(services, *args)
            except GameError as exc:
                current_app.logger.debug(f"[rejected] event={handler.__name__} sid={_get_sid()} code={exc.code} message={exc.message!r}")
                return exc.to_dict()
    return wrapper


@acknowledged
def handle_join_session(services, data=None):
    data = _payload(data)
    result = services.membership.join(data.get('sessionId'), data.get('name'), _get_sid())
    return {'ok': True, 'role': result.role}


@acknowledged
def handle_create_question(services, data=None):
    data = _payload(data)
    services.rounds.set_question(data.get('sessionId'), _get_sid(), data.get('question'), data.get('answer'))
    return {'ok': True}


@acknowledged
def handle_start_game(services, data=None):
    data = _payload(data)
    services.rounds.start_round(data.get('sessionId'), _get_sid(), data.get('timeLimit'))
    return {'ok': True}


@acknowledged
def handle_submit_guess(services, data=None):
    data = _payload(data)
    correct = services.rounds.submit_guess(data.get('sessionId'), _get_sid(), data.get('guess'))
    return {'ok': True, 'correct': correct}


@acknowledged
def handle_leave_session(services, data=None):
    data = _payload(data)
    services.membership.leave(data.get('sessionId'), _get_sid())
    return {'ok': True}


@acknowledged
def handle_chat_message(services, message=None):
    services.membership.chat(_get_sid(), message)


@acknowledged
def handle_get_sessions_list(services, data=None):
    services.gateway.sessions_list(to=_get_sid())


def handle_disconnect(reason=None):
    services = _services()
    with services.store.lock:
        services.membership.disconnect(_get_sid())


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_session', handle_join_session, namespace=namespace)
    socketio.on_event('create_question', handle_create_question, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('submit_guess', handle_submit_guess, namespace=namespace)
    socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
    socketio.on_event('chat-message', handle_chat_message, namespace=namespace)
    socketio.on_event('get-sessions-list', handle_get_sessions_list, namespace=namespace)
