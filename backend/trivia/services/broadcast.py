from typing import Any, Optional

from trivia.models import Session


def session_room(session_id: str) -> str:
    return f"session:{session_id}"


class SocketIOTransport:
    """Delivery through the Flask-SocketIO server.

    Works outside a request context so timer callbacks running on background
    tasks can emit too.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, payload: Any, to: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=to, namespace=self.namespace)

    def join_group(self, connection_id: str, group: str) -> None:
        self.socketio.server.enter_room(connection_id, group, namespace=self.namespace)

    def leave_group(self, connection_id: str, group: str) -> None:
        self.socketio.server.leave_room(connection_id, group, namespace=self.namespace)


class BroadcastGateway:
    """Formats session state and hands it to the transport."""

    def __init__(self, transport, store):
        self.transport = transport
        self.store = store

    def join(self, session: Session, connection_id: str) -> None:
        self.transport.join_group(connection_id, session_room(session.id))

    def leave(self, session: Session, connection_id: str) -> None:
        self.transport.leave_group(connection_id, session_room(session.id))

    def to_session(self, session: Session, event: str, payload: Any) -> None:
        self.transport.emit(event, payload, to=session_room(session.id))

    def to_connection(self, connection_id: str, event: str, payload: Any) -> None:
        self.transport.emit(event, payload, to=connection_id)

    def game_state(self, session: Session) -> None:
        if self.store.get(session.id) is not session:
            return
        self.to_session(session, 'game-state', session.to_dict())

    def sessions_list(self, to: Optional[str] = None) -> None:
        self.transport.emit('sessions-list-update', self.store.summaries(), to=to)

    def state_and_list(self, session: Session) -> None:
        self.game_state(session)
        self.sessions_list()
