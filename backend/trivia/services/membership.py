from typing import Any, List, Mapping, NamedTuple

from trivia.errors import GameInProgress, InvalidInput
from trivia.models import STATUS_IN_PROGRESS, STATUS_WAITING, Player, Session
from .rounds import clean_text

ROLE_MASTER = 'master'
ROLE_PLAYER = 'player'


class JoinResult(NamedTuple):
    role: str
    session: Session


class MembershipManager:
    """Who is in which session, and who is master.

    The first connection to claim an unknown session id creates it and
    becomes master. A master who leaves is replaced at once by the first
    remaining player; a session left with no players is deleted.
    """

    def __init__(self, store, timers, gateway, settings: Mapping[str, Any], logger):
        self.store = store
        self.timers = timers
        self.gateway = gateway
        self.logger = logger
        self.max_attempts = int(settings.get('MAX_ATTEMPTS', 3))
        self.name_max = int(settings.get('NAME_MAX_LENGTH', 30))
        self.chat_max = int(settings.get('CHAT_MAX_LENGTH', 500))

    def normalize_name(self, name: Any) -> str:
        return clean_text(name, self.name_max) or 'Player'

    def join(self, session_id: Any, name: Any, connection_id: str) -> JoinResult:
        session_id = session_id.strip() if isinstance(session_id, str) else ''
        name = self.normalize_name(name)
        if not session_id or not name:
            raise InvalidInput('Invalid session or name')

        session = self.store.get(session_id)
        if session is None:
            player = Player(connection_id, name, self.max_attempts)
            session = self.store.create(session_id, player)
            self.gateway.join(session, connection_id)
            self.logger.info(f"[session-create] session={session_id} master={name!r}")
            self.gateway.to_connection(connection_id, 'joined', {
                'sessionId': session_id,
                'you': {'socketId': connection_id, 'name': name, 'score': 0},
                'master': True,
            })
            self.gateway.state_and_list(session)
            return JoinResult(ROLE_MASTER, session)

        if session.status == STATUS_IN_PROGRESS:
            raise GameInProgress()

        if connection_id in session.players:
            role = ROLE_MASTER if session.master_id == connection_id else ROLE_PLAYER
            return JoinResult(role, session)

        player = Player(connection_id, name, self.max_attempts)
        session.players[connection_id] = player
        self.gateway.join(session, connection_id)
        self.logger.info(f"[join] session={session_id} player={name!r} players={len(session.players)}")

        self.gateway.to_connection(connection_id, 'joined', {
            'sessionId': session_id,
            'you': {'socketId': connection_id, 'name': name, 'score': 0},
            'master': False,
            'masterName': session.master_name,
        })
        self.gateway.to_connection(session.master_id, 'player_joined', {
            'socketId': connection_id,
            'name': name,
        })
        self.gateway.state_and_list(session)
        return JoinResult(ROLE_PLAYER, session)

    def leave(self, session_id: Any, connection_id: str) -> None:
        session = self.store.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            return
        player = session.players.pop(connection_id, None)
        self.gateway.leave(session, connection_id)
        self.gateway.to_session(session, 'player_left', {'socketId': connection_id})
        if player is None:
            return
        self.logger.info(f"[leave] session={session.id} player={player.name!r} players={len(session.players)}")

        if session.master_id == connection_id:
            # the round in play, if any, is voided
            self.timers.cancel(session)
            if not session.players:
                self._destroy(session)
                return
            session.set_master(next(iter(session.players)))
            session.clear_round()
            session.status = STATUS_WAITING
            self.logger.info(f"[master-left] session={session.id} new_master={session.master_name!r}")
            self.gateway.state_and_list(session)
            self.gateway.to_session(session, 'new_master', {
                'masterSocketId': session.master_id,
                'masterName': session.master_name,
            })
        elif not session.players:
            self._destroy(session)
        else:
            self.gateway.state_and_list(session)

    def disconnect(self, connection_id: str) -> List[str]:
        left = []
        for session in self.store.sessions_for(connection_id):
            self.leave(session.id, connection_id)
            left.append(session.id)
        if left:
            self.logger.info(f"[disconnect] connection={connection_id} sessions={left}")
        return left

    def chat(self, connection_id: str, message: Any) -> int:
        text = clean_text(message, self.chat_max)
        if not text:
            return 0
        sessions = self.store.sessions_for(connection_id)
        for session in sessions:
            self.gateway.to_session(session, 'chat-message', {
                'name': session.players[connection_id].name,
                'message': text,
            })
        return len(sessions)

    def _destroy(self, session: Session) -> None:
        self.store.delete(session.id)
        self.logger.info(f"[session-delete] session={session.id} empty")
        self.gateway.sessions_list()
