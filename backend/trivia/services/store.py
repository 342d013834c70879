import threading
from typing import Dict, List, Optional

from trivia.models import Player, Session


class SessionStore:
    """Process-wide registry of live sessions.

    Every socket handler, HTTP view and scheduled callback takes ``lock``
    for its whole body so session mutations never interleave.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self.lock = threading.RLock()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def create(self, session_id: str, master: Player) -> Session:
        if session_id in self._sessions:
            raise KeyError(f'session {session_id} already exists')
        session = Session(session_id, master)
        self._sessions[session_id] = session
        return session

    def delete(self, session_id: str) -> Optional[Session]:
        session = self._sessions.pop(session_id, None)
        if session and session.timer:
            session.timer.cancel()
            session.timer = None
        return session

    def sessions_for(self, connection_id: str) -> List[Session]:
        return [s for s in self._sessions.values() if connection_id in s.players]

    def summaries(self) -> List[dict]:
        return [s.summary() for s in self._sessions.values()]
