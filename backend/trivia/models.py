from datetime import datetime, timezone
from typing import Dict, Optional

STATUS_WAITING = 'waiting'
STATUS_IN_PROGRESS = 'in-progress'
STATUS_ENDED = 'ended'


class Player:
    def __init__(self, connection_id: str, name: str, attempts_left: int = 3):
        self.connection_id = connection_id
        self.name = name
        self.score = 0
        self.attempts_left = attempts_left

    def to_dict(self, master_id: Optional[str] = None):
        return {
            'id': self.connection_id,
            'name': self.name,
            'score': self.score,
            'attemptsLeft': self.attempts_left,
            'isGameMaster': self.connection_id == master_id,
        }

    def __repr__(self):
        return f'<Player {self.name!r} {self.connection_id}>'


class Session:
    """One trivia game: a master, their players and the current round."""

    def __init__(self, session_id: str, master: Player):
        self.id = session_id
        self.players: Dict[str, Player] = {master.connection_id: master}
        self.master_id = master.connection_id
        self.master_name = master.name
        self.status = STATUS_WAITING
        self.question: Optional[str] = None
        self.answer: Optional[str] = None
        self.timer = None
        self.time_left = 0
        self.round_id = 0
        self.created_at = datetime.now(timezone.utc)

    def set_master(self, connection_id: str) -> None:
        self.master_id = connection_id
        self.master_name = self.players[connection_id].name

    def clear_round(self) -> None:
        self.question = None
        self.answer = None

    def reset_attempts(self, attempts: int) -> None:
        for p in self.players.values():
            p.attempts_left = attempts

    def anyone_can_guess(self) -> bool:
        return any(p.attempts_left > 0 for p in self.players.values())

    def summary(self):
        return {
            'id': self.id,
            'masterName': self.master_name,
            'playersCount': len(self.players),
            'status': self.status,
        }

    def to_dict(self):
        return {
            'sessionId': self.id,
            'players': [p.to_dict(self.master_id) for p in self.players.values()],
            'gameState': self.status,
            'masterSocketId': self.master_id,
            'masterName': self.master_name,
            'question': self.question,
            'timeLeft': self.time_left,
        }

    def __repr__(self):
        return f'<Session {self.id} {self.status} players={len(self.players)}>'
