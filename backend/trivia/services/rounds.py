from typing import Any, Mapping, Optional

from trivia.errors import (
    Forbidden,
    GameInProgress,
    InvalidInput,
    NoActiveRound,
    NoAttemptsLeft,
    NoQuestion,
    NotAMember,
    NotEnoughPlayers,
    NotFound,
)
from trivia.models import STATUS_ENDED, STATUS_IN_PROGRESS, STATUS_WAITING, Player, Session


def clean_text(value: Any, limit: int) -> str:
    if value is None:
        return ''
    return str(value).strip()[:limit].strip()


def parse_time_limit(value: Any, default: int) -> int:
    """Positive whole seconds, or ``default`` when missing or unusable."""
    if isinstance(value, bool):
        return default
    try:
        seconds = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return seconds if seconds > 0 else default


class RoundController:
    """Question, countdown, guesses and scoring for each session.

    A round moves ``waiting -> in-progress -> ended`` and is rotated back to
    ``waiting`` with a new master after ``ROTATION_DELAY_SEC``. It ends on a
    correct guess, when no player has attempts left, or when the timer
    expires, and every ending goes through ``_finish_round``.
    """

    def __init__(self, store, timers, gateway, clock, settings: Mapping[str, Any], logger):
        self.store = store
        self.timers = timers
        self.gateway = gateway
        self.clock = clock
        self.logger = logger
        self.max_attempts = int(settings.get('MAX_ATTEMPTS', 3))
        self.min_players = int(settings.get('MIN_PLAYERS', 3))
        self.points = int(settings.get('CORRECT_GUESS_POINTS', 10))
        self.default_time_limit = int(settings.get('DEFAULT_TIME_LIMIT_SEC', 60))
        self.rotation_delay = float(settings.get('ROTATION_DELAY_SEC', 2))
        self.question_max = int(settings.get('QUESTION_MAX_LENGTH', 300))
        self.answer_max = int(settings.get('ANSWER_MAX_LENGTH', 100))
        self.guess_max = int(settings.get('GUESS_MAX_LENGTH', 200))

    def _require_session(self, session_id) -> Session:
        session = self.store.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            raise NotFound()
        return session

    def _require_master(self, session: Session, connection_id: str, action: str) -> None:
        if connection_id != session.master_id:
            raise Forbidden(f'Only master can {action}')

    def set_question(self, session_id: str, connection_id: str, question: Any, answer: Any) -> Session:
        session = self._require_session(session_id)
        self._require_master(session, connection_id, 'set question')
        if session.status == STATUS_IN_PROGRESS:
            raise GameInProgress('Cannot change the question while a round is running')
        if session.status == STATUS_ENDED:
            raise GameInProgress('Round is over, wait for the next master')
        question = clean_text(question, self.question_max)
        answer = clean_text(answer, self.answer_max)
        if not question or not answer:
            raise InvalidInput('Question and answer required')

        session.question = question
        session.answer = answer.lower()
        session.reset_attempts(self.max_attempts)
        self.logger.info(f"[question-set] session={session.id} master={session.master_name!r}")

        self.gateway.game_state(session)
        self.gateway.to_session(session, 'question_created', {
            'question': session.question,
            'masterName': session.master_name,
        })
        return session

    def start_round(self, session_id: str, connection_id: str, time_limit: Any = None) -> Session:
        session = self._require_session(session_id)
        self._require_master(session, connection_id, 'start')
        if session.status != STATUS_WAITING:
            raise GameInProgress('A round is already running')
        if len(session.players) < self.min_players:
            raise NotEnoughPlayers()
        if not session.question or not session.answer:
            raise NoQuestion()

        session.status = STATUS_IN_PROGRESS
        session.time_left = parse_time_limit(time_limit, self.default_time_limit)
        session.round_id += 1
        self.logger.info(
            f"[round-start] session={session.id} round={session.round_id} players={len(session.players)} time_limit={session.time_left}s"
        )

        self.gateway.to_session(session, 'game_started', {
            'timeLeft': session.time_left,
            'question': session.question,
        })
        self.timers.start(session, session.time_left, self._on_tick, self._on_expire)
        self.gateway.state_and_list(session)
        return session

    def submit_guess(self, session_id: str, connection_id: str, guess: Any) -> bool:
        session = self._require_session(session_id)
        if session.status != STATUS_IN_PROGRESS:
            raise NoActiveRound()
        player = session.players.get(connection_id)
        if player is None:
            raise NotAMember()
        if player.attempts_left <= 0:
            raise NoAttemptsLeft()
        if not isinstance(guess, str) or not guess.strip():
            raise InvalidInput('Invalid guess')
        guess = guess.strip().lower()[:self.guess_max].strip()

        player.attempts_left = max(0, player.attempts_left - 1)
        self.gateway.to_session(session, 'player_attempted', {
            'socketId': connection_id,
            'name': player.name,
            'attemptsLeft': player.attempts_left,
        })

        if guess == session.answer:
            player.score += self.points
            self._finish_round(session, player, f"{player.name} guessed correctly!")
            return True

        self.gateway.to_connection(connection_id, 'guess_result', {
            'correct': False,
            'attemptsLeft': player.attempts_left,
        })
        if not session.anyone_can_guess():
            self._finish_round(session, None, 'No one guessed the answer')
        return False

    def rotate(self, session: Session) -> Optional[Session]:
        """Hand the master role to the player after the current master."""
        player_ids = list(session.players)
        if not player_ids:
            self.store.delete(session.id)
            self.logger.info(f"[session-delete] session={session.id} empty at rotation")
            self.gateway.sessions_list()
            return None

        try:
            next_idx = (player_ids.index(session.master_id) + 1) % len(player_ids)
        except ValueError:
            next_idx = 0
        previous = session.master_name
        session.set_master(player_ids[next_idx])
        session.clear_round()
        session.reset_attempts(self.max_attempts)
        session.status = STATUS_WAITING
        self.logger.info(f"[rotate] session={session.id} master {previous!r} -> {session.master_name!r}")

        self.gateway.state_and_list(session)
        self.gateway.to_session(session, 'new_master', {
            'masterSocketId': session.master_id,
            'masterName': session.master_name,
        })
        return session

    def _finish_round(self, session: Session, winner: Optional[Player], message: str) -> None:
        self.timers.cancel(session)
        session.status = STATUS_ENDED
        self.logger.info(
            f"[round-end] session={session.id} round={session.round_id} winner={winner.name if winner else None!r}"
        )
        self.gateway.to_session(session, 'round_ended', {
            'winner': {'socketId': winner.connection_id, 'name': winner.name} if winner else None,
            'answer': session.answer,
            'message': message,
        })
        self.gateway.state_and_list(session)
        self._schedule_rotation(session)

    def _schedule_rotation(self, session: Session) -> None:
        session_id, round_id = session.id, session.round_id

        def _rotate_later():
            with self.store.lock:
                current = self.store.get(session_id)
                if current is not session or current.status != STATUS_ENDED or current.round_id != round_id:
                    self.logger.info(f"[rotate-skip] session={session_id} round={round_id} superseded")
                    return
                self.rotate(current)

        self.clock.call_later(self.rotation_delay, _rotate_later)

    def _on_tick(self, timer, remaining: int) -> None:
        with self.store.lock:
            session = self.store.get(timer.session_id)
            if session is None or session.timer is not timer:
                return
            self.gateway.to_session(session, 'tick', {'timeLeft': remaining})

    def _on_expire(self, timer) -> None:
        with self.store.lock:
            session = self.store.get(timer.session_id)
            self.logger.info(f"[timer-fire] session={timer.session_id} live={session is not None and session.timer is timer}")
            if session is None or session.timer is not timer or session.status != STATUS_IN_PROGRESS:
                return
            self._finish_round(session, None, 'Time expired. No winner.')
