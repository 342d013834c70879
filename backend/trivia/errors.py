"""Domain errors reported back to the client that issued a request.

None of these end the connection: the socket layer turns them into an
acknowledgement payload of the form ``{'error': message, 'code': code}``.
"""


class GameError(Exception):
    default_message = 'Request failed'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class InvalidInput(GameError):
    default_message = 'Invalid input'


class NotFound(GameError):
    default_message = 'Session not found'


class Forbidden(GameError):
    default_message = 'Only the master may do that'


class GameInProgress(GameError):
    default_message = 'Game is already in progress. You cannot join now.'


class NotEnoughPlayers(GameError):
    default_message = 'players must be more than two before game starts'


class NoQuestion(GameError):
    default_message = 'Please create a question and answer first'


class NoActiveRound(GameError):
    default_message = 'No game in progress'


class NotAMember(GameError):
    default_message = 'You are not part of this session'


class NoAttemptsLeft(GameError):
    default_message = 'No attempts left'
