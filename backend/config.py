import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    # 'socketio' runs timers on background tasks, 'manual' only advances when told to
    TRIVIA_CLOCK = os.environ.get('TRIVIA_CLOCK', 'socketio')
    # Round timing (seconds)
    DEFAULT_TIME_LIMIT_SEC = int(os.environ.get('DEFAULT_TIME_LIMIT_SEC', '60'))
    ROTATION_DELAY_SEC = float(os.environ.get('ROTATION_DELAY_SEC', '2'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Rules
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '3'))
    MAX_ATTEMPTS = int(os.environ.get('MAX_ATTEMPTS', '3'))
    CORRECT_GUESS_POINTS = int(os.environ.get('CORRECT_GUESS_POINTS', '10'))
    # Input limits
    NAME_MAX_LENGTH = 30
    QUESTION_MAX_LENGTH = 300
    ANSWER_MAX_LENGTH = 100
    GUESS_MAX_LENGTH = 200
    CHAT_MAX_LENGTH = 500
    SESSION_ID_LENGTH = 8
