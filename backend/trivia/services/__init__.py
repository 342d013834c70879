"""Session services: store, clock, timers, rounds, membership and broadcast.

This package holds the game logic proper. Socket handlers and HTTP views
import from here, keeping transport concerns separated from the round state
machine.
"""

from .broadcast import BroadcastGateway, SocketIOTransport
from .clock import ManualClock, SocketIOClock
from .membership import MembershipManager
from .rounds import RoundController
from .store import SessionStore
from .timers import TimerManager

__all__ = [
    'BroadcastGateway',
    'ManualClock',
    'MembershipManager',
    'RoundController',
    'SessionStore',
    'SocketIOClock',
    'SocketIOTransport',
    'TimerManager',
]
