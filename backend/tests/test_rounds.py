import pytest

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
from trivia.models import STATUS_ENDED, STATUS_IN_PROGRESS, STATUS_WAITING
from trivia.services.rounds import parse_time_limit


def _ready(game, time_limit=10):
    game.rounds.set_question('abc', 'sid-a', '2+2', '4')
    game.rounds.start_round('abc', 'sid-a', time_limit)


def test_set_question_normalizes_answer_and_resets_attempts(game, trio, transport):
    trio.players['sid-b'].attempts_left = 0
    game.rounds.set_question('abc', 'sid-a', '  Capital of France? ', '  PARIS ')
    assert trio.question == 'Capital of France?'
    assert trio.answer == 'paris'
    assert all(p.attempts_left == 3 for p in trio.players.values())
    assert transport.events('question_created') == [{'question': 'Capital of France?', 'masterName': 'A'}]


def test_set_question_errors(game, trio):
    with pytest.raises(NotFound):
        game.rounds.set_question('nope', 'sid-a', 'q', 'a')
    with pytest.raises(Forbidden):
        game.rounds.set_question('abc', 'sid-b', 'q', 'a')
    with pytest.raises(InvalidInput):
        game.rounds.set_question('abc', 'sid-a', '   ', 'a')
    with pytest.raises(InvalidInput):
        game.rounds.set_question('abc', 'sid-a', 'q', None)
    assert trio.question is None


def test_set_question_caps_lengths(game, trio):
    game.rounds.set_question('abc', 'sid-a', 'q' * 400, 'A' * 150)
    assert len(trio.question) == 300
    assert trio.answer == 'a' * 100


def test_start_requires_master_players_and_question(game):
    game.membership.join('abc', 'A', 'sid-a')
    game.membership.join('abc', 'B', 'sid-b')
    with pytest.raises(Forbidden):
        game.rounds.start_round('abc', 'sid-b', 10)
    with pytest.raises(NotEnoughPlayers):
        game.rounds.start_round('abc', 'sid-a', 10)
    game.membership.join('abc', 'C', 'sid-c')
    with pytest.raises(NoQuestion):
        game.rounds.start_round('abc', 'sid-a', 10)


def test_start_round(game, trio, transport):
    _ready(game, time_limit=10)
    assert trio.status == STATUS_IN_PROGRESS
    assert trio.time_left == 10
    assert trio.timer is not None and trio.timer.active
    assert transport.events('game_started') == [{'timeLeft': 10, 'question': '2+2'}]
    with pytest.raises(GameInProgress):
        game.rounds.start_round('abc', 'sid-a', 10)
    with pytest.raises(GameInProgress):
        game.rounds.set_question('abc', 'sid-a', 'q', 'a')


@pytest.mark.parametrize('value,expected', [
    (10, 10), ('15', 15), (None, 60), ('abc', 60), (0, 60), (-5, 60), (True, 60), (7.9, 7),
])
def test_parse_time_limit(value, expected):
    assert parse_time_limit(value, 60) == expected


def test_ticks_reach_the_group(game, trio, clock, transport):
    _ready(game, time_limit=10)
    clock.advance(3)
    assert transport.events('tick') == [{'timeLeft': 9}, {'timeLeft': 8}, {'timeLeft': 7}]


def test_guess_errors(game, trio):
    with pytest.raises(NotFound):
        game.rounds.submit_guess('nope', 'sid-b', '4')
    with pytest.raises(NoActiveRound):
        game.rounds.submit_guess('abc', 'sid-b', '4')
    _ready(game)
    with pytest.raises(NotAMember):
        game.rounds.submit_guess('abc', 'sid-x', '4')
    with pytest.raises(InvalidInput):
        game.rounds.submit_guess('abc', 'sid-b', '   ')
    with pytest.raises(InvalidInput):
        game.rounds.submit_guess('abc', 'sid-b', 4)
    assert trio.players['sid-b'].attempts_left == 3
    for _ in range(3):
        game.rounds.submit_guess('abc', 'sid-b', 'five')
    with pytest.raises(NoAttemptsLeft):
        game.rounds.submit_guess('abc', 'sid-b', '4')


def test_wrong_guess_is_private_and_attempt_is_public(game, trio, transport):
    _ready(game)
    transport.clear()
    assert game.rounds.submit_guess('abc', 'sid-b', 'five') is False
    assert transport.events('player_attempted') == [{'socketId': 'sid-b', 'name': 'B', 'attemptsLeft': 2}]
    assert transport.events('guess_result', to='sid-b') == [{'correct': False, 'attemptsLeft': 2}]
    assert trio.status == STATUS_IN_PROGRESS
    assert trio.players['sid-b'].score == 0


def test_correct_guess_scores_and_rotates_after_delay(game, trio, clock, transport):
    _ready(game, time_limit=10)
    timer = trio.timer
    assert game.rounds.submit_guess('abc', 'sid-b', ' 4 ') is True

    assert trio.players['sid-b'].score == 10
    assert trio.players['sid-b'].attempts_left == 2
    assert trio.status == STATUS_ENDED
    assert timer.cancelled and trio.timer is None
    ended = transport.events('round_ended')
    assert ended == [{'winner': {'socketId': 'sid-b', 'name': 'B'}, 'answer': '4', 'message': 'B guessed correctly!'}]

    clock.advance(1.9)
    assert trio.status == STATUS_ENDED
    assert transport.events('tick') == []
    clock.advance(0.1)
    assert trio.status == STATUS_WAITING
    assert trio.master_id == 'sid-b'
    assert trio.question is None and trio.answer is None
    assert all(p.attempts_left == 3 for p in trio.players.values())
    assert transport.events('new_master') == [{'masterSocketId': 'sid-b', 'masterName': 'B'}]

    clock.advance(60)
    assert len(transport.events('round_ended')) == 1
    assert len(transport.events('new_master')) == 1
    assert trio.players['sid-b'].score == 10


def test_case_insensitive_answer(game, trio):
    game.rounds.set_question('abc', 'sid-a', 'Capital of France?', 'Paris')
    game.rounds.start_round('abc', 'sid-a', 30)
    assert game.rounds.submit_guess('abc', 'sid-c', ' pARis ') is True


def test_all_attempts_exhausted_ends_round_without_winner(game, trio, clock, transport):
    _ready(game, time_limit=10)
    for _ in range(3):
        for sid in ('sid-a', 'sid-b', 'sid-c'):
            game.rounds.submit_guess('abc', sid, 'five')
    assert trio.status == STATUS_ENDED
    assert trio.timer is None
    assert transport.events('round_ended') == [{'winner': None, 'answer': '4', 'message': 'No one guessed the answer'}]
    assert all(p.score == 0 for p in trio.players.values())
    clock.advance(2)
    assert trio.status == STATUS_WAITING
    assert trio.master_id == 'sid-b'
    clock.advance(20)
    assert len(transport.events('round_ended')) == 1


def test_one_player_with_attempts_keeps_round_alive(game, trio):
    _ready(game)
    for _ in range(3):
        game.rounds.submit_guess('abc', 'sid-b', 'five')
        game.rounds.submit_guess('abc', 'sid-c', 'six')
    assert trio.status == STATUS_IN_PROGRESS
    assert trio.players['sid-a'].attempts_left == 3


def test_timeout_ends_round_then_rotates(game, trio, clock, transport):
    _ready(game, time_limit=5)
    clock.advance(5)
    assert trio.status == STATUS_ENDED
    assert trio.timer is None
    assert transport.events('round_ended') == [{'winner': None, 'answer': '4', 'message': 'Time expired. No winner.'}]
    assert [t['timeLeft'] for t in transport.events('tick')] == [4, 3, 2, 1]
    clock.advance(2)
    assert trio.status == STATUS_WAITING
    assert trio.master_id == 'sid-b'


def test_rotation_wraps_around(game, trio, clock):
    for expected in ('sid-b', 'sid-c', 'sid-a'):
        master = trio.master_id
        game.rounds.set_question('abc', master, '2+2', '4')
        game.rounds.start_round('abc', master, 5)
        clock.advance(7)
        assert trio.master_id == expected


def test_rotation_picks_first_player_when_master_is_gone(game, trio):
    trio.status = STATUS_ENDED
    trio.master_id = 'sid-gone'
    game.rounds.rotate(trio)
    assert trio.master_id == 'sid-a'
    assert trio.master_name == 'A'


def test_rotation_of_empty_session_deletes_it(game, trio):
    trio.players.clear()
    assert game.rounds.rotate(trio) is None
    assert 'abc' not in game.store


def test_pending_rotation_skipped_when_superseded(game, trio, clock, transport):
    _ready(game)
    game.rounds.submit_guess('abc', 'sid-c', '4')
    # master leaves during the grace delay and is replaced immediately
    game.membership.leave('abc', 'sid-a')
    assert trio.master_id == 'sid-b'
    clock.advance(2)
    assert trio.master_id == 'sid-b'
    assert trio.status == STATUS_WAITING
    assert len(transport.events('new_master')) == 1


def test_pending_rotation_skipped_when_session_is_gone(game, trio, clock):
    _ready(game)
    game.rounds.submit_guess('abc', 'sid-b', '4')
    for sid in ('sid-a', 'sid-b', 'sid-c'):
        game.membership.leave('abc', sid)
    clock.advance(2)
    assert 'abc' not in game.store
    assert len(game.store) == 0


def test_set_question_rejected_during_grace_period(game, trio, clock):
    _ready(game)
    game.rounds.submit_guess('abc', 'sid-b', '4')
    with pytest.raises(GameInProgress, match='Round is over'):
        game.rounds.set_question('abc', 'sid-a', 'q', 'a')
    clock.advance(2)
    game.rounds.set_question('abc', 'sid-b', 'q', 'a')
    assert trio.question == 'q'
