import threading

import numpy as np
import pytest

from block_blast.game import BLOCK_COLORS, EventBus, GameConfig, GameSession, PieceCatalog, cell_offsets
from block_blast.game.events import EVENT_GAME_OVER, EVENT_LINES_CLEARED
from tests.helpers import make_piece


def _dead_end(session):
    """Fill the board except one cell and hand out pieces that cannot use it."""
    session.board.grid[:, :] = 1
    session.board.grid[4, 4] = 0
    session.hand = [
        make_piece([[1, 1]], piece_id="SmallLine-0"),
        make_piece([[1], [1]], piece_id="SmallLine-1"),
    ]


def test_new_session_deals_a_hand(session):
    assert len(session.hand) == 3
    assert len({p.id for p in session.hand}) == 3
    assert all(p.color in BLOCK_COLORS for p in session.hand)
    assert session.score == 0
    assert session.board.is_empty()
    assert not session.game_over


def test_config_validation():
    with pytest.raises(ValueError):
        GameConfig(hand_size=-1)


def test_seeded_sessions_deal_the_same_hands():
    a = GameSession(GameConfig(random_seed=99))
    b = GameSession(GameConfig(random_seed=99))
    assert [(p.id, p.color) for p in a.hand] == [(p.id, p.color) for p in b.hand]
    a.reset(seed=5)
    b.reset(seed=5)
    assert [(p.id, p.color) for p in a.hand] == [(p.id, p.color) for p in b.hand]


def test_place_piece_scores_cells_and_removes_from_hand(session):
    piece = session.hand[0]
    row, col = session.board.valid_placements(piece)[0]
    assert session.can_place(piece.id, row, col)
    result = session.place_piece(piece.id, row, col)
    assert result.success
    assert result.score_gained == piece.num_cells()
    assert session.score == piece.num_cells()
    assert session.find_piece(piece.id) is None
    assert len(session.hand) == 2
    assert session.pieces_placed == 1


def test_rejected_placements_change_nothing(session):
    before_hand = [p.id for p in session.hand]
    before_grid = session.board.clone_state()

    assert not session.place_piece("no-such-piece", 0, 0).success
    assert not session.place_piece(session.hand[0].id, -3, 0).success
    assert not session.place_piece(session.hand[0].id, 8, 8).success
    assert not session.can_place("no-such-piece", 0, 0)

    assert [p.id for p in session.hand] == before_hand
    assert np.array_equal(session.board.grid, before_grid)
    assert session.score == 0


def test_placement_adds_line_clear_score(session):
    session.board.grid[0, :6] = 1
    session.board.grid[5, 5] = 1
    session.hand = [make_piece([[1, 1]], piece_id="SmallLine-0")]
    cleared = []
    session.bus.subscribe(EVENT_LINES_CLEARED, lambda sender, **kw: cleared.append(kw))

    result = session.place_piece("SmallLine-0", 0, 6)

    assert result.success
    assert (result.rows_cleared, result.cols_cleared) == (1, 0)
    assert result.score_gained == 2 + 12
    assert session.score == 14
    assert session.lines_cleared_total == 1
    assert cleared == [{"rows": (0,), "cols": (), "score": 12}]


def test_empty_hand_is_refilled(session):
    for _ in range(3):
        piece = session.hand[0]
        row, col = session.board.valid_placements(piece)[0]
        assert session.place_piece(piece.id, row, col).success
    assert len(session.hand) == 3


def test_game_over_when_nothing_fits(session):
    _dead_end(session)
    over_events = []
    session.bus.subscribe(EVENT_GAME_OVER, lambda sender, **kw: over_events.append(kw["score"]))

    assert session.check_game_over()
    assert session.game_over
    # idempotent
    assert session.check_game_over()
    assert over_events == [0]


def test_placement_that_leaves_no_move_ends_the_game(session):
    # domino slot at (0, 0)-(0, 1); the other holes keep every row and column
    # open afterwards and no two of them touch
    holes = [(0, 5), (1, 2), (2, 4), (3, 6), (4, 3), (5, 1), (5, 5), (6, 7), (7, 0)]
    session.board.grid[:, :] = 1
    for row, col in [(0, 0), (0, 1)] + holes:
        session.board.grid[row, col] = 0
    session.hand = [
        make_piece([[1, 1]], piece_id="SmallLine-0"),
        make_piece([[1, 1], [1, 1]], piece_id="Square2x2-0"),
    ]
    states = []
    session.subscribe(lambda sender, state: states.append(state))

    result = session.place_piece("SmallLine-0", 0, 0)

    assert result.success
    assert result.lines_cleared == 0
    assert result.score_gained == 2
    assert result.game_over
    assert session.game_over
    assert [p.id for p in session.hand] == ["Square2x2-0"]
    # a single snapshot, already showing the end of the game
    assert len(states) == 1
    assert states[0]["game_over"] is True


def test_clearing_the_board_keeps_the_game_going(session):
    session.board.grid[:, :] = 1
    session.board.grid[3, 3] = 0
    session.hand = [
        make_piece([[1]], piece_id="Dot-0"),
        make_piece([[1, 1], [1, 1]], piece_id="Square2x2-0"),
    ]
    result = session.place_piece("Dot-0", 3, 3)
    assert result.success
    assert (result.rows_cleared, result.cols_cleared) == (8, 8)
    assert result.score_gained == 1 + 2024
    assert not result.game_over
    assert session.board.is_empty()


def test_game_over_rejects_placements_until_reset(session):
    _dead_end(session)
    session.check_game_over()

    result = session.place_piece("SmallLine-0", 0, 0)
    assert not result.success
    assert result.game_over
    assert not session.can_place("SmallLine-0", 4, 4)

    session.reset()
    assert not session.game_over
    assert session.score == 0
    assert session.board.is_empty()
    assert len(session.hand) == 3


def test_draw_hand_replaces_hand(session):
    hand = session.draw_hand(2)
    assert len(hand) == 2
    assert session.hand is hand
    assert len(session.draw_hand()) == 3


def test_hand_that_cannot_fit_ends_the_game_when_dealt():
    catalog = PieceCatalog([("SmallLine", [[1, 1]]), ("Square2x2", [[1, 1], [1, 1]])])
    bus = EventBus()
    over = []
    bus.subscribe(EVENT_GAME_OVER, lambda sender, **kw: over.append(sender))

    game = GameSession(GameConfig(width=1, height=1, random_seed=0), catalog=catalog, bus=bus)

    assert game.game_over
    assert over == [game]
    assert not game.place_piece(game.hand[0].id, 0, 0).success

    game.reset(seed=1)
    assert game.game_over
    assert over == [game, game]


def test_empty_hand_ends_the_game(session):
    assert session.draw_hand(0) == []
    assert session.game_over


def test_draw_hand_is_ignored_after_game_over(session):
    _dead_end(session)
    assert session.check_game_over()
    before = [p.id for p in session.hand]

    hand = session.draw_hand()

    assert [p.id for p in hand] == before
    assert [p.id for p in session.hand] == before
    assert session.game_over


def test_subscribers_receive_the_session_as_sender(session):
    senders = []
    session.subscribe(lambda sender, state: senders.append(sender))
    piece = session.hand[0]
    row, col = session.board.valid_placements(piece)[0]
    session.place_piece(piece.id, row, col)
    assert senders and all(s is session for s in senders)


def test_state_snapshot_and_subscribers(session):
    states = []
    session.subscribe(lambda sender, state: states.append(state))
    piece = session.hand[0]
    row, col = session.board.valid_placements(piece)[0]
    session.place_piece(piece.id, row, col)

    assert states
    state = states[-1]
    assert state["score"] == session.score
    assert state["pieces_remaining"] == 2
    assert len(state["hand"]) == 2
    dr, dc = cell_offsets(piece.shape)[0]
    assert state["cells"][row + dr][col + dc] == piece.color
    assert state["game_over"] is False


def test_failing_subscriber_does_not_corrupt_session(session):
    def boom(sender, **kwargs):
        raise ValueError("renderer crashed")

    session.subscribe(boom)
    piece = session.hand[0]
    row, col = session.board.valid_placements(piece)[0]
    with pytest.warns(RuntimeWarning):
        result = session.place_piece(piece.id, row, col)
    assert result.success
    assert session.score == piece.num_cells()
    assert len(session.hand) == 2


def test_deferred_check_runs_after_delay(session):
    _dead_end(session)
    done = threading.Event()
    session.bus.subscribe(EVENT_GAME_OVER, lambda sender, **kw: done.set())

    session.schedule_game_over_check(delay=0.01)
    assert done.wait(2.0)
    assert session.game_over
    assert not session.has_pending_check


def test_deferred_check_is_rearmed_and_cancellable(session):
    session.schedule_game_over_check(delay=30)
    first = session._pending_check
    session.schedule_game_over_check(delay=30)
    second = session._pending_check
    assert first is not second
    assert first.finished.is_set()
    assert session.has_pending_check

    session.cancel_pending_check()
    assert not session.has_pending_check
    assert second.finished.is_set()
    assert not session.game_over
