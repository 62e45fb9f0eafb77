from datetime import date, time

import pytest

from poolladder.services.errors import InvalidScoreError, InvalidStateError, NotFoundError, SamePlayerError, TieScoreError

from tests.testkit import seed_players

MATCH_DAY = date(2025, 2, 1)


def record(store, player_id):
    p = store.get_player(player_id)
    return p.wins, p.losses


@pytest.fixture
def played(store):
    a, b, c = seed_players(store, "A", "B", "C")
    m = store.schedule_match(a.id, b.id, MATCH_DAY)
    store.record_result(m.id, 3, 1)
    return a, b, c, m


def test_editing_scores_flips_the_result_by_difference(store, played):
    a, b, c, m = played

    edited = store.edit_match(m.id, score1=1, score2=3)

    assert (edited.winner_id, edited.loser_id) == (b.id, a.id)
    assert record(store, a.id) == (0, 1)
    assert record(store, b.id) == (1, 0)


def test_repeated_edits_never_double_count(store, played):
    a, b, c, m = played

    for _ in range(3):
        store.edit_match(m.id, score1=4, score2=2)

    assert record(store, a.id) == (1, 0)
    assert record(store, b.id) == (0, 1)


def test_edit_keeps_original_completion_time(store, played):
    a, b, c, m = played
    completed_at = store.get_match(m.id).completed_at

    edited = store.edit_match(m.id, score1=0, score2=5)

    assert edited.completed_at == completed_at


def test_reverting_to_scheduled_undoes_the_result(store, played):
    a, b, c, m = played

    edited = store.edit_match(m.id, status="scheduled")

    assert edited.status == "scheduled"
    assert (edited.player1_score, edited.player2_score) == (None, None)
    assert (edited.winner_id, edited.loser_id, edited.completed_at) == (None, None, None)
    assert record(store, a.id) == (0, 0)
    assert record(store, b.id) == (0, 0)

    # and it can be recorded again like any scheduled match
    store.record_result(m.id, 0, 2)
    assert record(store, b.id) == (1, 0)


def test_scores_on_a_scheduled_match_complete_it(store):
    a, b = seed_players(store, "A", "B")
    m = store.schedule_match(a.id, b.id, MATCH_DAY)

    edited = store.edit_match(m.id, score1=2, score2=7)

    assert edited.status == "completed"
    assert record(store, b.id) == (1, 0)
    assert record(store, a.id) == (0, 1)


def test_scores_with_scheduled_status_are_rejected(store, played):
    a, b, c, m = played

    with pytest.raises(InvalidStateError):
        store.edit_match(m.id, status="scheduled", score1=1, score2=0)
    assert store.get_match(m.id).status == "completed"
    assert record(store, a.id) == (1, 0)


def test_completing_without_scores_is_rejected(store):
    a, b = seed_players(store, "A", "B")
    m = store.schedule_match(a.id, b.id, MATCH_DAY)

    with pytest.raises(InvalidScoreError):
        store.edit_match(m.id, status="completed")
    assert store.get_match(m.id).status == "scheduled"


def test_swapping_a_participant_moves_the_loss(store, played):
    a, b, c, m = played

    edited = store.edit_match(m.id, player2_id=c.id)

    assert edited.player2_name == "C"
    assert (edited.player1_score, edited.player2_score) == (3, 1)
    assert record(store, a.id) == (1, 0)
    assert record(store, b.id) == (0, 0)
    assert record(store, c.id) == (0, 1)


def test_edit_date_and_time_of_scheduled_match(store):
    a, b = seed_players(store, "A", "B")
    m = store.schedule_match(a.id, b.id, MATCH_DAY)

    edited = store.edit_match(m.id, date=date(2025, 3, 1), time=time(20, 0))

    assert (edited.date, edited.time, edited.status) == (date(2025, 3, 1), time(20, 0), "scheduled")
    assert record(store, a.id) == (0, 0)


def test_failed_edit_leaves_everything_untouched(store, played):
    a, b, c, m = played
    before_players = store.players()
    before_match = store.get_match(m.id)

    with pytest.raises(TieScoreError):
        store.edit_match(m.id, score1=2, score2=2)
    with pytest.raises(NotFoundError):
        store.edit_match(m.id, player1_id=404)
    with pytest.raises(SamePlayerError):
        store.edit_match(m.id, player2_id=a.id)
    with pytest.raises(InvalidStateError):
        store.edit_match(m.id, status="abandoned")

    assert store.players() == before_players
    assert store.get_match(m.id) == before_match


def test_result_that_would_credit_a_removed_player_is_rejected(store, played):
    a, b, c, m = played
    store.remove_player(b.id)
    before = record(store, a.id)

    with pytest.raises(NotFoundError):
        store.edit_match(m.id, score1=0, score2=3)
    assert record(store, a.id) == before
    assert store.get_match(m.id).winner_id == a.id


def test_reverting_after_removal_only_corrects_remaining_player(store, played):
    a, b, c, m = played
    store.remove_player(b.id)

    edited = store.edit_match(m.id, status="scheduled")

    assert edited.player2_name == "B"
    assert record(store, a.id) == (0, 0)


def test_edit_unknown_match(store):
    with pytest.raises(NotFoundError):
        store.edit_match(99, score1=1, score2=0)
