from cardbox.session import StudySession, SessionState, SessionSource, PRACTICE_SIZE
from cardbox.store import CardStore
from cardbox.storage import MemoryStorage
from cardbox.clock import FixedClock
from cardbox.difficulty import Difficulty
from cardbox.errors import InvalidState, NotFound

from datetime import datetime, timedelta, timezone
from random import Random
import pytest

CREATED = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
STUDY_DAY = datetime(2024, 1, 5, 18, 0, tzinfo=timezone.utc)


def make_store(difficulties):
    """
    Creates one card per difficulty on Jan 1st and moves the clock to Jan 5th.

    Hard and medium cards are due on Jan 5th, easy cards are not.
    """

    storage = MemoryStorage()
    clock = FixedClock(CREATED)
    store = CardStore(storage, clock=clock)
    for i, difficulty in enumerate(difficulties):
        store.create(f"Question {i}", f"Answer {i}", difficulty)
    clock.set(STUDY_DAY)
    return store, storage, clock


class TestStudySession:
    def test_due_cards_in_store_order(self):
        store, _, _ = make_store(
            [Difficulty.Hard, Difficulty.Easy, Difficulty.Medium, Difficulty.Hard]
        )
        cards = store.list()

        session = StudySession(store, rng=Random(42))

        assert session.source == SessionSource.Due
        assert session.state == SessionState.Active
        assert session.cards == (cards[0], cards[2], cards[3])
        assert session.index == 0
        assert not session.flipped
        assert session.current_card == cards[0]
        assert session.position == (1, 3)
        assert session.progress == 0.0

    def test_due_selection_is_deterministic(self):
        store, _, _ = make_store([Difficulty.Hard] * 8)

        first = StudySession(store, rng=Random(1))
        second = StudySession(store, rng=Random(2))

        assert [card.card_id for card in first.cards] == [
            card.card_id for card in second.cards
        ]

    def test_practice_sample_when_nothing_is_due(self):
        store, _, _ = make_store([Difficulty.Easy] * 10)
        ids = {card.card_id for card in store.list()}

        session = StudySession(store, rng=Random(7))

        assert session.source == SessionSource.Practice
        assert session.state == SessionState.Active
        assert len(session.cards) == min(PRACTICE_SIZE, 10) == 5
        sampled_ids = {card.card_id for card in session.cards}
        assert len(sampled_ids) == 5
        assert sampled_ids <= ids

    def test_practice_sample_of_small_collection(self):
        store, _, _ = make_store([Difficulty.Easy] * 3)

        session = StudySession(store, rng=Random(7))

        assert session.source == SessionSource.Practice
        assert {card.card_id for card in session.cards} == {
            card.card_id for card in store.list()
        }

    def test_practice_sample_is_reproducible(self):
        store, _, _ = make_store([Difficulty.Easy] * 10)

        first = StudySession(store, rng=Random(3))
        second = StudySession(store, rng=Random(3))

        assert first.cards == second.cards

    def test_practice_size(self):
        store, _, _ = make_store([Difficulty.Easy] * 10)

        session = StudySession(store, rng=Random(0), practice_size=2)
        assert len(session.cards) == 2

        with pytest.raises(ValueError):
            StudySession(store, practice_size=0)

    def test_empty_collection(self):
        store, _, _ = make_store([])

        session = StudySession(store)

        assert session.state == SessionState.Complete
        assert session.source == SessionSource.Empty
        assert session.is_complete
        assert session.cards == ()
        assert session.current_card is None
        assert session.position == (0, 0)
        assert session.progress == 1.0

        with pytest.raises(InvalidState):
            session.flip()

        # restarting an empty collection stays empty
        session.restart()
        assert session.source == SessionSource.Empty
        assert session.is_complete

    def test_flip(self):
        store, _, _ = make_store([Difficulty.Hard, Difficulty.Hard])
        session = StudySession(store)

        session.flip()
        assert session.flipped
        assert session.index == 0

        session.flip()
        assert not session.flipped
        assert session.index == 0

    def test_next_and_previous(self):
        store, _, _ = make_store([Difficulty.Hard] * 3)
        session = StudySession(store)

        # previous on the first card does nothing
        session.flip()
        session.previous()
        assert session.index == 0
        assert session.flipped

        session.next()
        assert session.index == 1
        assert not session.flipped
        assert session.position == (2, 3)
        assert session.progress == pytest.approx(1 / 3)

        session.flip()
        session.previous()
        assert session.index == 0
        assert not session.flipped

        session.next()
        session.next()
        assert session.index == 2
        assert session.state == SessionState.Active

        session.next()
        assert session.state == SessionState.Complete
        assert session.source == SessionSource.Due
        assert session.current_card is None
        assert session.position == (3, 3)
        assert session.progress == 1.0

    def test_actions_on_complete_session(self):
        store, _, _ = make_store([Difficulty.Hard])
        session = StudySession(store)
        session.next()
        assert session.is_complete

        with pytest.raises(InvalidState):
            session.next()
        with pytest.raises(InvalidState):
            session.previous()
        with pytest.raises(InvalidState):
            session.flip()
        with pytest.raises(InvalidState):
            session.rate(Difficulty.Easy)

    def test_navigation_does_not_touch_the_store(self):
        store, storage, _ = make_store([Difficulty.Hard] * 2)
        before = store.list()
        saves = storage.saves
        session = StudySession(store)

        session.flip()
        session.next()
        session.previous()
        session.next()
        session.next()

        assert store.list() == before
        assert storage.saves == saves

    def test_rate_requires_flipped_card(self):
        store, storage, _ = make_store([Difficulty.Hard] * 2)
        before = store.list()
        saves = storage.saves
        session = StudySession(store)

        with pytest.raises(InvalidState):
            session.rate(Difficulty.Easy)

        assert store.list() == before
        assert storage.saves == saves
        assert session.index == 0
        assert session.state == SessionState.Active

    def test_rate_reviews_and_moves_on(self):
        store, _, clock = make_store([Difficulty.Hard, Difficulty.Medium])
        first, second = store.list()
        session = StudySession(store)

        session.flip()
        review_log = session.rate(Difficulty.Easy)

        assert review_log.card_id == first.card_id
        assert review_log.rating == Difficulty.Easy
        assert review_log.review_datetime == clock.now()

        reviewed = store.get(first.card_id)
        assert reviewed.difficulty == Difficulty.Easy
        assert reviewed.last_reviewed_at == STUDY_DAY
        assert reviewed.next_review_at == STUDY_DAY + timedelta(days=7)

        assert session.index == 1
        assert not session.flipped
        assert session.current_card == second

        session.flip()
        session.rate("hard")
        assert session.is_complete
        assert store.get(second.card_id).difficulty == Difficulty.Hard

    def test_rate_deleted_card(self):
        store, _, _ = make_store([Difficulty.Hard] * 2)
        session = StudySession(store)
        store.delete(session.current_card.card_id)

        session.flip()
        with pytest.raises(NotFound):
            session.rate(Difficulty.Easy)

        assert session.index == 0
        assert session.flipped

    def test_restart(self):
        store, _, _ = make_store([Difficulty.Hard, Difficulty.Easy, Difficulty.Medium])
        session = StudySession(store, rng=Random(5))

        with pytest.raises(InvalidState):
            session.restart()

        for _ in range(len(session.cards)):
            session.flip()
            session.rate(Difficulty.Easy)
        assert session.is_complete
        assert session.source == SessionSource.Due

        # everything due has been reviewed, so the restart is a practice round
        session.restart()
        assert session.state == SessionState.Active
        assert session.source == SessionSource.Practice
        assert session.index == 0
        assert not session.flipped
        assert len(session.cards) == 3

    def test_restart_picks_up_new_due_cards(self):
        store, _, clock = make_store([Difficulty.Hard])
        session = StudySession(store)
        session.flip()
        session.rate(Difficulty.Hard)
        assert session.is_complete

        clock.advance(days=2)
        session.restart()

        assert session.source == SessionSource.Due
        assert len(session.cards) == 1

    def test_session_uses_store_clock_by_default(self):
        store, _, _ = make_store([Difficulty.Hard])

        assert StudySession(store).source == SessionSource.Due

        before_due = FixedClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
        assert StudySession(store, clock=before_due).source == SessionSource.Practice
