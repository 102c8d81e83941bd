# backend/tests/repositories/test_sequence_repository.py
"""Tests for named sequence allocation."""

import pytest

from visit_sync.core.exceptions import UniqueConstraintViolation
from visit_sync.models import SequenceCounter
from visit_sync.repositories import RepositoryFactory


@pytest.fixture
def sequences(db):
    return RepositoryFactory.create_sequence_repository(db)


class TestSequenceRepository:
    def test_new_counter_starts_at_one(self, db, sequences):
        assert sequences.next_value("widgets") == 1
        assert db.get(SequenceCounter, "widgets").value == 1

    def test_values_increase_by_one(self, sequences):
        assert [sequences.next_value("widgets") for _ in range(4)] == [1, 2, 3, 4]

    def test_counters_are_independent(self, sequences):
        sequences.next_value("a")
        sequences.next_value("a")

        assert sequences.next_value("b") == 1
        assert sequences.next_value("a") == 3

    def test_floor_skips_values_already_in_use(self, sequences):
        assert sequences.next_value("slots", floor=5) == 6
        assert sequences.next_value("slots", floor=5) == 7
        assert sequences.next_value("slots", floor=10) == 11

    def test_named_helpers(self, sequences):
        assert sequences.next_event_id() == 1
        assert sequences.next_visit_order_number() == 1
        assert sequences.next_event_id() == 2
        assert sequences.next_time_slot_sequence("MDI", "MON") == 1
        assert sequences.next_time_slot_sequence("MDI", "TUE") == 1
        assert sequences.next_time_slot_sequence("MDI", "MON") == 2

    def test_values_survive_commit(self, db, sequences):
        sequences.next_value("widgets")
        db.commit()

        assert RepositoryFactory.create_sequence_repository(db).next_value("widgets") == 2


class TestBaseRepositoryCreate:
    def test_duplicate_key_raises_unique_violation_without_losing_session(self, db, sequences):
        sequences.create(name="taken", value=1)
        db.commit()

        with pytest.raises(UniqueConstraintViolation):
            with db.begin_nested():
                sequences.create(name="taken", value=2)

        # Outer transaction is still usable after the savepoint rollback
        assert sequences.next_value("taken") == 2
        db.commit()
        assert db.get(SequenceCounter, "taken").value == 2
