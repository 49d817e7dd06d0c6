import pytest
from core.fact_store import FactCursor, FactStore
from core.models import Fact, Sign
from core.exceptions import FactNotFound


@pytest.fixture
def store():
    return FactStore("initial", ["A", ("B", "-"), ("C", Sign.UNSURE)])


class TestFactStoreBasic:



    def test_initial_facts(self, store):

        assert store.size() == 3
        assert store.ids() == ["A", "B", "C"]
        assert store.get("A", "sign") is Sign.POSITIVE
        assert store.get("B", "sign") is Sign.NEGATIVE
        assert store.get("C", "sign") is Sign.UNSURE

    def test_empty_store(self):

        store = FactStore()
        assert store.size() == 0
        assert store.first() is None
        assert store.iterate() is None

    def test_append_and_find(self, store):

        store.append("D", Sign.POSITIVE, algorithm="forward", rule=2)
        assert store.find("D")
        assert "D" in store
        assert store.get("D", "rule") == 2
        assert store.get("D", "algorithm") == "forward"
        assert store.ids()[-1] == "D"

    def test_prepend_puts_fact_first(self, store):

        store.prepend("Z")
        assert store.first() == "Z"

    def test_ids_are_unique_last_write_wins(self, store):

        store.append("A", Sign.NEGATIVE)
        assert store.size() == 3
        assert store.get("A", "sign") is Sign.NEGATIVE
        assert store.ids() == ["B", "C", "A"]

    def test_prepend_existing_moves_to_front(self, store):

        store.prepend("C", Sign.POSITIVE, rule=4)
        assert store.ids() == ["C", "A", "B"]
        assert store.get("C", "rule") == 4

    def test_remove(self, store):

        assert store.remove("B") is True
        assert store.ids() == ["A", "C"]
        assert store.remove("B") is False

    def test_get_unknown_fact_raises(self, store):

        with pytest.raises(FactNotFound) as exc:
            store.get("X", "sign")
        assert exc.value.fact_id == "X"
        assert exc.value.store == "initial"

    def test_get_unknown_field_raises(self, store):

        with pytest.raises(ValueError):
            store.get("A", "colour")

    def test_find_by_field_returns_first_in_order(self, store):

        store.append("D", Sign.NEGATIVE)
        assert store.find_by_field("sign", Sign.NEGATIVE) == "B"
        assert store.find_by_field("rule", 7) is None

    def test_facts_and_iteration(self, store):

        facts = store.facts()
        assert facts[0] == Fact("A")
        assert [f.id for f in store] == ["A", "B", "C"]

    def test_clear(self, store):

        store.clear()
        assert store.size() == 0
        assert len(store) == 0

    def test_repr(self, store):

        assert repr(store) == "FactStore(initial: [A+, B-, C~])"


class TestFactStoreCursor:



    def test_iterate_in_insertion_order(self, store):

        store.reset_cursor()
        assert store.iterate() == "A"
        assert store.iterate() == "B"
        assert store.iterate() == "C"
        assert store.iterate() is None

    def test_cursor_does_not_see_new_facts(self, store):

        store.reset_cursor()
        assert store.iterate() == "A"
        store.append("D")
        store.prepend("Z")
        assert store.iterate() == "B"
        assert store.iterate() == "C"
        assert store.iterate() is None

    def test_cursor_does_not_see_removed_facts(self, store):

        store.reset_cursor()
        store.remove("B")
        assert [store.iterate() for _ in range(3)] == ["A", "B", "C"]

    def test_reset_cursor_sees_new_facts(self, store):

        store.reset_cursor()
        store.iterate()
        store.prepend("Z")
        store.reset_cursor()
        assert store.iterate() == "Z"


class TestFactCursor:



    def test_next_and_remaining(self):

        cursor = FactCursor(["A", "B"])
        assert len(cursor) == 2
        assert cursor.next() == "A"
        assert cursor.remaining == 1
        assert cursor.next() == "B"
        assert cursor.next() is None

    def test_cursor_is_independent_of_source(self):

        ids = ["A", "B"]
        cursor = FactCursor(ids)
        ids.append("C")
        assert cursor.remaining == 2
