"""
Tests for change notification.

These tests verify:
1. A new subscriber gets the current records before subscribe() returns
2. Every mutation reaches every subscriber exactly once
3. Unsubscribing is per-registration and idempotent
4. Fan-out behaviour when subscribers change during a pass
"""

import pytest

from arrayorm import ObservableCollection, Subscription


class Recorder:
    """Callable that remembers every list it was called with."""

    def __init__(self):
        self.calls = []

    def __call__(self, records):
        # copy: the collection may mutate the same list later
        self.calls.append(list(records))

    @property
    def count(self):
        return len(self.calls)


# =============================================================================
# INITIAL SNAPSHOT
# =============================================================================

class TestInitialSnapshot:
    """Test the immediate call on subscribe."""

    def test_called_once_on_subscribe(self):
        """subscribe() should call the callback once with the records."""
        collection = ObservableCollection([{"id": 1}])
        recorder = Recorder()
        collection.subscribe(recorder)

        assert recorder.calls == [[{"id": 1}]]

    def test_called_before_subscribe_returns(self):
        """The initial call should happen before subscribe() returns."""
        collection = ObservableCollection([{"id": 1}])
        seen = []

        subscription = collection.subscribe(lambda records: seen.append(records))

        assert isinstance(subscription, Subscription)
        assert len(seen) == 1
        assert seen[0] is collection.read()

    def test_empty_collection_snapshot(self):
        """An empty collection should still deliver an initial call."""
        recorder = Recorder()
        ObservableCollection().subscribe(recorder)

        assert recorder.calls == [[]]


# =============================================================================
# FAN-OUT
# =============================================================================

class TestFanOut:
    """Test mutation notification."""

    def test_notifies_on_every_mutation(self):
        """Every mutation method should notify with the resulting list."""
        collection = ObservableCollection([{"id": 1}])
        recorder = Recorder()
        collection.subscribe(recorder)

        collection.replace([{"id": 2}])
        collection.append({"id": 3})
        collection.transform(lambda records: records + [{"id": 4}])
        collection.remove_where(lambda item: item["id"] == 2)

        assert recorder.calls == [
            [{"id": 1}],
            [{"id": 2}],
            [{"id": 2}, {"id": 3}],
            [{"id": 2}, {"id": 3}, {"id": 4}],
            [{"id": 3}, {"id": 4}],
        ]

    def test_each_subscriber_called_once(self):
        """Each subscriber should be called exactly once per mutation."""
        collection = ObservableCollection()
        recorders = [Recorder() for _ in range(3)]
        for recorder in recorders:
            collection.subscribe(recorder)

        collection.append({"id": 1})

        for recorder in recorders:
            assert recorder.count == 2
            assert recorder.calls[-1] == [{"id": 1}]

    def test_subscriber_receives_current_list(self):
        """Subscribers should receive the collection's list object."""
        collection = ObservableCollection()
        received = []
        collection.subscribe(received.append)

        new_records = [{"id": 9}]
        collection.replace(new_records)

        assert received[-1] is new_records

    def test_notified_in_registration_order(self):
        """Subscribers should be called in the order they registered."""
        collection = ObservableCollection()
        order = []
        collection.subscribe(lambda records: order.append("first"))
        collection.subscribe(lambda records: order.append("second"))
        order.clear()

        collection.append({"id": 1})

        assert order == ["first", "second"]

    def test_callback_errors_propagate(self):
        """Errors raised by a subscriber should reach the mutating caller."""
        collection = ObservableCollection()

        def boom(records):
            if records:
                raise RuntimeError("subscriber failed")

        collection.subscribe(boom)

        with pytest.raises(RuntimeError, match="subscriber failed"):
            collection.append({"id": 1})

    def test_derived_collection_has_no_subscribers(self):
        """Query results should start without subscribers."""
        collection = ObservableCollection([{"id": 1}])
        collection.subscribe(Recorder())

        assert collection.filter("id", 1).subscriber_count == 0


# =============================================================================
# UNSUBSCRIBE
# =============================================================================

class TestUnsubscribe:
    """Test cancelling registrations."""

    def test_no_calls_after_unsubscribe(self):
        """A cancelled subscriber should not be called again."""
        collection = ObservableCollection([{"id": 1}])
        recorder = Recorder()
        unsubscribe = collection.subscribe(recorder)

        collection.replace([{"id": 2}])
        assert recorder.count == 2

        unsubscribe()
        collection.replace([{"id": 3}])
        assert recorder.count == 2

    def test_unsubscribe_twice_is_noop(self):
        """Calling the same unsubscribe twice should remove only one registration."""
        collection = ObservableCollection()
        recorder = Recorder()
        other = Recorder()
        unsubscribe = collection.subscribe(recorder)
        collection.subscribe(other)

        unsubscribe()
        unsubscribe()

        assert collection.subscriber_count == 1
        collection.append({"id": 1})
        assert other.count == 2

    def test_unsubscribe_method(self):
        """Subscription.unsubscribe() should deactivate the handle."""
        collection = ObservableCollection()
        subscription = collection.subscribe(Recorder())

        assert subscription.active
        subscription.unsubscribe()

        assert not subscription.active
        assert collection.subscriber_count == 0

    def test_same_callback_twice_gives_two_registrations(self):
        """Subscribing one callback twice should give two independent handles."""
        collection = ObservableCollection()
        recorder = Recorder()
        first = collection.subscribe(recorder)
        second = collection.subscribe(recorder)

        assert recorder.count == 2
        collection.append({"id": 1})
        assert recorder.count == 4

        first()
        collection.append({"id": 2})
        assert recorder.count == 5

        second()
        collection.append({"id": 3})
        assert recorder.count == 5

    def test_unsubscribe_during_fan_out_skips_later_subscriber(self):
        """A subscriber cancelled mid-pass should not be called in that pass."""
        collection = ObservableCollection()
        late = Recorder()
        handles = {}

        def cancel_late(records):
            if records:
                handles["late"]()

        collection.subscribe(cancel_late)
        handles["late"] = collection.subscribe(late)

        collection.append({"id": 1})

        assert late.count == 1

    def test_subscribe_during_fan_out_waits_for_next_pass(self):
        """A subscriber added mid-pass should first see the next mutation."""
        collection = ObservableCollection()
        added = Recorder()

        def add_subscriber(records):
            if len(records) == 1:
                collection.subscribe(added)

        collection.subscribe(add_subscriber)
        collection.append({"id": 1})

        # only the immediate call from subscribe()
        assert added.count == 1

        collection.append({"id": 2})
        assert added.count == 2


# =============================================================================
# REENTRANCY
# =============================================================================

class TestReentrancy:
    """Test subscribers that mutate the collection they observe."""

    def test_replace_from_subscriber_reaches_later_subscribers(self):
        """After a nested replace(), later subscribers should end on the new list."""
        collection = ObservableCollection()
        recorder = Recorder()

        def redirect(records):
            if records == [1]:
                collection.replace([2])

        collection.subscribe(redirect)
        collection.subscribe(recorder)

        collection.replace([1])

        assert collection.read() == [2]
        assert recorder.calls == [[], [2], [2]]
        assert recorder.calls[-1] == collection.read()

    def test_remove_where_from_subscriber(self):
        """A nested remove_where() should be what remaining subscribers see."""
        collection = ObservableCollection([{"id": 1}])
        received = []

        def prune(records):
            if any(item["id"] == 2 for item in records):
                collection.remove_where(lambda item: item["id"] == 2)

        collection.subscribe(prune)
        collection.subscribe(received.append)

        collection.append({"id": 2})

        assert collection.read() == [{"id": 1}]
        assert received[-1] is collection.read()

    def test_nested_append_triggers_nested_pass(self):
        """A nested append() should run a full nested notification pass."""
        collection = ObservableCollection()
        recorder = Recorder()

        def top_up(records):
            if len(records) == 1:
                collection.append({"id": 2})

        collection.subscribe(top_up)
        collection.subscribe(recorder)

        collection.append({"id": 1})

        assert collection.read() == [{"id": 1}, {"id": 2}]
        # initial, nested pass, then the outer pass resumes
        assert recorder.count == 3
        assert recorder.calls[1] == [{"id": 1}, {"id": 2}]
