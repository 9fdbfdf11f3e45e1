"""Tests for the bounded, time-decaying donation store."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from donation_bridge.donations.store import DonationStore
from donation_bridge.models import Donation


def _admit_many(store: DonationStore, n: int, clock=None) -> list[Donation]:
    donations = []
    for i in range(n):
        donations.append(store.admit({"donor_name": f"Donor{i}", "amount": i + 1}))
        if clock is not None:
            clock.advance(0.001)
    return donations


class TestAdmit:
    def test_admit_creates_unprocessed_donation(self, clock):
        store = DonationStore(clock=clock)
        donation = store.admit({"donor_name": "  Alice ", "amount": 5000, "message": "  hi  "})

        assert donation.donor_name == "Alice"
        assert donation.message == "hi"
        assert donation.amount == 5000
        assert donation.accepted_at == clock.now
        assert donation.processed is False
        assert len(donation.id) == 32
        assert len(store) == 1

    def test_missing_message_becomes_empty(self, clock):
        store = DonationStore(clock=clock)
        assert store.admit({"donor_name": "Alice", "amount": 1}).message == ""

    def test_integral_float_amount_stored_as_int(self, clock):
        store = DonationStore(clock=clock)
        amount = store.admit({"donor_name": "Alice", "amount": 5000.0}).amount
        assert amount == 5000
        assert isinstance(amount, int)

    def test_ids_unique(self, clock):
        store = DonationStore(max_size=500, clock=clock)
        donations = _admit_many(store, 300)
        assert len({d.id for d in donations}) == 300

    def test_insertion_order_preserved(self, clock):
        store = DonationStore(clock=clock)
        _admit_many(store, 5, clock)
        stamps = [d.accepted_at for d in store.snapshot()]
        assert stamps == sorted(stamps)

    def test_accepted_at_non_decreasing_when_clock_steps_back(self, clock):
        store = DonationStore(clock=clock)
        first = store.admit({"donor_name": "A", "amount": 1})
        clock.advance(-5)
        second = store.admit({"donor_name": "B", "amount": 1})
        assert second.accepted_at >= first.accepted_at


class TestCapacityEviction:
    def test_101_admissions_keep_100(self, clock):
        store = DonationStore(max_size=100, clock=clock)
        donations = _admit_many(store, 101, clock)

        live_ids = {d.id for d in store.snapshot()}
        assert len(store) == 100
        assert donations[0].id not in live_ids
        assert donations[-1].id in live_ids

    def test_evicts_oldest_even_if_unprocessed(self, clock):
        store = DonationStore(max_size=2, clock=clock)
        first, _ = _admit_many(store, 2, clock)
        store.admit({"donor_name": "Late", "amount": 1})
        assert first.id not in {d.id for d in store.snapshot()}


class TestTTL:
    def test_expired_donation_not_returned(self, clock):
        store = DonationStore(ttl_seconds=300, clock=clock)
        store.admit({"donor_name": "Alice", "amount": 1})
        clock.advance(300)

        assert store.take_unprocessed() == []
        assert len(store) == 0

    def test_not_expired_just_before_ttl(self, clock):
        store = DonationStore(ttl_seconds=300, clock=clock)
        store.admit({"donor_name": "Alice", "amount": 1})
        clock.advance(299.9)
        assert len(store.take_unprocessed()) == 1

    def test_admit_sweeps_expired(self, clock):
        store = DonationStore(ttl_seconds=300, clock=clock)
        old = store.admit({"donor_name": "Old", "amount": 1})
        clock.advance(301)
        store.admit({"donor_name": "New", "amount": 1})

        ids = [d.id for d in store.snapshot()]
        assert old.id not in ids
        assert len(ids) == 1

    def test_processed_donations_expire_too(self, clock):
        store = DonationStore(ttl_seconds=300, clock=clock)
        store.admit({"donor_name": "Alice", "amount": 1})
        store.take_unprocessed()
        clock.advance(300)
        assert store.sweep_expired() == 1


class TestTakeUnprocessed:
    def test_returns_oldest_first_and_marks(self, clock):
        store = DonationStore(clock=clock)
        donations = _admit_many(store, 3, clock)

        taken = store.take_unprocessed()
        assert [d.id for d in taken] == [d.id for d in donations]
        assert all(d.processed for d in store.snapshot())

    def test_second_call_empty(self, clock):
        store = DonationStore(clock=clock)
        _admit_many(store, 3, clock)
        store.take_unprocessed()
        assert store.take_unprocessed() == []

    def test_only_new_donations_after_take(self, clock):
        store = DonationStore(clock=clock)
        store.admit({"donor_name": "A", "amount": 1})
        store.take_unprocessed()
        new = store.admit({"donor_name": "B", "amount": 2})

        taken = store.take_unprocessed()
        assert [d.id for d in taken] == [new.id]

    def test_processed_donations_stay_in_store(self, clock):
        store = DonationStore(clock=clock)
        _admit_many(store, 2, clock)
        store.take_unprocessed()
        assert len(store) == 2

    def test_clear(self, clock):
        store = DonationStore(clock=clock)
        _admit_many(store, 2, clock)
        store.clear()
        assert store.take_unprocessed() == []

    def test_concurrent_takes_hand_out_each_donation_once(self, clock):
        store = DonationStore(clock=clock)
        admitted = _admit_many(store, 100)

        with ThreadPoolExecutor(max_workers=16) as pool:
            batches = list(pool.map(lambda _: store.take_unprocessed(), range(32)))

        taken = [d.id for batch in batches for d in batch]
        assert len(taken) == len(set(taken))
        assert set(taken) == {d.id for d in admitted}

    def test_len_during_concurrent_admits(self, clock):
        store = DonationStore(max_size=50, clock=clock)

        def admit(i):
            store.admit({"donor_name": f"Donor{i}", "amount": i + 1})
            return len(store)

        with ThreadPoolExecutor(max_workers=8) as pool:
            sizes = list(pool.map(admit, range(200)))

        assert all(1 <= size <= 50 for size in sizes)
        assert len(store) == 50


class TestPublicProjection:
    def test_shape_omits_processed(self, clock):
        store = DonationStore(clock=clock)
        donation = store.admit({"donor_name": "Alice", "amount": 5000, "message": "gg"})
        public = donation.to_public()

        assert set(public) == {"id", "donor_name", "amount", "message", "timestamp"}
        assert public["timestamp"] == int(clock.now * 1000)
