import pytest

from gemwatch.core.portals.oracle import (
    EMPTY_SNAPSHOT,
    ListingSnapshot,
    ListingTimeout,
    listing_changed,
    wait_for_listing_update,
)


class TestListingChanged:
    def test_fragment_change(self):
        assert listing_changed(ListingSnapshot(fragment="#page-1"), ListingSnapshot(fragment="#page-2"))

    def test_count_change_to_zero(self):
        assert listing_changed(ListingSnapshot(card_count=5), ListingSnapshot(card_count=0))

    def test_first_text_change(self):
        prior = ListingSnapshot(first_card_text="a", card_count=5)
        assert listing_changed(prior, ListingSnapshot(first_card_text="b", card_count=5))

    def test_any_card_present(self):
        assert listing_changed(EMPTY_SNAPSHOT, ListingSnapshot(card_count=1))

    def test_nothing_rendered(self):
        assert not listing_changed(EMPTY_SNAPSHOT, EMPTY_SNAPSHOT)
        assert not listing_changed(ListingSnapshot(fragment="#page-1"), ListingSnapshot(fragment="#page-1"))


async def test_waits_for_cards_to_render(clock):
    reads: list[float] = []

    async def read_snapshot():
        reads.append(clock.now)
        if clock.now < 0.35:
            return ListingSnapshot(card_count=0)
        return ListingSnapshot(first_card_text="GEM/2025/B/1", card_count=3)

    result = await wait_for_listing_update(
        read_snapshot,
        ListingSnapshot(card_count=0),
        timeout_ms=2000,
        poll_interval_ms=100,
        settle_ms=500,
        clock=clock,
        sleep=clock.sleep,
    )

    assert result.card_count == 3
    assert all(t < 0.35 for t in reads[:-1])
    assert reads[-1] >= 0.35
    assert clock.sleeps[-1] == pytest.approx(0.5)


async def test_first_card_text_fires_with_same_count(clock):
    async def read_snapshot():
        return ListingSnapshot(first_card_text="new top result", card_count=5)

    result = await wait_for_listing_update(
        read_snapshot,
        ListingSnapshot(first_card_text="old top result", card_count=5),
        settle_ms=0,
        clock=clock,
        sleep=clock.sleep,
    )

    assert result.first_card_text == "new top result"
    assert clock.sleeps == []


async def test_times_out(clock):
    async def read_snapshot():
        return EMPTY_SNAPSHOT

    with pytest.raises(ListingTimeout) as exc_info:
        await wait_for_listing_update(
            read_snapshot,
            timeout_ms=1000,
            poll_interval_ms=100,
            clock=clock,
            sleep=clock.sleep,
        )

    assert isinstance(exc_info.value, TimeoutError)
    assert exc_info.value.timeout_ms == 1000
    assert exc_info.value.last == EMPTY_SNAPSHOT
    assert 1.0 <= clock.now < 1.2
    # no settle delay after a timeout
    assert all(s == pytest.approx(0.1) for s in clock.sleeps)


async def test_failed_read_keeps_polling(clock):
    calls = {"n": 0}

    async def read_snapshot():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("Execution context was destroyed")
        return ListingSnapshot(first_card_text="new", card_count=10, fragment="#page-2")

    prior = ListingSnapshot(first_card_text="old", card_count=10, fragment="#page-1")
    result = await wait_for_listing_update(read_snapshot, prior, settle_ms=0, clock=clock, sleep=clock.sleep)

    assert result.fragment == "#page-2"
    assert calls["n"] == 2


async def test_failing_reads_never_count_as_refresh(clock):
    calls = {"n": 0}

    async def read_snapshot():
        calls["n"] += 1
        raise RuntimeError("Target closed")

    prior = ListingSnapshot(first_card_text="old", card_count=10, fragment="#page-1")

    with pytest.raises(ListingTimeout) as exc_info:
        await wait_for_listing_update(
            read_snapshot,
            prior,
            timeout_ms=500,
            poll_interval_ms=100,
            clock=clock,
            sleep=clock.sleep,
        )

    assert calls["n"] > 1
    assert exc_info.value.last == EMPTY_SNAPSHOT
