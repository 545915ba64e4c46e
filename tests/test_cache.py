import json
import threading
from datetime import timedelta

from select_start.db.snapshots import SnapshotStore
from select_start.services.cache import ReportCache, ReportType

from conftest import BlockingSnapshotStore, FrozenClock, utc


def payload(tag, when="2025-04-10T12:00:00.000Z"):
    return {"leaderboard": [tag], "lastUpdated": when}


def test_empty_cache_misses(cache):
    for report_type in ReportType:
        assert cache.get(report_type) is None
        assert cache.state(report_type) == "empty"


def test_get_after_put_returns_same_payload(cache, clock):
    data = payload("a")
    cache.put(ReportType.MONTHLY, data)

    cached = cache.get(ReportType.MONTHLY)
    assert cached is data
    assert cached["lastUpdated"] == "2025-04-10T12:00:00.000Z"
    assert cache.last_computed(ReportType.MONTHLY) == clock.now


def test_entry_goes_stale_at_threshold(cache, clock):
    cache.put(ReportType.MONTHLY, payload("a"))

    clock.advance(minutes=14, seconds=59)
    assert cache.get(ReportType.MONTHLY) is not None

    clock.advance(seconds=1)
    assert cache.get(ReportType.MONTHLY) is None
    assert cache.state(ReportType.MONTHLY) == "stale"


def test_default_thresholds_per_type(cache, clock):
    for report_type in ReportType:
        cache.put(report_type, payload(report_type.value))

    clock.advance(minutes=10)
    assert cache.get(ReportType.NOMINATIONS) is None
    assert cache.get(ReportType.MONTHLY) is not None
    assert cache.get(ReportType.YEARLY) is not None

    clock.advance(minutes=5)
    assert cache.get(ReportType.MONTHLY) is None
    assert cache.get(ReportType.YEARLY) is not None

    clock.advance(minutes=15)
    assert cache.get(ReportType.YEARLY) is None


def test_custom_thresholds(tmp_path):
    clock = FrozenClock(utc(2025, 4, 10))
    cache = ReportCache(thresholds={ReportType.MONTHLY: timedelta(minutes=1)}, clock=clock)
    cache.put(ReportType.MONTHLY, payload("a"))
    clock.advance(minutes=1)
    assert cache.get(ReportType.MONTHLY) is None


def test_invalidate_always_misses(cache):
    cache.put(ReportType.MONTHLY, payload("a"))
    cache.put(ReportType.NOMINATIONS, payload("n"))

    cache.invalidate(ReportType.MONTHLY)
    assert cache.get(ReportType.MONTHLY) is None
    assert cache.state(ReportType.MONTHLY) == "empty"
    assert cache.get(ReportType.NOMINATIONS) is not None

    # already empty
    cache.invalidate(ReportType.MONTHLY)
    cache.invalidate(ReportType.YEARLY)


def test_put_writes_snapshot_and_rehydrate_restores_it(tmp_path, clock):
    snapshots = SnapshotStore(str(tmp_path))
    cache = ReportCache(snapshots=snapshots, clock=clock)
    data = payload("a", "2025-04-10T11:55:00.000Z")
    cache.put(ReportType.YEARLY, data)

    with open(tmp_path / "yearly-leaderboard.json", encoding="utf-8") as f:
        assert json.load(f) == data

    restarted = ReportCache(snapshots=snapshots, clock=clock)
    restored = restarted.rehydrate()

    assert restored == {ReportType.MONTHLY: False, ReportType.YEARLY: True, ReportType.NOMINATIONS: False}
    assert restarted.get(ReportType.YEARLY) == data
    assert restarted.last_computed(ReportType.YEARLY) == utc(2025, 4, 10, 11, 55)


def test_rehydrated_snapshot_respects_its_age(tmp_path, clock):
    snapshots = SnapshotStore(str(tmp_path))
    snapshots.save("monthly-leaderboard", payload("old", "2025-04-10T11:00:00.000Z"))

    cache = ReportCache(snapshots=snapshots, clock=clock)
    cache.rehydrate()
    assert cache.state(ReportType.MONTHLY) == "stale"
    assert cache.get(ReportType.MONTHLY) is None


def test_corrupt_or_incomplete_snapshots_leave_entries_empty(tmp_path, clock):
    (tmp_path / "monthly-leaderboard.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "yearly-leaderboard.json").write_text(json.dumps({"leaderboard": []}), encoding="utf-8")
    (tmp_path / "nominations.json").write_text(json.dumps(["list"]), encoding="utf-8")

    cache = ReportCache(snapshots=SnapshotStore(str(tmp_path)), clock=clock)
    assert cache.rehydrate() == {t: False for t in ReportType}
    for report_type in ReportType:
        assert cache.state(report_type) == "empty"


def test_snapshot_write_failure_does_not_fail_put(tmp_path, clock):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where the cache directory should be", encoding="utf-8")
    cache = ReportCache(snapshots=SnapshotStore(str(blocker / "cache")), clock=clock)

    data = payload("a")
    cache.put(ReportType.NOMINATIONS, data)
    assert cache.get(ReportType.NOMINATIONS) is data


def test_concurrent_puts_never_tear(cache):
    payloads = [payload(str(i), f"2025-04-10T12:00:00.{i:03d}Z") for i in range(20)]
    seen = []

    def writer(p):
        for _ in range(25):
            cache.put(ReportType.MONTHLY, p)

    def reader():
        for _ in range(100):
            got = cache.get(ReportType.MONTHLY)
            if got is not None:
                seen.append(got)

    threads = [threading.Thread(target=writer, args=(p,)) for p in payloads]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(any(s is p for p in payloads) for s in seen)
    assert any(cache.get(ReportType.MONTHLY) is p for p in payloads)


def test_future_dated_snapshot_left_empty(tmp_path, clock):
    snapshots = SnapshotStore(str(tmp_path))
    snapshots.save("monthly-leaderboard", payload("ahead", "2025-04-10T12:05:00.000Z"))
    snapshots.save("nominations", payload("now", "2025-04-10T12:00:00.000Z"))

    cache = ReportCache(snapshots=snapshots, clock=clock)
    restored = cache.rehydrate()

    assert restored[ReportType.MONTHLY] is False
    assert cache.state(ReportType.MONTHLY) == "empty"
    assert restored[ReportType.NOMINATIONS] is True


def test_slow_snapshot_write_does_not_block_readers(tmp_path, clock):
    snapshots = BlockingSnapshotStore(str(tmp_path))
    cache = ReportCache(snapshots=snapshots, clock=clock)
    data = payload("a")

    writer = threading.Thread(target=cache.put, args=(ReportType.MONTHLY, data))
    writer.start()
    try:
        assert snapshots.entered.wait(timeout=5)
        # the write is still in progress but the slot is already readable
        assert cache.get(ReportType.MONTHLY) is data
        assert cache.state(ReportType.MONTHLY) == "fresh"
        cache.invalidate(ReportType.NOMINATIONS)
    finally:
        snapshots.release.set()
        writer.join(timeout=5)

    assert not writer.is_alive()
    with open(tmp_path / "monthly-leaderboard.json", encoding="utf-8") as f:
        assert json.load(f) == data
