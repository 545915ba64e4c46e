import copy
import threading
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from select_start.db.snapshots import SnapshotStore
from select_start.services.aggregation import AggregationService
from select_start.services.cache import ReportCache
from select_start.services.errors import SourceUnavailableError

UTC = timezone.utc


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class BlockingSnapshotStore(SnapshotStore):
    """Snapshot store whose save waits until the test releases it."""

    def __init__(self, directory):
        super().__init__(directory)
        self.entered = threading.Event()
        self.release = threading.Event()

    def save(self, name, data):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().save(name, data)


class FakeStore:
    """In-memory stand-in for MongoStore that counts queries."""

    def __init__(self, challenges=None, users=None):
        self.challenges = challenges or []
        self.users = users or []
        self.calls = Counter()
        self.unavailable = False

    def _check(self):
        if self.unavailable:
            raise SourceUnavailableError("Database timed out while loading users")

    async def find_challenge(self, start, end):
        self.calls["challenge"] += 1
        self._check()
        for doc in sorted(self.challenges, key=lambda d: d["date"]):
            if start <= doc["date"] < end:
                return copy.deepcopy(doc)
        return None

    async def find_challenges(self, start, end):
        self.calls["challenges"] += 1
        self._check()
        return [copy.deepcopy(d) for d in self.challenges if start <= d["date"] < end]

    async def find_all_users(self):
        self.calls["users"] += 1
        self._check()
        return copy.deepcopy(self.users)


class FakeEnrichment:
    def __init__(self, games=None):
        self.games = games or {}
        self.requested = []

    async def get_game_info(self, game_id):
        self.requested.append(game_id)
        return self.games.get(game_id)


APRIL_CHALLENGE = {
    "date": utc(2025, 4, 1),
    "monthly_challange_gameid": "1234",
    "monthly_challange_game_total": 50,
    "shadow_challange_gameid": "5678",
    "shadow_challange_game_total": 20,
    "shadow_challange_revealed": False,
    "monthly_game_title": "Pokemon Snap",
    "monthly_game_console": "N64",
}


def make_user(username, monthly=None, shadow=None, awards=None, nominations=None, discord_id=None):
    return {
        "raUsername": username,
        "discordId": discord_id or f"{username}-discord",
        "monthlyChallenges": monthly or {},
        "shadowChallenges": shadow or {},
        "communityAwards": awards or [],
        "nominations": nominations or [],
    }


@pytest.fixture
def clock():
    return FrozenClock(utc(2025, 4, 10, 12, 0))


@pytest.fixture
def users():
    return [
        make_user(
            "alice",
            monthly={"2025-04-01": {"progress": 3, "achievements": 50, "totalAchievements": 50, "percentage": 100}},
            nominations=[{"gameId": "111", "gameTitle": "Chrono Trigger", "consoleName": "SNES",
                          "nominatedAt": utc(2025, 4, 2)}],
        ),
        make_user("bob", monthly={"2025-04-01": {"progress": 0, "achievements": 0}}),
        make_user(
            "carol",
            monthly={"2025-04-01": {"progress": 1, "achievements": 12, "percentage": 24}},
            nominations=[{"gameId": "111", "gameTitle": "Chrono Trigger", "consoleName": "SNES",
                          "nominatedAt": utc(2025, 4, 5)}],
        ),
    ]


@pytest.fixture
def store(users):
    return FakeStore(challenges=[copy.deepcopy(APRIL_CHALLENGE)], users=users)


@pytest.fixture
def cache(tmp_path, clock):
    return ReportCache(snapshots=SnapshotStore(str(tmp_path / "cache")), clock=clock)


@pytest.fixture
def service(cache, store, clock):
    return AggregationService(cache=cache, store=store, clock=clock)
