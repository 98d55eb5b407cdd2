"""Tests for the per-user result cache."""
from hac_session.cache import ResultCache
from hac_session.models import CourseSummaries, CourseSummary

URL = "https://hac.example.org"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ResultCache(ttl=60, clock=clock)
    key = ResultCache.make_key("courses", URL, "student", "pw")

    cache.set(key, ["AP Biology"])
    clock.now += 59
    assert cache.get(key) == ["AP Biology"]

    clock.now += 1
    assert cache.get(key) is None
    assert len(cache) == 0


def test_keys_are_scoped_by_user_and_parameters():
    cache = ResultCache(ttl=60)
    cache.set(ResultCache.make_key("course_detail", URL, "alice", "pw", "AP Biology", "1"), "alice-1")

    assert cache.get(ResultCache.make_key("course_detail", URL, "bob", "pw", "AP Biology", "1")) is None
    assert cache.get(ResultCache.make_key("course_detail", URL, "alice", "pw", "AP Biology", "2")) is None
    assert cache.get(ResultCache.make_key("course_detail", URL, "alice", "pw", "AP Biology", "1")) == "alice-1"


def test_keys_are_scoped_by_portal_and_password():
    cache = ResultCache(ttl=60)
    cache.set(ResultCache.make_key("courses", "https://district-a.example.org", "s1001", "alice-pw"), "a")

    assert cache.get(ResultCache.make_key("courses", "https://district-b.example.org", "s1001", "alice-pw")) is None
    assert cache.get(ResultCache.make_key("courses", "https://district-a.example.org", "s1001", "WRONG")) is None
    assert cache.get(ResultCache.make_key("courses", "https://district-a.example.org/", "s1001", "alice-pw")) == "a"


def test_key_does_not_hold_the_password():
    key = ResultCache.make_key("identity", URL, "student", "s3cret")

    assert "s3cret" not in repr(key)


def test_set_purges_expired_entries():
    clock = FakeClock()
    cache = ResultCache(ttl=60, clock=clock)
    for user in ("alice", "bob", "carol"):
        cache.set(ResultCache.make_key("courses", URL, user, "pw"), user)

    clock.now += 61
    cache.set(ResultCache.make_key("courses", URL, "dave", "pw"), "dave")

    assert len(cache) == 1


def test_purge_expired_keeps_live_entries():
    clock = FakeClock()
    cache = ResultCache(ttl=60, clock=clock)
    cache.set(ResultCache.make_key("courses", URL, "alice", "pw"), "alice")
    clock.now += 30
    cache.set(ResultCache.make_key("courses", URL, "bob", "pw"), "bob")

    clock.now += 31
    assert cache.purge_expired() == 1
    assert cache.get(ResultCache.make_key("courses", URL, "bob", "pw")) == "bob"


def test_hits_return_copies():
    cache = ResultCache(ttl=60)
    key = ResultCache.make_key("courses", URL, "student", "pw")
    cache.set(key, CourseSummaries(courses=[CourseSummary(class_name="AP Biology", average=94.2)]))

    first = cache.get(key)
    first.courses[0].average = 0.0
    first.courses.clear()

    second = cache.get(key)
    assert second is not first
    assert second.courses[0].average == 94.2


def test_clear():
    cache = ResultCache()
    cache.set(ResultCache.make_key("identity", URL, "alice", "pw"), "Alice")
    cache.clear()

    assert len(cache) == 0
