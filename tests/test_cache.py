from cinemabook.cache import QueryCache, normalize_key


def test_fetch_loads_once():
    cache = QueryCache()
    calls = []

    def loader():
        calls.append(1)
        return ["movie"]

    assert cache.fetch(("/api/movies",), loader) == ["movie"]
    assert cache.fetch(["/api/movies"], loader) == ["movie"]
    assert len(calls) == 1


def test_ids_match_as_int_or_str():
    assert normalize_key(("/api/movies", 3)) == normalize_key(("/api/movies", "3"))
    assert normalize_key("/api/movies") == ("/api/movies",)


def test_invalidate_by_prefix():
    cache = QueryCache()
    cache.set(("/api/movies",), 1)
    cache.set(("/api/movies", 3), 2)
    cache.set(("/api/movies", 3, "showtimes"), 3)
    cache.set(("/api/showtimes",), 4)

    assert cache.invalidate(("/api/movies", 3)) == 2
    assert ("/api/movies",) in cache
    assert ("/api/movies", 3, "showtimes") not in cache
    assert ("/api/showtimes",) in cache

    assert cache.invalidate(("/api/movies",)) == 1
    assert len(cache) == 1


def test_invalidate_does_not_match_partial_segments():
    cache = QueryCache()
    cache.set(("/api/promotions",), 1)
    cache.set(("/api/promotions/active",), 2)
    cache.invalidate(("/api/promotions",))
    assert ("/api/promotions/active",) in cache


def test_stale_time():
    now = [100.0]
    cache = QueryCache(stale_time=30, clock=lambda: now[0])
    values = iter([1, 2])
    assert cache.fetch(("k",), lambda: next(values)) == 1
    now[0] = 120.0
    assert cache.fetch(("k",), lambda: next(values)) == 1
    now[0] = 131.0
    assert cache.get(("k",)) is None
    assert cache.fetch(("k",), lambda: next(values)) == 2


def test_clear():
    cache = QueryCache()
    cache.set(("a",), 1)
    cache.clear()
    assert len(cache) == 0
