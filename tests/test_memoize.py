"""Tests for the memoize decorator and call-key derivation."""

from __future__ import annotations

import threading
from collections import namedtuple

import pytest

from tallycache import CacheManager, make_key, memoize


class TestMakeKey:
    def test_equal_arguments_equal_keys(self):
        assert make_key((1, [2, 3], {"a": 1}), {}) == make_key((1, [2, 3], {"a": 1}), {})

    def test_type_distinguishes_equal_looking_values(self):
        keys = {
            make_key((1,), {}),
            make_key((1.0,), {}),
            make_key((True,), {}),
            make_key(("1",), {}),
        }
        assert len(keys) == 4

    def test_list_and_tuple_differ(self):
        assert make_key(([1, 2],), {}) != make_key(((1, 2),), {})

    def test_positional_order_matters(self):
        assert make_key((1, 2), {}) != make_key((2, 1), {})

    def test_keyword_order_ignored(self):
        assert make_key((), {"a": 1, "b": 2}) == make_key((), {"b": 2, "a": 1})

    def test_dict_insertion_order_ignored(self):
        assert make_key(({"a": 1, "b": 2},), {}) == make_key(({"b": 2, "a": 1},), {})

    def test_nested_containers_are_hashable(self):
        key = make_key(([{"x": {1, 2}}, ("y", [None])],), {})
        hash(key)

    def test_no_collision_on_stringified_shape(self):
        # joined-string keys would blur these together
        assert make_key(("a,b",), {}) != make_key(("a", "b"), {})
        assert make_key(([1, 2],), {}) != make_key((1, 2), {})

    def test_unhashable_object_rejected(self):
        class Opaque:
            __hash__ = None

        with pytest.raises(TypeError, match="key="):
            make_key((Opaque(),), {})


class TestMemoize:
    def test_repeated_calls_hit_cache(self):
        cache = CacheManager(max_size=16)
        calls = []

        @memoize(cache)
        def square(x):
            calls.append(x)
            return x * x

        assert [square(4) for _ in range(5)] == [16] * 5
        assert calls == [4]

    def test_distinct_arguments_computed_separately(self):
        cache = CacheManager(max_size=16)
        calls = []

        @memoize(cache)
        def echo(value):
            calls.append(value)
            return value

        echo(1)
        echo(1.0)
        echo("1")
        assert len(calls) == 3

    def test_none_result_is_cached(self):
        cache = CacheManager(max_size=4)
        calls = 0

        @memoize(cache)
        def nothing():
            nonlocal calls
            calls += 1
            return None

        assert nothing() is None
        assert nothing() is None
        assert calls == 1

    def test_exception_not_cached(self):
        cache = CacheManager(max_size=4)
        calls = 0

        @memoize(cache)
        def flaky():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise ValueError("boom")
            return "ok"

        with pytest.raises(ValueError, match="boom"):
            flaky()
        assert flaky() == "ok"
        assert flaky() == "ok"
        assert calls == 2

    def test_recursive_fibonacci_memoizes_inner_calls(self):
        cache = CacheManager(max_size=256)
        calls = 0

        @memoize(cache)
        def fib(n):
            nonlocal calls
            calls += 1
            return n if n < 2 else fib(n - 1) + fib(n - 2)

        assert fib(60) == 1548008755920
        assert calls == 61

    def test_manual_wrapping_without_rebinding_misses_inner_calls(self):
        cache = CacheManager(max_size=256)
        calls = 0

        def fib(n):
            nonlocal calls
            calls += 1
            return n if n < 2 else fib(n - 1) + fib(n - 2)

        fast = memoize(cache, fib)
        assert fast(15) == 610
        # only the outer call was cached; the body recursed through raw fib
        assert calls > 16
        before = calls
        assert fast(15) == 610
        assert calls == before

    def test_forgets_after_eviction(self):
        cache = CacheManager(max_size=1)
        calls = []

        @memoize(cache)
        def ident(x):
            calls.append(x)
            return x

        ident("a")
        ident("b")
        ident("a")
        assert calls == ["a", "b", "a"]

    def test_forgets_after_expiry(self):
        now = [0.0]
        cache = CacheManager(max_size=4, ttl=10, clock=lambda: now[0])
        calls = 0

        @memoize(cache)
        def value():
            nonlocal calls
            calls += 1
            return calls

        assert value() == 1
        now[0] = 9.0
        assert value() == 1
        now[0] = 10.0
        assert value() == 2

    def test_functions_sharing_cache_do_not_collide(self):
        cache = CacheManager(max_size=8)

        @memoize(cache)
        def double(x):
            return x * 2

        @memoize(cache)
        def triple(x):
            return x * 3

        assert double(5) == 10
        assert triple(5) == 15
        assert cache.size() == 2

    def test_custom_key_function(self):
        cache = CacheManager(max_size=8)
        calls = []

        @memoize(cache, key=lambda user: user["id"])
        def load(user):
            calls.append(user["id"])
            return user["name"].upper()

        assert load({"id": 7, "name": "ada"}) == "ADA"
        assert load({"id": 7, "name": "ignored"}) == "ADA"
        assert calls == [7]

    def test_cache_method_shortcut(self):
        cache = CacheManager(max_size=8)

        @cache.memoize
        def add(a, b=0):
            return a + b

        assert add(1, b=2) == 3
        assert add(1, b=2) == 3
        assert cache.has(add.cache_key(1, b=2))
        assert add.cache is cache

    def test_wrapper_preserves_metadata(self):
        cache = CacheManager(max_size=2)

        def documented(x):
            """Docstring survives."""
            return x

        wrapped = memoize(cache, documented)
        assert wrapped.__name__ == "documented"
        assert wrapped.__doc__ == "Docstring survives."
        assert wrapped.__wrapped__ is documented

    def test_namedtuple_arguments(self):
        Point = namedtuple("Point", "x y")
        cache = CacheManager(max_size=4)
        calls = 0

        @memoize(cache)
        def norm(p):
            nonlocal calls
            calls += 1
            return sum(abs(v) for v in p)

        assert norm(Point(1, -2)) == 3
        assert norm(Point(1, -2)) == 3
        assert norm((1, -2)) == 3
        assert calls == 2

    def test_closures_with_same_qualname_do_not_collide(self):
        cache = CacheManager(max_size=8)

        def make(factor):
            @memoize(cache)
            def scale(x):
                return x * factor

            return scale

        double, triple = make(2), make(3)
        assert double.__qualname__ == triple.__qualname__
        assert double(5) == 10
        assert triple(5) == 15
        assert double(5) == 10
        assert cache.size() == 2

    def test_lambdas_do_not_collide(self):
        cache = CacheManager(max_size=8)
        inc = memoize(cache, lambda x: x + 1)
        neg = memoize(cache, lambda x: -x)
        assert inc(1) == 2
        assert neg(1) == -1

    def test_uncopyable_result_still_cached(self):
        cache = CacheManager(max_size=4)
        calls = 0

        @memoize(cache)
        def make_lock():
            nonlocal calls
            calls += 1
            return threading.Lock()

        first = make_lock()
        assert make_lock() is first
        assert calls == 1
