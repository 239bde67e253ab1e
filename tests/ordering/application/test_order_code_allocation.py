"""Tests for order code generation and claiming."""

import itertools
import threading

import pytest
from ordering.errors import AllocationExhausted
from ordering.order.code import (
    MAX_ALLOCATION_ATTEMPTS,
    ORDER_CODE_ALPHABET,
    ORDER_CODE_LENGTH,
    OrderCodeAllocator,
    generate_order_code,
)
from ordering.persistence.fake_adapter import InMemoryOrderStore


class TestGenerateOrderCode:
    def test_length_and_alphabet(self):
        for _ in range(50):
            code = generate_order_code()
            assert len(code) == ORDER_CODE_LENGTH
            assert set(code) <= set(ORDER_CODE_ALPHABET)

    def test_alphabet_has_no_look_alikes(self):
        assert not set("01OI") & set(ORDER_CODE_ALPHABET)


class TestOrderCodeAllocator:
    def test_first_free_code_is_claimed(self, order_store):
        code = OrderCodeAllocator(order_store).allocate()
        assert code in order_store.claimed
        assert order_store.claim_attempts == [code]

    def test_collision_triggers_retry(self, order_store):
        order_store.claimed.add("AAAA2222")
        codes = iter(["AAAA2222", "BBBB3333"])
        code = OrderCodeAllocator(order_store, generator=lambda: next(codes)).allocate()
        assert code == "BBBB3333"
        assert order_store.claim_attempts == ["AAAA2222", "BBBB3333"]

    def test_lowercase_candidates_are_normalized(self, order_store):
        code = OrderCodeAllocator(order_store, generator=lambda: "abcd2345").allocate()
        assert code == "ABCD2345"

    def test_exhaustion_after_ten_collisions(self, order_store):
        order_store.claimed.add("SAMECODE")
        allocator = OrderCodeAllocator(order_store, generator=lambda: "SAMECODE")
        with pytest.raises(AllocationExhausted) as exc:
            allocator.allocate()
        assert exc.value.attempts == MAX_ALLOCATION_ATTEMPTS
        assert len(order_store.claim_attempts) == MAX_ALLOCATION_ATTEMPTS
        assert order_store.claimed == {"SAMECODE"}
        assert order_store.orders == {}

    def test_concurrent_allocations_never_share_a_code(self):
        store = InMemoryOrderStore()
        # A tiny code space forces collisions between threads
        pool = itertools.cycle(["AAAA2222", "BBBB3333", "CCCC4444", "DDDD5555", "EEEE6666", "FFFF7777"])
        pool_lock = threading.Lock()

        def generator():
            with pool_lock:
                return next(pool)

        allocator = OrderCodeAllocator(store, generator=generator)
        results, failures = [], []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                results.append(allocator.allocate())
            except AllocationExhausted as exc:
                failures.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) + len(failures) == 8
        assert len(results) == len(set(results))
        assert set(store.claimed) == set(results)
        assert len(failures) >= 2
