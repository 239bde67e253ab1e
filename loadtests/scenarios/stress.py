"""Stress scenarios for order code allocation.

Many users placing orders at once is the case where two requests can draw
the same candidate code. Every response must carry a code no other response
has carried.
"""

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import order_data
from loadtests.helpers.response import extract_error_detail

_seen_codes: set[str] = set()


class OrderBurstUser(HttpUser):
    """Rapid-fire order placement.

    Spawn 50-100 of these with an instant spawn rate to simulate the rush
    when a sale opens.
    """

    wait_time = constant_pacing(0.05)  # ~20 req/sec per user

    @task
    def rapid_order(self):
        with self.client.post(
            "/orders",
            json=order_data(),
            catch_response=True,
            name="[SPIKE] POST /orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Burst order failed: {resp.status_code} — {extract_error_detail(resp)}")
                return
            code = resp.json()["orderCode"]
            if code in _seen_codes:
                resp.failure(f"Order code {code} was handed out twice")
            _seen_codes.add(code)
