"""Ordering load test scenarios.

A stateful SequentialTaskSet journey (quote, place, track) and a trusted
pricing journey, mixed into OrderingUser.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_items, customer_data, trusted_order_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState


class PlaceOrderJourney(SequentialTaskSet):
    """Quote -> Place -> Track.

    Models a student who checks the price, submits the order form and then
    opens the tracking page with the code they were given.
    """

    def on_start(self):
        self.state = OrderState()
        self.items = cart_items()

    @task
    def quote(self):
        with self.client.post(
            "/orders/quote",
            json={"items": self.items},
            catch_response=True,
            name="POST /orders/quote",
        ) as resp:
            if resp.status_code == 200:
                self.state.quoted_total = resp.json()["totalAmount"]
            else:
                resp.failure(f"Quote failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json={**customer_data(), "items": self.items},
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()
                return
            data = resp.json()
            if data["totalAmount"] != self.state.quoted_total:
                resp.failure(f"Charged {data['totalAmount']} but quoted {self.state.quoted_total}")
            self.state.order_code = data["orderCode"]
            self.state.order_codes.append(data["orderCode"])

    @task
    def track_order(self):
        with self.client.get(
            f"/orders/{self.state.order_code.lower()}",
            catch_response=True,
            name="GET /orders/{code}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Track order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class TrustedPricingJourney(SequentialTaskSet):
    """Place an order priced by the storefront's optimizer, then track it."""

    def on_start(self):
        self.state = OrderState()

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=trusted_order_data(),
            catch_response=True,
            name="POST /orders [trusted]",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_code = resp.json()["orderCode"]
            else:
                resp.failure(f"Trusted order failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def track_order(self):
        with self.client.get(
            f"/orders/{self.state.order_code}",
            catch_response=True,
            name="GET /orders/{code}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Track order failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderingUser(HttpUser):
    """Locust user simulating students placing orders.

    Weighted distribution:
    - 75% Quote, place and track
    - 25% Storefront-priced orders
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        PlaceOrderJourney: 3,
        TrustedPricingJourney: 1,
    }
