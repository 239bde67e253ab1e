"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the order form's validation rules
(email and phone checks on CustomerDetails) and match the camelCase field
names of the API's Pydantic request schemas.

Product and combo ids are the ones inserted by ``manage.py seed-catalog``.
"""

import random

from faker import Faker

fake = Faker()

TSHIRT_ID = "campus-tshirt"
CAP_ID = "campus-cap"
COMBO_ID = "campus-tshirt-cap"

PRICES = {TSHIRT_ID: 150000, CAP_ID: 100000}
COMBO_PRICE = 220000

SCHOOLS = ["Software Engineering", "Business", "Design", "Languages", "Information Assurance"]


def student_id() -> str:
    """IDs shaped like 'SE171234'."""
    return f"{random.choice(['SE', 'SS', 'SA', 'HE'])}{random.randint(150000, 199999)}"


def valid_email() -> str:
    """Exactly one @, no spaces, a dotted domain."""
    return f"{fake.user_name()[:20]}.{random.randint(1000, 9999)}@{fake.free_email_domain()}"


def valid_phone() -> str:
    """Ten digits starting with 0, as typed on the order form."""
    return f"0{random.choice([3, 5, 7, 8, 9])}{random.randint(10000000, 99999999)}"


def customer_data() -> dict:
    return {
        "studentId": student_id(),
        "fullName": fake.name()[:255],
        "email": valid_email(),
        "phoneNumber": valid_phone(),
        "school": random.choice(SCHOOLS),
        "additionalNote": random.choice([None, "Size M", "Size L", fake.sentence(nb_words=6)]),
    }


def cart_items() -> list[dict]:
    """A random cart; about half of them complete at least one combo."""
    shirts = random.randint(0, 3)
    caps = random.randint(0 if shirts else 1, 3)
    items = []
    if shirts:
        items.append({"productId": TSHIRT_ID, "quantity": shirts})
    if caps:
        items.append({"productId": CAP_ID, "quantity": caps})
    return items


def order_data(items: list[dict] | None = None) -> dict:
    return {**customer_data(), "items": items or cart_items()}


def trusted_order_data() -> dict:
    """An order priced by the storefront, as its whole-cart optimizer would send it."""
    pairs = random.randint(1, 2)
    items = [
        {"productId": TSHIRT_ID, "quantity": pairs},
        {"productId": CAP_ID, "quantity": pairs},
    ]
    original_total = pairs * (PRICES[TSHIRT_ID] + PRICES[CAP_ID])
    final_total = pairs * COMBO_PRICE
    return {
        **customer_data(),
        "items": items,
        "useOptimalPricing": True,
        "optimalPricing": {
            "summary": {
                "originalTotal": original_total,
                "finalTotal": final_total,
                "totalSavings": original_total - final_total,
            },
            "combos": [{"comboId": COMBO_ID, "quantity": pairs}],
            "breakdown": [{"comboId": COMBO_ID, "savings": original_total - final_total}],
        },
    }
