"""
Tests for the record codec.

Decoding returns Ok or CorruptFormat and never raises.
"""

import json
from datetime import datetime, timezone

import pytest

from storefront.codec import (
    CorruptFormat,
    Ok,
    decode_cart,
    decode_directory,
    decode_user,
    encode_cart,
    encode_directory,
    encode_user,
)
from storefront.models import DeliveryDetails, Order, Product, User


class TestUserRoundTrip:
    """Encoding then decoding gives back an equal record."""

    def test_minimal_user(self):
        user = User(email="a@b.c")
        assert decode_user(encode_user(user)) == Ok(user)

    def test_full_user(self, alice: User, vase: Product, delivery: DeliveryDetails):
        order = Order(
            id="ABC123XYZ",
            created_at=datetime(2024, 5, 1, 10, 30, 15, 123456, tzinfo=timezone.utc),
            items=[vase],
            total=7.25,
            delivery=delivery,
        )
        user = alice.model_copy(update={"orders": [order]})

        result = decode_user(encode_user(user))

        assert isinstance(result, Ok)
        assert result.value == user

    def test_absent_optional_fields_are_omitted(self, lamp: Product):
        text = encode_user(User(email="a@b.c", cart=[lamp]))
        data = json.loads(text)

        assert "password" not in data
        assert "description" not in data["cart"][0]
        assert data["cart"][0]["displayPrice"] == "10 $"


class TestDecodeUser:

    def test_missing_keys_default(self):
        result = decode_user('{"email": "a@b.c"}')

        assert isinstance(result, Ok)
        assert result.value.cart == []
        assert result.value.orders == []
        assert result.value.name == ""

    def test_reads_browser_layout(self):
        text = json.dumps({
            "name": "Alice",
            "email": "alice@x.com",
            "password": "pw",
            "cart": [{"id": "p1", "name": "Lamp", "price": 10, "displayPrice": "10 $", "category": "c"}],
            "orders": [{
                "id": "K3J9Q2X1A",
                "date": "2024-05-01T10:00:00.000Z",
                "items": [],
                "total": 0,
                "status": "shipped",
                "delivery": {"fullName": "A", "email": "e", "phone": "p", "address": "a", "city": "c", "zip": "z"},
            }],
        })

        result = decode_user(text)

        assert isinstance(result, Ok)
        assert result.value.orders[0].status == "shipped"
        assert result.value.orders[0].delivery.postal_code == "z"

    @pytest.mark.parametrize("text", ["{not json", "", "null", '"just a string"'])
    def test_invalid_text_is_corrupt(self, text: str):
        assert isinstance(decode_user(text), CorruptFormat)

    def test_null_cart_reads_as_empty(self):
        result = decode_user('{"email": "a@b.c", "cart": null, "orders": null}')

        assert isinstance(result, Ok)
        assert result.value.cart == []
        assert result.value.orders == []

    def test_negative_price_read_as_written(self):
        result = decode_user('{"email": "a@b.c", "cart": [{"id": "p1", "price": -5}]}')

        assert isinstance(result, Ok)
        assert result.value.cart[0].price == -5.0

    def test_top_level_shape_mismatch_is_corrupt(self):
        assert isinstance(decode_user("[]"), CorruptFormat)

    def test_corrupt_format_names_the_field(self):
        result = decode_user('{"email": "a@b.c", "cart": 5}')

        assert isinstance(result, CorruptFormat)
        assert "cart" in result.reason

    def test_corrupt_format_has_reason(self):
        result = decode_user("{")
        assert result.reason
        assert "CorruptFormat" in str(result)


class TestCart:

    def test_round_trip_keeps_order_and_duplicates(self, lamp: Product, rug: Product):
        items = [lamp, rug, lamp]
        assert decode_cart(encode_cart(items)) == Ok(items)

    def test_empty_cart(self):
        assert decode_cart(encode_cart([])) == Ok([])

    def test_corrupt(self):
        assert isinstance(decode_cart("[{"), CorruptFormat)
        assert isinstance(decode_cart('{"id": "p1"}'), CorruptFormat)


class TestDirectory:

    def test_round_trip_preserves_key_order_and_casing(self, alice: User, bob: User):
        users = {"Bob@X.com": bob, alice.email: alice}

        result = decode_directory(encode_directory(users))

        assert isinstance(result, Ok)
        assert list(result.value) == ["Bob@X.com", "alice@x.com"]
        assert result.value == users

    def test_corrupt(self):
        assert isinstance(decode_directory("[]"), CorruptFormat)
        assert isinstance(decode_directory("{]"), CorruptFormat)

    def test_browser_records_with_other_accounts(self):
        """Shapes the browser client actually wrote decode alongside normal accounts."""
        text = json.dumps({
            "alice@x.com": {"name": "Alice", "email": "alice@x.com", "cart": None, "orders": None},
            "bob@x.com": {
                "name": "Bob",
                "email": "bob@x.com",
                "cart": [{"id": "p1", "name": "Lamp", "price": 10, "displayPrice": "10 $"}],
                "orders": [{"id": "K3J9Q2X1A", "date": "2024-05-01T10:00:00.000Z", "items": [], "total": 0}],
            },
            "carol@x.com": {"name": "Carol", "email": "carol@x.com"},
        })

        result = decode_directory(text)

        assert isinstance(result, Ok)
        assert list(result.value) == ["alice@x.com", "bob@x.com", "carol@x.com"]
        assert result.rejected == {}
        assert result.value["alice@x.com"].cart == []
        assert result.value["bob@x.com"].cart[0].price == 10.0
        assert result.value["bob@x.com"].orders[0].delivery is None

    def test_unreadable_entry_is_rejected_alone(self, bob: User):
        broken = {"email": "alice@x.com", "cart": 5}
        text = json.dumps({"alice@x.com": broken, "bob@x.com": json.loads(encode_user(bob))})

        result = decode_directory(text)

        assert isinstance(result, Ok)
        assert result.value == {"bob@x.com": bob}
        assert result.rejected == {"alice@x.com": broken}

    def test_rejected_entries_written_back(self, alice: User, bob: User):
        broken = {"email": "carol@x.com", "orders": "lost"}

        text = encode_directory({alice.email: alice}, rejected={"carol@x.com": broken})

        assert json.loads(text)["carol@x.com"] == broken
        assert decode_directory(text).value == {alice.email: alice}

    def test_decoded_account_wins_over_rejected_entry(self, alice: User):
        text = encode_directory({alice.email: alice}, rejected={alice.email: {"cart": 5}})

        assert decode_directory(text) == Ok({alice.email: alice})
