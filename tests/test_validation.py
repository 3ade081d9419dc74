# tests/test_validation.py
from productapi.auth import authorize
from productapi.validation import validate_product


def test_valid_payload_has_no_violations():
    assert validate_product({"name": "Desk", "price": 0, "category": "Furniture"}) == []
    assert validate_product({"name": "Desk", "price": 10.5, "category": "Furniture",
                             "description": "oak", "inStock": False}) == []


def test_empty_payload_collects_every_required_field():
    errors = validate_product({})
    assert len(errors) == 3
    assert any("Name" in e for e in errors)
    assert any("Price" in e for e in errors)
    assert any("Category" in e for e in errors)


def test_whitespace_strings_are_rejected():
    errors = validate_product({"name": "   ", "price": 1, "category": "\t"})
    assert errors == [
        "Name is required and must be a non-empty string",
        "Category is required and must be a non-empty string",
    ]


def test_price_rules():
    base = {"name": "x", "category": "y"}
    assert validate_product({**base, "price": -0.01}) == ["Price is required and must be a non-negative number"]
    assert validate_product({**base, "price": "10"}) != []
    assert validate_product({**base, "price": True}) != []
    assert validate_product({**base, "price": float("inf")}) != []


def test_optional_fields_type_checked():
    errors = validate_product({"name": "x", "price": 1, "category": "y", "inStock": "yes", "description": 3})
    assert errors == ["Description must be a string", "inStock must be a boolean value"]


def test_non_object_body():
    assert validate_product(["name"]) == ["Request body must be a JSON object"]
    assert validate_product(None) == ["Request body must be a JSON object"]


def test_authorize_exact_match_only():
    assert authorize("s3cret", "s3cret")
    assert not authorize("S3CRET", "s3cret")
    assert not authorize("s3cret ", "s3cret")
    assert not authorize(None, "s3cret")
    assert not authorize("", "s3cret")


def test_integer_price_too_large_for_float_is_a_violation():
    errors = validate_product({"name": "Big", "price": 10 ** 400, "category": "X"})
    assert errors == ["Price is required and must be a non-negative number"]
