# productapi/validation.py
import math
from typing import Any, List


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _is_number(value: Any) -> bool:
    # bool is a subclass of int but never a price
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON integers too large for a float
        return False


def validate_product(payload: Any) -> List[str]:
    """
    Check a create/update payload against the product field rules.

    Every rule is evaluated, so the result lists all violations rather than
    stopping at the first one. An empty list means the payload is valid.
    """
    if not isinstance(payload, dict):
        return ["Request body must be a JSON object"]

    errors = []

    if not _is_non_empty_string(payload.get("name")):
        errors.append("Name is required and must be a non-empty string")

    price = payload.get("price")
    if not _is_number(price) or price < 0:
        errors.append("Price is required and must be a non-negative number")

    if not _is_non_empty_string(payload.get("category")):
        errors.append("Category is required and must be a non-empty string")

    if "description" in payload and not isinstance(payload["description"], str):
        errors.append("Description must be a string")

    if "inStock" in payload and not isinstance(payload["inStock"], bool):
        errors.append("inStock must be a boolean value")

    return errors
