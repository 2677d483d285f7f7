"""Identifier helpers."""
import re

from bson import ObjectId

from app.errors import ValidationError, ValidationKind


OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def is_object_id(value: str) -> bool:
    """
    Check that a value is a 24 character hexadecimal string.

    ``ObjectId.is_valid`` also accepts any 12 byte string, which is not a
    shape clients are allowed to send.

    Example:
        >>> is_object_id("64b7f0c2a1b2c3d4e5f60718")
        True
        >>> is_object_id("not-an-id")
        False
    """
    return isinstance(value, str) and OBJECT_ID_PATTERN.fullmatch(value) is not None


def parse_object_id(value: str, label: str = "id") -> ObjectId:
    """
    Convert a path parameter to an ObjectId.

    Raises:
        ValidationError: If the value is not a 24 character hex string
    """
    if not is_object_id(value):
        raise ValidationError(f"Invalid {label}", ValidationKind.INVALID_ID)
    return ObjectId(value)
