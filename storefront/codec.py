"""
Record codec for the persisted storefront blobs.

Each stored blob is JSON text. Encoding never fails; decoding returns a tagged
result instead of raising, so every caller has to decide what a corrupt blob
means for it:

    result = decode_user(text)
    if isinstance(result, CorruptFormat):
        ...
    user = result.value

Missing keys are filled from the model defaults, and null lists read as
empty. Text that is not valid JSON, or whose top-level value is the wrong kind
of thing (a cart stored as an object), is reported as CorruptFormat.

The directory is decoded entry by entry. An account entry that cannot become
a User does not take the other accounts down with it: it is handed back in
Ok.rejected, verbatim, and encode_directory() writes it back unchanged.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from storefront.models import Product, User

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successfully decoded record."""
    value: T
    # directory entries that could not be decoded, keyed by email
    rejected: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CorruptFormat:
    """Decode failure on a stored blob."""
    reason: str

    def __str__(self) -> str:
        return f"CorruptFormat: {self.reason}"


DecodeResult = Union[Ok[T], CorruptFormat]

_user_adapter = TypeAdapter(User)
_cart_adapter = TypeAdapter(list[Product])
_directory_adapter = TypeAdapter(dict[str, User])
_raw_directory_adapter = TypeAdapter(dict[str, Any])


def _reason(e: ValidationError) -> str:
    first = e.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{first['type']} at {location}: {first['msg']}"
    return f"{first['type']}: {first['msg']}"


def _decode(adapter: TypeAdapter, text: str) -> DecodeResult:
    try:
        return Ok(adapter.validate_json(text))
    except ValidationError as e:
        return CorruptFormat(reason=_reason(e))


# =============================================================================
# User (session snapshot)
# =============================================================================

def encode_user(user: User) -> str:
    return user.model_dump_json(by_alias=True, exclude_none=True)


def decode_user(text: str) -> DecodeResult[User]:
    return _decode(_user_adapter, text)


# =============================================================================
# Cart (guest cart)
# =============================================================================

def encode_cart(items: list[Product]) -> str:
    return _cart_adapter.dump_json(list(items), by_alias=True, exclude_none=True).decode()


def decode_cart(text: str) -> DecodeResult[list[Product]]:
    return _decode(_cart_adapter, text)


# =============================================================================
# Directory (email -> user)
# =============================================================================

def encode_directory(users: dict[str, User], rejected: Optional[dict[str, Any]] = None) -> str:
    """
    Encode the directory.

    Entries in `rejected` are written back as they were read, after the
    decoded accounts. A decoded account wins over a rejected entry with the
    same key.
    """
    if not rejected:
        return _directory_adapter.dump_json(users, by_alias=True, exclude_none=True).decode()

    raw = _directory_adapter.dump_python(users, mode="json", by_alias=True, exclude_none=True)
    for email, entry in rejected.items():
        raw.setdefault(email, entry)
    return _raw_directory_adapter.dump_json(raw).decode()


def decode_directory(text: str) -> DecodeResult[dict[str, User]]:
    result = _decode(_raw_directory_adapter, text)
    if isinstance(result, CorruptFormat):
        return result

    users: dict[str, User] = {}
    rejected: dict[str, Any] = {}
    for email, entry in result.value.items():
        try:
            users[email] = _user_adapter.validate_python(entry)
        except ValidationError:
            rejected[email] = entry
    return Ok(users, rejected=rejected)
