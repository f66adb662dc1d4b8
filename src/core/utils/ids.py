"""Identifier generation for stored images.

Object ids and short codes are drawn from a URL-safe alphabet using the
``secrets`` CSPRNG. Collisions are negligible but not impossible; callers
that persist identifiers must still handle a duplicate on create.
"""

import secrets

from core.utils.constants import ID_ALPHABET, OBJECT_ID_LENGTH, SHORT_CODE_LENGTH


def _random_token(length: int) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def new_object_id() -> str:
    """Generate a 21-character object identifier (~126 bits of entropy)."""
    return _random_token(OBJECT_ID_LENGTH)


def new_short_code() -> str:
    """Generate an 8-character short code for redirect links."""
    return _random_token(SHORT_CODE_LENGTH)
