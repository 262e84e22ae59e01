"""
Identifier generation for inserted records.

Ids are drawn uniformly from [0-9a-zA-Z] using the `secrets` CSPRNG.
With the default length of 15 there are 62**15 (about 7.7e26) possible
ids, so collisions are treated as negligible and never checked.
"""

import secrets
import string
from typing import Optional

from docstore.errors import InvalidArgument

ALPHABET = string.digits + string.ascii_letters
DEFAULT_ID_LENGTH = 15


def random_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """
    Return a random alphanumeric string.

    Args:
        length: Number of characters (must be >= 1)

    Returns:
        Random identifier
    """
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise InvalidArgument(f"id length must be a positive integer, got {length!r}")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


class IdGenerator:
    """Callable id source with a configurable default length."""

    def __init__(self, length: int = DEFAULT_ID_LENGTH):
        # Validate eagerly so a bad config fails at construction
        random_id(length)
        self.length = length

    def next(self, length: Optional[int] = None) -> str:
        return random_id(self.length if length is None else length)

    def __call__(self) -> str:
        return self.next()
