"""Public event slugs."""

import secrets
import string

SLUG_ALPHABET = string.ascii_letters + string.digits


def generate_slug(length: int = 10) -> str:
    """Return a random URL-safe slug.

    Collisions are unlikely but possible; stores report them and the caller
    retries with a new slug.
    """
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))
