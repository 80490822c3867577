"""Identifier generation.

Row ids are CUID2 strings. System token ids are embedded in the raw token
(sat_<id>.<secret>), so an id must never contain the '.' separator.
"""

from cuid2 import cuid_wrapper

_next_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new lowercase alphanumeric CUID2."""
    value = _next_cuid()
    if not isinstance(value, str) or not value.isalnum():
        raise ValueError(f"cuid2 produced an unusable id: {value!r}")
    return value
