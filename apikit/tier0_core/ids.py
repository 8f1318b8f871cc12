"""
apikit.tier0_core.ids
─────────────────────
Short random identifiers (activation codes, public references) drawn from
digits and upper-case letters. Not a substitute for a token generator:
use the secrets module when the ID guards access to something.
"""
from __future__ import annotations

import random
import string

CHARSET = string.digits + string.ascii_uppercase

# SystemRandom keeps no state in-process, so concurrent callers cannot
# corrupt it.
_rng = random.SystemRandom()


def generate_unique_id(length: int, rng: random.Random | None = None) -> str:
    """
    Generate an identifier of `length` characters from 0-9A-Z.

    Pass `rng` to use a seeded or per-caller generator, e.g. in tests.
    """
    if length < 0:
        raise ValueError(f"ID length must not be negative, got {length}")
    source = rng or _rng
    return "".join(source.choice(CHARSET) for _ in range(length))


__all__ = ["CHARSET", "generate_unique_id"]
