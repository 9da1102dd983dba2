"""Identifier generation for lab entities.

Ids are short prefixed hex strings drawn from the session RNG, so a seeded
session produces the same ids run after run and a restored session keeps
producing fresh ones from where it left off.

Usage:
------
    new_id(rng, "cell")   # "cell_3f2a9c0b71de"
    new_id(rng, "task")   # "task_08c1d5e44a90"
"""

import random

ID_BITS = 48


def new_id(rng: random.Random, prefix: str) -> str:
    return f"{prefix}_{rng.getrandbits(ID_BITS):012x}"
