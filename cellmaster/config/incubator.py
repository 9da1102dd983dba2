"""Incubator capacity and slot economy."""

MAX_SLOTS = 20

# Cost to unlock the next slot, indexed by the current unlocked count.
# The first seven are free so every mode's starting slots cost nothing.
SLOT_UNLOCK_COSTS = (
    0, 0, 0, 0, 0, 0, 0,
    1000, 1500, 2000, 3000, 4000, 5000,
    8000, 10000, 15000, 25000, 40000, 60000, 100000,
)
