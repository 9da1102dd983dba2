"""Experience thresholds for player levels.

``LEVEL_THRESHOLDS[n]`` is the accumulated exp needed to reach level n+1.
"""

LEVEL_THRESHOLDS = (
    0, 100, 250, 500, 850, 1300, 2000, 3000, 4500, 6500,
    9000, 12500, 17000, 23000, 32000, 45000, 65000, 95000, 140000, 200000,
)

MAX_LEVEL = len(LEVEL_THRESHOLDS)
