"""Cell lifecycle constants (growth, quality, contamination, payout)."""

# Per-instance randomization at creation
BASE_QUALITY_MIN = 50
BASE_QUALITY_SPREAD = 20  # base quality is BASE_QUALITY_MIN + randint(0, spread)
GROWTH_RATE_VARIANCE = 0.25  # growth rate is 1 +/- variance
MIN_GROWTH_RATE = 0.7

# Quality bounds
QUALITY_MIN = 0.0
QUALITY_MAX = 100.0

# Fallbacks for catalog entries that omit them
DEFAULT_CONTAMINATION_BASE = 0.015  # Probability per second while growing
DEFAULT_QUALITY_DRIFT = 0.5  # Quality lost per 10s of overgrowth

# Overgrowth (seconds spent idle in ready)
OVERGROW_DECAY_START = 10.0
OVERGROW_FLAG_AFTER = 60.0
OVERGROWN_CONTAMINATION_RATE = 0.01  # Extra per-second risk once overgrown

# Golden drop
BASE_GOLDEN_CHANCE = 0.05
GOLDEN_PEARL_DROP_VALUE = 1000

# Harvest payout: multiplier = BASE + quality/100 * SPAN
HARVEST_QUALITY_BASE = 0.5
HARVEST_QUALITY_SPAN = 0.7

# Salvage of a contaminated culture
EMERGENCY_VALUE_FRACTION = 0.5
EMERGENCY_EXP_FRACTION = 0.3

# Quality control
QC_PASS_CHANCE = 0.9
QC_QUALITY_BONUS = 6

# Antibiotic trade-off
ANTIBIOTIC_QUALITY_PENALTY = -3

# Passage (splitting a culture)
PASSAGE_LOSS_MIN = 5
PASSAGE_LOSS_MAX = 10
ADVANCED_REAGENT_LOSS_REDUCTION = 3
ADVANCED_REAGENT_QUALITY_BONUS = 3
PASSAGE_QUALITY_FLOOR = 30
