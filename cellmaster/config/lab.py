"""Bench operations: passage ratios, freezing and thawing."""

# Split ratio -> chance the passage succeeds
PASSAGE_SUCCESS_RATES = {2: 0.95, 3: 0.80, 4: 0.65}

# Split ratio -> chance the whole lineage gets contaminated
PASSAGE_CONTAMINATION_RISK = {2: 0.02, 3: 0.05, 4: 0.10}

# Minimum player level -> highest unlocked split ratio
PASSAGE_MAX_RATIO_BY_LEVEL = {1: 2, 4: 3, 7: 4}

# Reagents
PASSAGE_REAGENTS = ("pbs", "trypsin")
ADVANCED_PASSAGE_REAGENT = "accutase"
QC_REAGENT = "myco_test"
EMERGENCY_SAVE_ITEM = "emergency_save"
FREEZE_REAGENT = "fbs"

# Thawing
THAW_QUALITY_LOSS_MIN = 1
THAW_QUALITY_LOSS_MAX = 3
THAW_QUALITY_FLOOR = 30
THAW_START_PROGRESS = 30.0
