"""Contract pool and contract economy constants."""

MAX_ACTIVE_TASKS = 3  # Concurrently accepted contracts
MAX_AVAILABLE_TASKS = 6  # Size of the offer pool
TASK_REFRESH_INTERVAL = 120.0  # Real seconds between natural pool top-ups
TASKS_KEPT_ON_REGENERATE = 2  # Prefix of the old pool kept on regeneration
FORCED_REFRESH_COST = 100  # Gold charged for a player-forced refresh
COMPLETED_HISTORY_LIMIT = 20  # Completed contracts kept in saves

# Soft diversity bias during generation
DIVERSITY_TARGET_TYPES = 4
DIVERSITY_SKIP_CHANCE = 0.5

# Expiry penalty
PENALTY_REWARD_FRACTION = 0.5
BASE_REPUTATION_PENALTY = 5

# Quality assumed for delivered records that carry none
DEFAULT_DELIVERY_QUALITY = 60
