"""Session-level timing and economy constants."""

# Loop timing (real seconds)
TICK_INTERVAL = 1.0  # Fixed tick period of the game loop
SAVE_INTERVAL = 30.0  # Autosave period

# Simulated clock
TIME_SCALE = 60  # One real second is one in-game minute
SPEED_OPTIONS = (1, 2, 5)  # Player-selectable speed multipliers
GAME_START_HOUR = 8  # In-game clock starts at 08:00 on day 1

# Rare drops and liquidation
GOLDEN_PEARL_VALUE = 1000  # Liquidation value of a golden pearl
BANKRUPTCY_THRESHOLD = 50  # Bankrupt when gold + pearl value falls below this

# Items every new lab starts with
STARTING_INVENTORY = {
    "media_dmem": 3,
    "fbs": 3,
    "pbs": 5,
    "trypsin": 3,
}
