GRID_ROWS = 8
GRID_COLS = 8
TILE_TYPE_COUNT = 5

# Tile types are 1..type_count; EMPTY marks a cell cleared mid-cascade.
EMPTY = 0
MIN_TYPE_COUNT = 3
MAX_TYPE_COUNT = 8
MIN_GRID_SIZE = 3
MIN_RUN_LENGTH = 3

# Local re-draws per cell during initial fill before falling back to the allowed list.
MAX_GENERATION_RETRIES = 32
# Attempts at building a match-free board with at least one valid move (stalemate reshuffle).
MAX_RESPAWN_ATTEMPTS = 200

# Pacing (seconds). settle_delay is the pause between cascade phases in tick-paced mode.
SETTLE_DELAY = 0.0
SWAP_COOLDOWN = 0.15

# Drag input: minimum pointer displacement (screen units) before a drag step swaps.
MOVE_THRESHOLD = 10.0
TILE_SIZE = 64
