"""
TardiSim Configuration
All tunable parameters for the tardigrade terrain simulation.
"""

# ─── Terrain ──────────────────────────────────────────────────────────────────
CELL_SCALE   = 100    # terrain cells per world unit (both axes)
CHUNK_SIZE   = 100    # cells per chunk side
CELL_COLOR   = (1.0, 1.0, 1.0)      # integrity of a freshly painted cell
UNDERGROUND_COLOR = (-3.0, -3.0, -3.0)
EROSION_MAX  = 0.1    # max integrity lost per channel per bounce

# ─── Arena (cell units) ───────────────────────────────────────────────────────
HIGHWALL     = 200    # distance of each side wall from the origin
WALLSIZE     = 30     # wall / floor thickness
BRUSH_SIZE   = 7      # side of the square painted by the draw/erase tool
PAINT_MAX_CELLS = 100000  # largest rect a single paint request may cover

# ─── Creature body ────────────────────────────────────────────────────────────
# Render size of each member, head first; 0 = hidden spacer segment
MEMBER_SIZE  = [1, 1, 0, 1.1, 0, .9, .8]
MEMBER_JITTER = 0.01  # initial spread between consecutive members
SPAWN_SPREAD = 0.2    # default spawn x range around the origin
SPAWN_HEIGHT = 1.0    # default spawn y
DEFAULT_BORN = -10000 # birth time of creatures created without one
SKIN_COLORIZE = 0.3   # per-channel spread of a fresh random skin

# ─── Physics ──────────────────────────────────────────────────────────────────
GRAVITY        = 0.05
MOVE_SCALE     = 0.01       # velocity → displacement per tick
BOUNCE_DAMPING = 0.8
INFLUENCE_DECAY = 0.9
THRILL_MEMORY  = 0.999999   # per-tick decay of a creature's peak speed
WOBBLE_PERIOD  = 30
WOBBLE_AMPLITUDE = 0.25

# ─── Behaviour / reproduction ─────────────────────────────────────────────────
ACT_CHANCE       = 0.1      # probability a creature acts in a tick
RECENT_BOUNCE    = 200      # time window that counts as "just bounced"
CLOSENESS        = 0.0005   # squared distance for a social encounter
MUTATION_CHANCE  = 0.01     # per skin channel
CHILD_COLORIZE   = 0.5
MATURATION_TIME  = 10000
MATURE_SIZE      = 0.9      # size needed to reproduce

# ─── Symbols ──────────────────────────────────────────────────────────────────
SYMBOL_LOVE      = 0
SYMBOL_THRILL    = 1
SYMBOL_COOLDOWN  = 500
SYMBOL_LIFESPAN  = 3000

# ─── World aggregates ─────────────────────────────────────────────────────────
THRILL_DECAY       = 0.000005   # times (population + THRILL_DECAY_OFFSET)
THRILL_DECAY_OFFSET = 5
SCORE_DIVISOR      = 1000
TICKS_PER_YEAR     = 1000

# ─── Mood ─────────────────────────────────────────────────────────────────────
MOOD_LEVELS     = 10
JOY_CAPACITY    = 100       # thrill per creature that counts as full joy
MOOD_GRACE      = 5000      # no mood tracking before this time
DESPAIR_AFTER   = 30000     # earliest time a sad world can give up
DESPAIR_WINDOW  = 10000     # how long mood must stay at 0

# ─── Run loop ─────────────────────────────────────────────────────────────────
TOTAL_CREATURES = 2
FRAME_RATE      = 60
FRAME_MS        = 1000 / FRAME_RATE
MAX_TICKS       = 60000
STATS_INTERVAL  = 100       # record a stats row every N ticks

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR           = "output"      # directory for saved images and charts
SNAPSHOT_INTERVAL  = 6000          # save a world snapshot every N ticks
LOG_CSV            = True          # write per-interval CSV log
