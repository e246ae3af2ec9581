"""
Gameplay tuning constants.

Every value is expressed per tick (one simulation step, nominally one
displayed frame at 60 Hz), never per second. Changing them tunes the feel
of the game without changing its structure.
"""

# Playfield
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 450
GROUND_Y = 360  # Top of the mud path

# Vertical physics
GRAVITY = 0.6       # Added to vertical velocity every tick
JUMP_FORCE = -15.0  # Upward impulse, screen y grows downward

# Scrolling
BASE_SPEED = 6.5            # px per tick at score 0
SPEED_SCORE_DIVISOR = 150   # speed = BASE_SPEED + score / divisor

# Spawning
SPAWN_BASE_INTERVAL = 110   # ticks between spawns at score 0
SPAWN_MIN_INTERVAL = 45     # floor, spawns never get denser than this
SPAWN_SCORE_DIVISOR = 12    # interval = base - score / divisor

# Obstacle kind roll, uniform in [0, 1): above COW -> cow, above PUDDLE -> puddle, else rock
COW_ROLL_THRESHOLD = 0.7
PUDDLE_ROLL_THRESHOLD = 0.4

# Score
SCORE_PER_TICK = 0.2

# Collision: each side of the runner box shrinks inward by this many px
HITBOX_PAD = 15

# Runner (the woman in the saree)
RUNNER_X = 220.0
RUNNER_WIDTH = 55
RUNNER_HEIGHT = 95
RUNNER_REST_Y = GROUND_Y - RUNNER_HEIGHT  # 265

# Chaser (the man with the bamboo stick)
CHASER_X = 50.0
CHASER_WIDTH = 60
CHASER_HEIGHT = 100
CHASER_REST_Y = GROUND_Y - CHASER_HEIGHT
CHASER_BOB_AMPLITUDE = 5.0
CHASER_BOB_FREQUENCY = 0.15  # radians per tick

# Obstacles sit on the path with their top at this height
OBSTACLE_Y = GROUND_Y - 45
