import math

# Terrain generation defaults. GenerationParameters() reads these when no
# explicit value is given.
SEED = 1337
FREQUENCY = 0.005 # noise input scaling
AMPLITUDE = 50 # height scaling
HEIGHT = AMPLITUDE * 2
WIDTH = 50
DEPTH = None # None reuses WIDTH

# Classifier bands, measured as (y - surface height). First match wins.
STONE_LIMIT = 20
DIRT_LIMIT = 23
GRASS_LIMIT = 25

# Trees spawn on grass when the draw exceeds this value (roughly 1%).
TREE_THRESHOLD = 0.99
# "stream" draws from one sequential PRNG in x, y, z traversal order.
# "hash" draws from a per-voxel hash of (seed, x, y, z) so the result does
# not depend on traversal order.
TREE_DRAW_MODE = "stream"
TREE_TRUNK_HEIGHT = 3
TREE_CANOPY_RADIUS = 1
# The canopy layer is emitted once per pass; every pass lands on y + 4.
TREE_CANOPY_PASSES = 3

# Tunnels remove voxels whose scaled 3D noise lies strictly inside this band.
TUNNEL_BAND = (5, 7)
# Carving skips the outer border on the far x/z edges and the bottom layers.
TUNNEL_EDGE_INSET = 3
TUNNEL_FLOOR = 3

# Salts keep the 2D field, 3D field and hash stream independent for one seed.
NOISE2D_SALT = 0
NOISE3D_SALT = 1
STREAM_SALT = 2
TREE_HASH_SALT = 7

# Enable ANSI colors in logs.
LOG_COLOR = True

# Minimum level printed: DEBUG, INFO, WARN or ERROR.
LOG_LEVEL = "INFO"

# Append log lines to this file as well as stdout (None disables).
LOG_FILE_PATH = None

# Log every tree as it is placed (DEBUG level).
LOG_TREES = True

# Viewer settings
WINDOW_WIDTH = 1024
WINDOW_HEIGHT = 768
FIELD_OF_VIEW = 75
NEAR_PLANE = 0.1
FAR_PLANE = 1000.0
CAMERA_START = (45.0, 45.0, 45.0)
ORBIT_SPEED = 0.3 # degrees per pixel of mouse drag
ZOOM_STEP = 0.9
SKY_COLOR = (0x87, 0xCE, 0xEB)
LIGHT_DIRECTION = (0.0, 1.0, 0.0)
EMISSIVE_INTENSITY = 0.5
# Red accent cube drawn on top of the terrain.
MARKER_POSITION = (0, 30, 0)
CUBE_HALF_SIZE = 0.5

CAMERA_PITCH_LIMIT = math.radians(89.0)
