#std/external libs
import time
import math
import numbers
import numpy

#local libs
from blocks import STONE, DIRT, GRASS, TRUNK, LEAVES
from world import VoxelWorld, CLASSIFIED, DECORATED, CARVED, FINALIZED
import noisefield
import config
import logutil

TREE_DRAW_MODES = ('stream', 'hash')


class InvalidParameter(ValueError):
    pass


def _is_int(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


class GenerationParameters(object):
    """ Read-only configuration for one generation run.

    Any value left as None is taken from config. Height defaults to twice
    the amplitude and depth defaults to the width.

    """
    def __init__(self, seed=None, width=None, height=None, depth=None,
                 frequency=None, amplitude=None, tree_threshold=None,
                 tunnel_band=None, tree_draw_mode=None):
        self.seed = config.SEED if seed is None else seed
        self.frequency = config.FREQUENCY if frequency is None else frequency
        self.amplitude = config.AMPLITUDE if amplitude is None else amplitude
        self.width = config.WIDTH if width is None else width
        if height is None:
            height = config.HEIGHT if amplitude is None else 2 * amplitude
            if _is_real(height) and math.isfinite(height):
                height = int(math.ceil(height))
        self.height = height
        if depth is None:
            depth = config.DEPTH if config.DEPTH is not None else self.width
        self.depth = depth
        self.tree_threshold = config.TREE_THRESHOLD if tree_threshold is None else tree_threshold
        self.tunnel_band = config.TUNNEL_BAND if tunnel_band is None else tunnel_band
        self.tree_draw_mode = config.TREE_DRAW_MODE if tree_draw_mode is None else tree_draw_mode

    def __repr__(self):
        return ('GenerationParameters(seed=%r, width=%r, height=%r, depth=%r, frequency=%r, '
                'amplitude=%r, tree_threshold=%r, tunnel_band=%r, tree_draw_mode=%r)' % (
                    self.seed, self.width, self.height, self.depth, self.frequency,
                    self.amplitude, self.tree_threshold, self.tunnel_band, self.tree_draw_mode))

    def validate(self):
        """ Fail fast on values that would feed NaN or nonsense into the noise
        fields. Returns self so calls can be chained.

        """
        if not _is_int(self.seed):
            raise InvalidParameter(f'seed must be an integer, got {self.seed!r}')
        for name in ('width', 'height', 'depth'):
            value = getattr(self, name)
            if not _is_int(value):
                raise InvalidParameter(f'{name} must be an integer, got {value!r}')
            if value <= 0:
                raise InvalidParameter(f'{name} must be positive, got {value!r}')
        for name in ('frequency', 'amplitude'):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value):
                raise InvalidParameter(f'{name} must be a finite number, got {value!r}')
            if value < 0:
                raise InvalidParameter(f'{name} must not be negative, got {value!r}')
        t = self.tree_threshold
        if not _is_real(t) or not math.isfinite(t) or not 0.0 <= t <= 1.0:
            raise InvalidParameter(f'tree_threshold must lie in [0, 1], got {t!r}')
        try:
            band = tuple(self.tunnel_band)
        except TypeError:
            raise InvalidParameter(f'tunnel_band must be a pair of numbers, got {self.tunnel_band!r}')
        if len(band) != 2 or not all(_is_real(v) and math.isfinite(v) for v in band):
            raise InvalidParameter(f'tunnel_band must be two finite numbers, got {band!r}')
        if band[0] >= band[1]:
            raise InvalidParameter(f'tunnel_band must be increasing, got {band!r}')
        self.tunnel_band = band
        if self.tree_draw_mode not in TREE_DRAW_MODES:
            raise InvalidParameter(f'tree_draw_mode must be one of {TREE_DRAW_MODES}, got {self.tree_draw_mode!r}')
        return self


def classify(value):
    """ Material for a cell that sits value blocks above the surface
    height, or None for air. The lowest matching band wins.

    """
    if value < config.STONE_LIMIT:
        return STONE
    elif value < config.DIRT_LIMIT:
        return DIRT
    elif value < config.GRASS_LIMIT:
        return GRASS
    return None


def heightmap(params, field):
    """Surface height for every (x, z) column, shape (width, depth)."""
    xs, zs = numpy.mgrid[0:params.width, 0:params.depth]
    f = params.frequency
    return numpy.asarray(field.sample2d(xs * f, zs * f), dtype=numpy.float64) * params.amplitude


def tree_shape(x, y, z):
    """ Return the [(position, material)] placements of a tree rooted on the
    grass voxel at (x, y, z): a trunk straight up, then the canopy layer
    centered one block above the trunk.

    """
    placements = [((x, y + dy, z), TRUNK) for dy in range(1, config.TREE_TRUNK_HEIGHT + 1)]
    top = y + config.TREE_TRUNK_HEIGHT + 1
    r = config.TREE_CANOPY_RADIUS
    for dx in range(-r, r + 1):
        for dz in range(-r, r + 1):
            for _ in range(config.TREE_CANOPY_PASSES):
                placements.append(((x + dx, top, z + dz), LEAVES))
    return placements


def place_tree(world, x, y, z):
    # No collision checks: the tree overwrites whatever is in its way.
    placements = tree_shape(x, y, z)
    for position, material in placements:
        world.place(position, material)
    world.tree_roots.append((x, y, z))
    if getattr(config, 'LOG_TREES', False):
        logutil.log('MAPGEN', f'tree rooted at {(x, y, z)}', level='DEBUG')
    return placements


def should_spawn_tree(draw, threshold=None):
    if threshold is None:
        threshold = config.TREE_THRESHOLD
    return draw > threshold


def tree_draw(params, stream=None):
    """ Return a callable (x, y, z) -> float in [0, 1) supplying one draw per
    grass voxel. An explicit stream object (anything with next()) always
    takes precedence over the configured draw mode.

    """
    if stream is None and params.tree_draw_mode == 'hash':
        seed = params.seed
        salt = config.TREE_HASH_SALT
        return lambda x, y, z: noisefield.hash_random(seed, x, y, z, salt)
    if stream is None:
        stream = noisefield.SeededStream(params.seed)
    return lambda x, y, z: stream.next()


def classify_terrain(world, params, field, draw=None):
    """ Fill world with the heightmap-shaped terrain mass.

    Cells are visited in x, then y, then z order. When draw is given, each
    grass voxel takes one draw immediately after it is placed and spawns a
    tree if the draw beats the threshold, so tree positions follow the
    traversal order. Returns the number of voxels classified.

    """
    h = heightmap(params, field).tolist()
    placed = 0
    for x in range(params.width):
        for y in range(params.height):
            for z in range(params.depth):
                material = classify(y - h[x][z])
                if material is None:
                    continue
                world.place((x, y, z), material)
                placed += 1
                if material == GRASS and draw is not None:
                    if should_spawn_tree(draw(x, y, z), params.tree_threshold):
                        place_tree(world, x, y, z)
    return placed


def carve_tunnels(world, params, field):
    """ Remove every voxel where the scaled 3D noise falls strictly inside
    the tunnel band. Returns the number of voxels removed.

    The vertical range stops at the amplitude rather than the grid height,
    and the far x/z edges are inset, so tunnels never reach the upper
    part of the grid or the outer border.

    """
    lo, hi = params.tunnel_band
    inset = config.TUNNEL_EDGE_INSET
    top = int(math.ceil(params.amplitude))
    floor = config.TUNNEL_FLOOR
    # Clamp each stop so grids narrower than the inset give an empty range.
    i, j, k = numpy.mgrid[0:max(0, params.width - inset), floor:max(floor, top),
                          0:max(0, params.depth - inset)]
    if i.size == 0:
        return 0
    f = params.frequency
    values = numpy.asarray(field.sample3d(i * f, j * f, k * f), dtype=numpy.float64) * params.amplitude
    hits = (values > lo) & (values < hi)
    removed = 0
    for pos in zip(i[hits].tolist(), j[hits].tolist(), k[hits].tolist()):
        if world.remove(pos):
            removed += 1
    return removed


def generate(params=None, field=None, stream=None):
    """ Run the whole pipeline and return the finalized VoxelWorld.

    field defaults to SimplexNoise(params.seed) and stream to the draw
    source selected by params.tree_draw_mode. Both can be swapped for
    synthetic stand-ins with the same methods.

    """
    if params is None:
        params = GenerationParameters()
    params.validate()
    if field is None:
        field = noisefield.SimplexNoise(params.seed)
    draw = tree_draw(params, stream)
    world = VoxelWorld()
    try:
        logutil.set_stage(CLASSIFIED)
        t = time.time()
        placed = classify_terrain(world, params, field, draw)
        world.advance(CLASSIFIED)
        logutil.log('MAPGEN', f'classified {placed} voxels in a {params.width}x{params.height}x{params.depth} grid '
                    f'seed={params.seed} ms={(time.time() - t) * 1000.0:.1f}')
        world.advance(DECORATED)
        logutil.set_stage(DECORATED)
        logutil.log('MAPGEN', f'placed {len(world.tree_roots)} trees, world has {len(world)} voxels')

        logutil.set_stage(CARVED)
        t = time.time()
        removed = carve_tunnels(world, params, field)
        world.advance(CARVED)
        logutil.log('MAPGEN', f'carved {removed} voxels ms={(time.time() - t) * 1000.0:.1f}')

        logutil.set_stage(FINALIZED)
        world.finalize()
        logutil.log('MAPGEN', f'finalized {len(world)} voxels {world.counts()}')
    finally:
        logutil.set_stage(None)
    return world
