import math
import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import config
import mapgen
import noisefield
import world
from mapgen import GenerationParameters, InvalidParameter
from world import VoxelWorld
from blocks import STONE, DIRT, GRASS, TRUNK, LEAVES


class ConstantField(object):
    """Synthetic noise returning fixed values everywhere."""
    def __init__(self, value2d=0.0, value3d=0.0):
        self.value2d = value2d
        self.value3d = value3d

    def sample2d(self, x, z):
        return np.full(np.shape(x), self.value2d, dtype=float)

    def sample3d(self, x, y, z):
        return np.full(np.shape(x), self.value3d, dtype=float)


class ConstantStream(object):
    def __init__(self, value):
        self.value = value
        self.draws = 0

    def next(self):
        self.draws += 1
        return self.value


class SequenceStream(object):
    """Returns the given draws in order, then 0.0 forever."""
    def __init__(self, values):
        self.values = list(values)
        self.draws = 0

    def next(self):
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return 0.0


def _snapshot(w):
    return sorted(w.voxels())


def _small_params(**kw):
    values = dict(seed=1337, width=12, amplitude=50, frequency=0.005)
    values.update(kw)
    return GenerationParameters(**values)


# ----- parameters -----

def test_default_parameters_match_reference():
    p = GenerationParameters()
    assert p.seed == 1337
    assert p.frequency == 0.005
    assert p.amplitude == 50
    assert p.height == 100
    assert p.width == 50
    assert p.depth == 50
    assert p.tree_threshold == 0.99
    assert p.tunnel_band == (5, 7)
    assert p.tree_draw_mode == 'stream'
    assert p.validate() is p


def test_height_follows_amplitude():
    assert GenerationParameters(amplitude=10).height == 20
    assert GenerationParameters(amplitude=10, height=7).height == 7
    assert GenerationParameters(width=9).depth == 9


@pytest.mark.parametrize("kw", [
    dict(frequency=float('nan')),
    dict(frequency=float('inf')),
    dict(frequency=-0.1),
    dict(amplitude=-5, height=10),
    dict(amplitude=float('nan'), height=10),
    dict(width=0),
    dict(width=-3),
    dict(width=2.5),
    dict(height=0),
    dict(depth=-1),
    dict(seed='1337'),
    dict(seed=1.5),
    dict(tree_threshold=1.5),
    dict(tree_threshold=float('nan')),
    dict(tunnel_band=(7, 5)),
    dict(tunnel_band=(5, float('inf'))),
    dict(tunnel_band=(1, 2, 3)),
    dict(tunnel_band=5),
    dict(tree_draw_mode='bogus'),
])
def test_invalid_parameters_rejected(kw):
    with pytest.raises(InvalidParameter):
        GenerationParameters(**kw).validate()


def test_tunnel_band_checked_on_validate():
    p = GenerationParameters(tunnel_band=[4, 8.5])
    assert p.validate().tunnel_band == (4, 8.5)


def test_generate_validates_before_running():
    with pytest.raises(ValueError):
        mapgen.generate(GenerationParameters(frequency=float('nan')))


# ----- classifier -----

def test_classify_bands():
    assert mapgen.classify(-100) == STONE
    assert mapgen.classify(19.999) == STONE
    assert mapgen.classify(20) == DIRT
    assert mapgen.classify(22.999) == DIRT
    assert mapgen.classify(23) == GRASS
    assert mapgen.classify(24.999) == GRASS
    assert mapgen.classify(25) is None
    assert mapgen.classify(1000) is None


def test_heightmap_scales_noise():
    p = _small_params(width=5, depth=3)
    field = noisefield.SimplexNoise(p.seed)
    h = mapgen.heightmap(p, field)
    assert h.shape == (5, 3)
    assert h[4, 2] == pytest.approx(field.sample2d(4 * p.frequency, 2 * p.frequency) * p.amplitude)


def test_flat_field_gives_banded_columns():
    p = _small_params(width=3, height=30)
    w = VoxelWorld()
    placed = mapgen.classify_terrain(w, p, ConstantField(0.0))
    assert placed == 3 * 3 * 25
    col = dict(w.column(1, 2))
    assert all(col[y] == STONE for y in range(20))
    assert all(col[y] == DIRT for y in range(20, 23))
    assert all(col[y] == GRASS for y in range(23, 25))
    assert all(y not in col for y in range(25, 30))
    assert w.tree_roots == []


def test_classification_is_monotone_along_y():
    p = _small_params(width=10, frequency=0.05)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, noisefield.SimplexNoise(p.seed))
    order = {STONE: 0, DIRT: 1, GRASS: 2}
    for x in range(p.width):
        for z in range(p.depth):
            ranks = [order[m] for _, m in w.column(x, z)]
            assert ranks == sorted(ranks)
            ys = [y for y, _ in w.column(x, z)]
            # solid below, air above: no holes before carving
            assert ys == list(range(len(ys)))


def test_no_voxel_above_grass_band():
    p = _small_params(width=8, frequency=0.03)
    field = noisefield.SimplexNoise(p.seed)
    h = mapgen.heightmap(p, field)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, field)
    for (x, y, z, m) in w.voxels():
        assert y - h[x, z] < config.GRASS_LIMIT


# ----- trees -----

def test_tree_shape():
    placements = mapgen.tree_shape(5, 10, 5)
    trunk = [p for p, m in placements if m == TRUNK]
    leaves = [p for p, m in placements if m == LEAVES]
    assert trunk == [(5, 11, 5), (5, 12, 5), (5, 13, 5)]
    assert len(leaves) == 27
    assert set(leaves) == {(5 + dx, 14, 5 + dz) for dx in (-1, 0, 1) for dz in (-1, 0, 1)}


def test_place_tree_overwrites_without_collision_checks():
    w = VoxelWorld()
    w.place((0, 4, 0), STONE)
    w.place((0, 2, 0), DIRT)
    mapgen.place_tree(w, 0, 0, 0)
    assert w.get((0, 2, 0)) == TRUNK
    assert w.get((0, 4, 0)) == LEAVES
    assert w.count(TRUNK) == 3
    assert w.count(LEAVES) == 9
    assert w.tree_roots == [(0, 0, 0)]


def test_overlapping_trees_last_write_wins():
    w = VoxelWorld()
    mapgen.place_tree(w, 0, 0, 0)
    mapgen.place_tree(w, 1, 3, 0)
    # second trunk runs through the first canopy
    assert w.get((1, 4, 0)) == TRUNK
    assert w.get((0, 4, 0)) == LEAVES


def test_should_spawn_tree_is_strict():
    assert mapgen.should_spawn_tree(0.995)
    assert not mapgen.should_spawn_tree(0.99)
    assert not mapgen.should_spawn_tree(0.5, threshold=0.5)


def test_constant_high_stream_spawns_tree_on_every_grass_voxel():
    p = _small_params(width=4, height=40)
    stream = ConstantStream(0.995)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, ConstantField(0.0), mapgen.tree_draw(p, stream))
    # two grass layers (y=23, 24) per column
    assert stream.draws == 2 * 4 * 4
    assert len(w.tree_roots) == 2 * 4 * 4
    assert w.tree_roots[0] == (0, 23, 0)
    assert w.tree_roots[1] == (0, 23, 1)


def test_constant_low_stream_spawns_nothing():
    p = _small_params(width=4, height=40)
    stream = ConstantStream(0.5)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, ConstantField(0.0), mapgen.tree_draw(p, stream))
    assert stream.draws == 2 * 4 * 4
    assert w.tree_roots == []
    assert w.count(TRUNK) == 0


def test_tree_draws_follow_traversal_order():
    p = _small_params(width=4, height=40)
    seen = []

    def draw(x, y, z):
        seen.append((x, y, z))
        return 0.0

    mapgen.classify_terrain(VoxelWorld(), p, ConstantField(0.0), draw)
    assert seen == sorted(seen)


def test_hash_draw_mode():
    p = _small_params(tree_draw_mode='hash')
    draw = mapgen.tree_draw(p)
    assert draw(1, 2, 3) == noisefield.hash_random(p.seed, 1, 2, 3, config.TREE_HASH_SALT)
    assert draw(1, 2, 3) == draw(1, 2, 3)


def test_stream_draw_mode_uses_seeded_stream():
    p = _small_params()
    draw = mapgen.tree_draw(p)
    ref = noisefield.SeededStream(p.seed)
    assert [draw(0, 0, 0) for _ in range(5)] == [ref.next() for _ in range(5)]


# ----- tunnels -----

def test_constant_in_band_field_removes_whole_carving_range():
    p = _small_params(width=8, height=30)
    field = ConstantField(0.0, 6.0 / p.amplitude)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, field)
    before = len(w)
    removed = mapgen.carve_tunnels(w, p, field)
    # carving covers x, z in [0, 5) and y in [3, 50); terrain is y in [0, 25)
    assert removed == 5 * 5 * (25 - 3)
    assert len(w) == before - removed
    for x in range(5):
        for z in range(5):
            ys = [y for y, _ in w.column(x, z)]
            assert ys == [0, 1, 2]
    assert len(w.column(5, 0)) == 25
    assert len(w.column(0, 5)) == 25


def test_out_of_band_field_removes_nothing():
    p = _small_params(width=8, height=30)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, ConstantField(0.0, 8.0 / p.amplitude))
    before = _snapshot(w)
    assert mapgen.carve_tunnels(w, p, ConstantField(0.0, 8.0 / p.amplitude)) == 0
    assert mapgen.carve_tunnels(w, p, ConstantField(0.0, 4.0 / p.amplitude)) == 0
    assert _snapshot(w) == before


def test_carving_range_tied_to_amplitude():
    p = _small_params(width=6, amplitude=10, height=40)
    field = ConstantField(0.0, 0.6)
    w = VoxelWorld()
    for y in range(40):
        w.place((0, y, 0), STONE)
    mapgen.carve_tunnels(w, p, field)
    assert [y for y, _ in w.column(0, 0)] == [0, 1, 2] + list(range(10, 40))


def test_carving_is_idempotent():
    p = _small_params(width=24, frequency=0.08)
    field = noisefield.SimplexNoise(p.seed)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, field)
    mapgen.carve_tunnels(w, p, field)
    after_first = _snapshot(w)
    assert mapgen.carve_tunnels(w, p, field) == 0
    assert _snapshot(w) == after_first


def test_tiny_grid_has_empty_carving_range():
    p = _small_params(width=2, height=30)
    w = VoxelWorld()
    mapgen.classify_terrain(w, p, ConstantField(0.0, 0.12))
    assert mapgen.carve_tunnels(w, p, ConstantField(0.0, 0.12)) == 0


# ----- pipeline -----

def test_generate_is_deterministic():
    a = mapgen.generate(_small_params())
    b = mapgen.generate(_small_params())
    assert _snapshot(a) == _snapshot(b)
    assert a.tree_roots == b.tree_roots


def test_generate_hash_mode_is_deterministic():
    a = mapgen.generate(_small_params(tree_draw_mode='hash'))
    b = mapgen.generate(_small_params(tree_draw_mode='hash'))
    assert _snapshot(a) == _snapshot(b)
    assert a.tree_roots == b.tree_roots


def test_generate_returns_finalized_unique_world():
    w = mapgen.generate(_small_params())
    assert w.stage == world.FINALIZED
    positions = [v[:3] for v in w.voxels()]
    assert len(positions) == len(set(positions))
    assert all(isinstance(c, int) for c in positions[0])


def test_reference_scenario_has_all_terrain_materials():
    p = GenerationParameters(seed=1337, width=4, height=30, amplitude=50, frequency=0.005)
    w = mapgen.generate(p)
    assert len(w) > 0
    found = False
    for x in range(4):
        for z in range(4):
            materials = {m for _, m in w.column(x, z)}
            if {STONE, DIRT, GRASS} <= materials:
                found = True
    assert found


def test_single_tree_keeps_trunk_and_canopy():
    p = _small_params(width=4, height=40)
    # grass draws run (0,23,0..3) then (0,24,0), so only the fifth spawns
    stream = SequenceStream([0.0] * 4 + [0.995])
    w = mapgen.generate(p, field=ConstantField(0.0, 0.0), stream=stream)
    assert w.tree_roots == [(0, 24, 0)]
    assert w.get((0, 24, 0)) == GRASS
    assert [w.get((0, y, 0)) for y in (25, 26, 27)] == [TRUNK, TRUNK, TRUNK]
    for dx in (-1, 0, 1):
        for dz in (-1, 0, 1):
            assert w.get((dx, 28, dz)) == LEAVES
    assert w.count(TRUNK) == 3
    assert w.count(LEAVES) == 9


def test_later_terrain_overwrites_lowest_trunk_voxel():
    p = _small_params(width=4, height=40)
    stream = SequenceStream([0.995])
    w = mapgen.generate(p, field=ConstantField(0.0, 0.0), stream=stream)
    assert w.tree_roots == [(0, 23, 0)]
    # (0,24,0) is visited after the tree is placed and becomes grass again
    assert w.get((0, 24, 0)) == GRASS
    assert [w.get((0, y, 0)) for y in (25, 26)] == [TRUNK, TRUNK]
    assert w.get((0, 27, 0)) == LEAVES
    assert w.count(TRUNK) == 2
    assert w.count(LEAVES) == 9


@pytest.mark.parametrize("kw", [
    dict(width=1, height=30),
    dict(width=2, height=30),
    dict(width=10, amplitude=0, height=30),
    dict(width=10, amplitude=2, height=30),
])
def test_generate_small_grids_with_empty_carving_range(kw):
    p = GenerationParameters(**kw)
    w = mapgen.generate(p, stream=ConstantStream(0.0))
    assert w.stage == world.FINALIZED
    assert len(w) > 0
    for x in range(p.width):
        for z in range(p.depth):
            ys = [y for y, _ in w.column(x, z)]
            # nothing carved: every column is solid from the bottom up
            assert ys == list(range(len(ys)))


def test_synthetic_sources_drive_full_pipeline():
    p = _small_params(width=6, height=40)
    w = mapgen.generate(p, field=ConstantField(0.0, 0.0), stream=ConstantStream(0.0))
    assert w.tree_roots == []
    assert len(w) == 6 * 6 * 25
    assert math.isclose(w.count(STONE) / float(len(w)), 20 / 25.0)
