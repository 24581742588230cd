import numpy

from blocks import BLOCK_NAME

EMPTY = 'EMPTY'
CLASSIFIED = 'CLASSIFIED'
DECORATED = 'DECORATED'
CARVED = 'CARVED'
FINALIZED = 'FINALIZED'

STAGES = (EMPTY, CLASSIFIED, DECORATED, CARVED, FINALIZED)


class StageError(RuntimeError):
    pass


def normalize(position):
    x, y, z = position
    return (int(x), int(y), int(z))


class VoxelWorld(object):
    """ Sparse voxel storage keyed by integer (x, y, z) positions.

    The world holds at most one material per position. It is mutated by the
    generation pipeline only; once finalized it is a read-only collection for
    the renderer.

    """
    def __init__(self):
        self.blocks = {}
        self.stage = EMPTY
        # Roots of the trees placed during decoration, in placement order.
        self.tree_roots = []

    def __len__(self):
        return len(self.blocks)

    def __contains__(self, position):
        return normalize(position) in self.blocks

    def __iter__(self):
        return iter(self.voxels())

    def _check_mutable(self):
        if self.stage == FINALIZED:
            raise StageError('world is finalized and read-only')

    def place(self, position, material):
        """Put a voxel at position, replacing whatever was there."""
        self._check_mutable()
        self.blocks[normalize(position)] = material

    def get(self, position, default=None):
        return self.blocks.get(normalize(position), default)

    def remove(self, position):
        """ Remove the voxel at position. Returns False if there was none.

        """
        self._check_mutable()
        return self.blocks.pop(normalize(position), None) is not None

    def advance(self, stage):
        """ Move to the next generation stage. Stages only move forward, one
        step at a time.

        """
        current = STAGES.index(self.stage)
        if stage not in STAGES or STAGES.index(stage) != current + 1:
            raise StageError(f'cannot move from {self.stage} to {stage}')
        self.stage = stage

    def finalize(self):
        self.advance(FINALIZED)
        return self

    @property
    def finalized(self):
        return self.stage == FINALIZED

    def voxels(self):
        return [(x, y, z, m) for (x, y, z), m in self.blocks.items()]

    def count(self, material=None):
        if material is None:
            return len(self.blocks)
        return sum(1 for m in self.blocks.values() if m == material)

    def counts(self):
        result = {}
        for m in self.blocks.values():
            name = BLOCK_NAME.get(m, m)
            result[name] = result.get(name, 0) + 1
        return result

    def column(self, x, z):
        """Return [(y, material)] for one column, bottom up."""
        return sorted((p[1], m) for p, m in self.blocks.items() if p[0] == x and p[2] == z)

    def to_arrays(self):
        # positions (N,3) int32 and materials (N,) u1, in insertion order
        if not self.blocks:
            return numpy.zeros((0, 3), dtype='i4'), numpy.zeros(0, dtype='u1')
        positions = numpy.array(list(self.blocks.keys()), dtype='i4')
        materials = numpy.array(list(self.blocks.values()), dtype='u1')
        return positions, materials
