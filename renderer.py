import numpy as np
import pyglet
import pyglet.gl as gl

import config
import logutil
import util
from blocks import MARKER


class VoxelRenderer:
    """ Draws a finalized VoxelWorld as shaded unit cubes.

    Opaque faces are drawn first, translucent ones (leaves) after with depth
    writes disabled. Extra accent voxels, such as the marker cube, are drawn
    with the world but never added to it.
    """
    def __init__(self, program, world, accents=()):
        self.program = program
        self.opaque_batch = pyglet.graphics.Batch()
        self.translucent_batch = pyglet.graphics.Batch()
        self.vertex_lists = []

        positions, materials = world.to_arrays()
        accents = list(accents)
        if accents:
            extra_pos = np.array([a[0] for a in accents], dtype='i4').reshape(-1, 3)
            extra_mat = np.array([a[1] for a in accents], dtype='u1')
            positions = np.concatenate([positions, extra_pos])
            materials = np.concatenate([materials, extra_mat])

        meshes = util.build_mesh(positions, materials, half=config.CUBE_HALF_SIZE)
        for key, batch in (('opaque', self.opaque_batch), ('translucent', self.translucent_batch)):
            mesh = meshes[key]
            if not mesh['count']:
                continue
            self.vertex_lists.append(self.program.vertex_list(
                mesh['count'],
                gl.GL_TRIANGLES,
                batch=batch,
                position=('f', mesh['position']),
                normal=('f', mesh['normal']),
                color=('f', mesh['color']),
            ))
        logutil.log("RENDER", f"uploaded {meshes['opaque']['count']} opaque and "
                    f"{meshes['translucent']['count']} translucent vertices")

    def draw(self):
        self.program.use()
        self.opaque_batch.draw()
        gl.glDepthMask(gl.GL_FALSE)
        self.translucent_batch.draw()
        gl.glDepthMask(gl.GL_TRUE)


def marker_accents():
    return [(config.MARKER_POSITION, MARKER)]
