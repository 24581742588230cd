import numpy as np

from blocks import BLOCK_COLORS, BLOCK_ALPHA

cb_v = np.array([
        [-1,+1,-1, -1,+1,+1, +1,+1,+1, +1,+1,-1],  # top
        [-1,-1,-1, +1,-1,-1, +1,-1,+1, -1,-1,+1],  # bottom
        [-1,-1,-1, -1,-1,+1, -1,+1,+1, -1,+1,-1],  # left
        [+1,-1,+1, +1,-1,-1, +1,+1,-1, +1,+1,+1],  # right
        [-1,-1,+1, +1,-1,+1, +1,+1,+1, -1,+1,+1],  # front
        [+1,-1,-1, -1,-1,-1, -1,+1,-1, +1,+1,-1],  # back
],dtype = np.float32)

FACES = [
    ( 0, 1, 0), #up
    ( 0,-1, 0), #down
    (-1, 0, 0), #left
    ( 1, 0, 0), #right
    ( 0, 0, 1), #forward
    ( 0, 0,-1), #back
]

# Two triangles per quad face.
QUAD_TRIANGLES = np.array([0, 1, 2, 0, 2, 3])


def dense_grid(positions, materials):
    """ Scatter sparse voxels into a dense id grid padded by one air cell on
    every side. Returns the grid and the world position of grid[0,0,0].

    """
    lo = positions.min(0) - 1
    hi = positions.max(0) + 2
    grid = np.zeros(tuple(hi - lo), dtype='u1')
    idx = positions - lo
    grid[idx[:, 0], idx[:, 1], idx[:, 2]] = materials
    return grid, lo


def visible_faces(grid):
    """ Return one boolean mask per entry of FACES marking voxel faces that
    are not hidden by an opaque neighbour or a neighbour of the same
    material.

    """
    opaque = BLOCK_ALPHA[grid] >= 1.0
    solid = grid > 0
    masks = []
    for dx, dy, dz in FACES:
        shift = (-dx, -dy, -dz)
        n_opaque = np.roll(opaque, shift, axis=(0, 1, 2))
        n_same = np.roll(grid, shift, axis=(0, 1, 2)) == grid
        masks.append(solid & ~n_opaque & ~n_same)
    return masks


def build_mesh(positions, materials, half=0.5):
    """ Build triangle lists for a set of unit cubes.

    Returns {'opaque': mesh, 'translucent': mesh} where each mesh is a dict
    of flat float32 arrays 'position', 'normal', 'color' (rgba, 0..255) and
    the vertex 'count'.

    """
    positions = np.asarray(positions, dtype='i4').reshape(-1, 3)
    materials = np.asarray(materials, dtype='u1').reshape(-1)
    parts = {'opaque': [], 'translucent': []}
    if len(positions):
        grid, origin = dense_grid(positions, materials)
        for f, mask in enumerate(visible_faces(grid)):
            cells = np.argwhere(mask)
            if not len(cells):
                continue
            ids = grid[cells[:, 0], cells[:, 1], cells[:, 2]]
            centers = (cells + origin).astype('f4')
            quad = cb_v[f].reshape(4, 3) * half
            verts = centers[:, None, :] + quad[QUAD_TRIANGLES][None, :, :]  # (N,6,3)
            normal = np.broadcast_to(np.array(FACES[f], dtype='f4'), verts.shape)
            rgb = BLOCK_COLORS[ids].astype('f4')
            alpha = BLOCK_ALPHA[ids] * 255.0
            rgba = np.concatenate([rgb, alpha[:, None]], axis=1)
            color = np.broadcast_to(rgba[:, None, :], (len(ids), 6, 4))
            translucent = BLOCK_ALPHA[ids] < 1.0
            for key, sel in (('opaque', ~translucent), ('translucent', translucent)):
                if sel.any():
                    parts[key].append((verts[sel], normal[sel], color[sel]))
    meshes = {}
    for key, chunks in parts.items():
        if chunks:
            position = np.concatenate([c[0].reshape(-1, 3) for c in chunks]).astype('f4')
            normal = np.concatenate([c[1].reshape(-1, 3) for c in chunks]).astype('f4')
            color = np.concatenate([c[2].reshape(-1, 4) for c in chunks]).astype('f4')
        else:
            position = np.zeros((0, 3), dtype='f4')
            normal = np.zeros((0, 3), dtype='f4')
            color = np.zeros((0, 4), dtype='f4')
        meshes[key] = {
            'position': position.ravel(),
            'normal': normal.ravel(),
            'color': color.ravel(),
            'count': len(position),
        }
    return meshes


def orbit_position(target, distance, yaw, pitch):
    """Camera position on a sphere around target (angles in radians)."""
    tx, ty, tz = target
    cp = np.cos(pitch)
    return (tx + distance * cp * np.sin(yaw),
            ty + distance * np.sin(pitch),
            tz + distance * cp * np.cos(yaw))


def orbit_angles(target, position):
    """Inverse of orbit_position: (distance, yaw, pitch)."""
    d = np.asarray(position, dtype=float) - np.asarray(target, dtype=float)
    distance = float(np.linalg.norm(d))
    if distance == 0.0:
        return 0.0, 0.0, 0.0
    yaw = float(np.arctan2(d[0], d[2]))
    pitch = float(np.arcsin(d[1] / distance))
    return distance, yaw, pitch
