import numpy


def hex_color(value):
    value = value.lstrip('#')
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


class Material(object):
    name = None
    color = '#ffffff'
    # Alpha below 1 draws the material in the translucent pass.
    alpha = 1.0

class Stone(Material):
    name = 'Stone'
    color = '#777777'

class Dirt(Material):
    name = 'Dirt'
    color = '#9b7653'

class Grass(Material):
    name = 'Grass'
    color = '#348c31'

class Trunk(Material):
    name = 'Trunk'
    color = '#9b7653'

class Leaves(Material):
    name = 'Leaves'
    color = '#00ff00'
    alpha = 0.5

class Marker(Material):
    name = 'Marker'
    color = '#ff0000'


MATERIALS = [Stone, Dirt, Grass, Trunk, Leaves, Marker]

# Ids start at 1 so 0 can mean air in dense arrays.
BLOCK_ID = {}
BLOCK_NAME = {}
for i, m in enumerate(MATERIALS, start=1):
    BLOCK_ID[m.name] = i
    BLOCK_NAME[i] = m.name

BLOCK_COLORS = numpy.zeros((len(MATERIALS) + 1, 3), dtype='u1')
BLOCK_ALPHA = numpy.zeros(len(MATERIALS) + 1, dtype='f4')
for m in MATERIALS:
    BLOCK_COLORS[BLOCK_ID[m.name]] = hex_color(m.color)
    BLOCK_ALPHA[BLOCK_ID[m.name]] = m.alpha

STONE = BLOCK_ID['Stone']
DIRT = BLOCK_ID['Dirt']
GRASS = BLOCK_ID['Grass']
TRUNK = BLOCK_ID['Trunk']
LEAVES = BLOCK_ID['Leaves']
MARKER = BLOCK_ID['Marker']
