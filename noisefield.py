#
# Seeded simplex noise in 2D and 3D, vectorized with numpy.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se).
# Optimisations by Peter Eastman (peastman@drizzle.stanford.edu).
#
# The original code was placed in the public domain by its author,
# Stefan Gustavson. You may use it as you see fit, but
# attribution is appreciated.
#
#
import numpy

import config


grad3 = numpy.array([(1,1,0),(-1,1,0),(1,-1,0),(-1,-1,0),
                     (1,0,1),(-1,0,1),(1,0,-1),(-1,0,-1),
                     (0,1,1),(0,-1,1),(0,1,-1),(0,-1,-1)], dtype=numpy.float64)

#Skewing and unskewing factors for 2 and 3 dimensions
F2 = 0.5*(3.0**0.5-1.0)
G2 = (3.0-3.0**0.5)/6.0
F3 = 1.0/3.0
G3 = 1.0/6.0

MASK32 = 0xFFFFFFFF
MASK64 = (1 << 64) - 1


def _rng(seed, salt):
    return numpy.random.RandomState((int(seed) + salt) & MASK32)


def permutation(seed, salt=0):
    """ Return the doubled permutation table and its mod 12 companion for
    a seed. Doubling removes the need for index wrapping.

    """
    p = _rng(seed, salt).permutation(256)
    perm = p[numpy.arange(512) & 255]
    return perm, perm % 12


# returns floor of floating point array by coercing to integer
def fastfloor(x):
    return numpy.array(numpy.floor(x), dtype=numpy.int64)

def dot(g, *v):
    s = 0
    for i in range(len(v)):
        s = s + g[..., i]*v[i]
    return s

def _corner(t, g, *v):
    # Contribution of one simplex corner, zero outside its radius.
    t = numpy.maximum(t, 0.0)
    t = t * t
    return t * t * dot(g, *v)


# 2D simplex noise
def noise2(perm, permMod12, xin, yin):
    # Skew the input space to determine which simplex cell we're in
    s = (xin+yin)*F2 # Hairy factor for 2D
    i = fastfloor(xin+s)
    j = fastfloor(yin+s)
    t = (i+j)*G2
    X0 = i-t # Unskew the cell origin back to (x,y) space
    Y0 = j-t
    x0 = xin-X0 # The x,y distances from the cell origin
    y0 = yin-Y0
    # For the 2D case, the simplex shape is an equilateral triangle.
    # lower triangle, XY order: (0,0)->(1,0)->(1,1)
    # upper triangle, YX order: (0,0)->(0,1)->(1,1)
    i1 = (x0 > y0).astype(numpy.int64)
    j1 = 1 - i1
    x1 = x0 - i1 + G2 # Offsets for middle corner in (x,y) unskewed coords
    y1 = y0 - j1 + G2
    x2 = x0 - 1.0 + 2.0 * G2 # Offsets for last corner in (x,y) unskewed coords
    y2 = y0 - 1.0 + 2.0 * G2

    # Work out the hashed gradient indices of the three simplex corners
    ii = i & 255
    jj = j & 255
    gi0 = permMod12[ii+perm[jj]]
    gi1 = permMod12[ii+i1+perm[jj+j1]]
    gi2 = permMod12[ii+1+perm[jj+1]]

    n0 = _corner(0.5 - x0*x0 - y0*y0, grad3[gi0], x0, y0)
    n1 = _corner(0.5 - x1*x1 - y1*y1, grad3[gi1], x1, y1)
    n2 = _corner(0.5 - x2*x2 - y2*y2, grad3[gi2], x2, y2)

    # The result is scaled to return values in the interval [-1,1].
    return 70.0 * (n0 + n1 + n2)


# 3D simplex noise
def noise3(perm, permMod12, xin, yin, zin):
    # Skew the input space to determine which simplex cell we're in
    s = (xin+yin+zin)*F3 # Very nice and simple skew factor for 3D
    i = fastfloor(xin+s)
    j = fastfloor(yin+s)
    k = fastfloor(zin+s)
    t = (i+j+k)*G3
    X0 = i-t # Unskew the cell origin back to (x,y,z) space
    Y0 = j-t
    Z0 = k-t
    x0 = xin-X0 # The x,y,z distances from the cell origin
    y0 = yin-Y0
    z0 = zin-Z0
    # For the 3D case, the simplex shape is a slightly irregular tetrahedron.
    # Rank the offsets to find which of the six tetrahedra we're in.
    xy = x0>=y0
    yz = y0>=z0
    xz = x0>=z0
    i1 = (xy&(yz|xz)).astype(numpy.int64)
    i2 = (xy | ~xy&yz&xz).astype(numpy.int64)
    j1 = (~xy&yz).astype(numpy.int64)
    j2 = (xy&yz | ~xy).astype(numpy.int64)
    k1 = (xy&~yz&~xz | ~xy&~yz).astype(numpy.int64)
    k2 = (xy&~yz | ~xy&(~yz|~xz)).astype(numpy.int64)

    x1 = x0 - i1 + G3 # Offsets for second corner in (x,y,z) coords
    y1 = y0 - j1 + G3
    z1 = z0 - k1 + G3
    x2 = x0 - i2 + 2.0*G3 # Offsets for third corner in (x,y,z) coords
    y2 = y0 - j2 + 2.0*G3
    z2 = z0 - k2 + 2.0*G3
    x3 = x0 - 1.0 + 3.0*G3 # Offsets for last corner in (x,y,z) coords
    y3 = y0 - 1.0 + 3.0*G3
    z3 = z0 - 1.0 + 3.0*G3
    # Work out the hashed gradient indices of the four simplex corners
    ii = i & 255
    jj = j & 255
    kk = k & 255
    gi0 = permMod12[ii+perm[jj+perm[kk]]]
    gi1 = permMod12[ii+i1+perm[jj+j1+perm[kk+k1]]]
    gi2 = permMod12[ii+i2+perm[jj+j2+perm[kk+k2]]]
    gi3 = permMod12[ii+1+perm[jj+1+perm[kk+1]]]

    n0 = _corner(0.6 - x0*x0 - y0*y0 - z0*z0, grad3[gi0], x0, y0, z0)
    n1 = _corner(0.6 - x1*x1 - y1*y1 - z1*z1, grad3[gi1], x1, y1, z1)
    n2 = _corner(0.6 - x2*x2 - y2*y2 - z2*z2, grad3[gi2], x2, y2, z2)
    n3 = _corner(0.6 - x3*x3 - y3*y3 - z3*z3, grad3[gi3], x3, y3, z3)

    # The result is scaled to stay just inside [-1,1]
    return 32.0*(n0 + n1 + n2 + n3)


def _unwrap(n):
    if numpy.ndim(n) == 0:
        return float(n)
    return n


class SimplexNoise(object):
    '''
    Two independent coherent noise fields keyed by one seed. Coordinates may
    be scalars (a float comes back) or arrays of any matching shape.
    '''
    def __init__(self, seed=None):
        if seed is None:
            seed = config.SEED
        self.seed = seed
        self.perm2, self.perm2_mod12 = permutation(seed, config.NOISE2D_SALT)
        self.perm3, self.perm3_mod12 = permutation(seed, config.NOISE3D_SALT)

    def sample2d(self, x, z):
        x = numpy.asarray(x, dtype=numpy.float64)
        z = numpy.asarray(z, dtype=numpy.float64)
        return _unwrap(noise2(self.perm2, self.perm2_mod12, x, z))

    def sample3d(self, x, y, z):
        x = numpy.asarray(x, dtype=numpy.float64)
        y = numpy.asarray(y, dtype=numpy.float64)
        z = numpy.asarray(z, dtype=numpy.float64)
        return _unwrap(noise3(self.perm3, self.perm3_mod12, x, y, z))


class SeededStream(object):
    '''
    Sequential uniform draws in [0, 1), independent of the coherent fields.
    Every call advances the stream, so callers must draw in a fixed order.
    '''
    def __init__(self, seed=None):
        if seed is None:
            seed = config.SEED
        self.seed = seed
        self.draws = 0
        self._rng = _rng(seed, config.STREAM_SALT)

    def next(self):
        self.draws += 1
        return float(self._rng.random_sample())

    def __iter__(self):
        return self

    __next__ = next


def hash_random(seed, x, y, z, salt=0):
    # Splitmix64-style integer hash for deterministic floats in [0,1).
    h = (int(x) * 0x632BE59BD9B4E019) ^ (int(y) * 0xD6E8FEB86659FD93) ^ (int(z) * 0x9E3779B97F4A7C15)
    h ^= (salt * 0x94D049BB133111EB) ^ int(seed)
    h &= MASK64
    h = (h ^ (h >> 30)) * 0xbf58476d1ce4e5b9 & MASK64
    h = (h ^ (h >> 27)) * 0x94d049bb133111eb & MASK64
    h ^= (h >> 31)
    return (h & ((1 << 53) - 1)) / float(1 << 53)


if __name__ == '__main__':
    import sys
    import time
    from PIL import Image

    seed = int(sys.argv[1]) if len(sys.argv) > 1 else config.SEED
    s = SimplexNoise(seed)
    xs, zs = numpy.mgrid[0:256, 0:256]
    t = time.time()
    n = s.sample2d(xs * config.FREQUENCY * 4, zs * config.FREQUENCY * 4)
    print('2d noise', time.time() - t)
    print('STATS')
    print('######')
    print(n.min(), n.max(), numpy.average(n))
    img = numpy.array((n + 1.0) * 0.5 * 255, dtype='u1')
    im = Image.fromarray(img, 'L')
    im.save('noise2.png')
    print('wrote noise2.png', im.size)
