import math
import sys

# pyglet imports
import pyglet
from pyglet.window import mouse
import pyglet.gl as gl
from pyglet.math import Mat4, Vec3

# local module imports
import config
import logutil
import mapgen
import renderer
import shaders
import util


class Window(pyglet.window.Window):

    def __init__(self, world, *args, **kwargs):
        super(Window, self).__init__(*args, **kwargs)

        self.world = world

        # The orbit camera circles this point, the middle of the terrain.
        positions, _ = world.to_arrays()
        if len(positions):
            center = (positions.min(0) + positions.max(0)) / 2.0
            self.target = (float(center[0]), float(center[1]), float(center[2]))
        else:
            self.target = (0.0, 0.0, 0.0)
        self.distance, self.yaw, self.pitch = util.orbit_angles(self.target, config.CAMERA_START)

        self.program = shaders.create_block_shader()
        self.voxels = renderer.VoxelRenderer(self.program, world, renderer.marker_accents())

    def camera_position(self):
        return util.orbit_position(self.target, self.distance, self.yaw, self.pitch)

    def on_mouse_drag(self, x, y, dx, dy, buttons, modifiers):
        if buttons & mouse.LEFT:
            self.yaw -= math.radians(dx * config.ORBIT_SPEED)
            pitch = self.pitch - math.radians(dy * config.ORBIT_SPEED)
            limit = config.CAMERA_PITCH_LIMIT
            self.pitch = max(-limit, min(limit, pitch))

    def on_mouse_scroll(self, x, y, scroll_x, scroll_y):
        self.distance = max(1.0, self.distance * config.ZOOM_STEP ** scroll_y)

    def on_draw(self):
        self.clear()
        width, height = self.get_framebuffer_size()
        gl.glViewport(0, 0, max(1, width), max(1, height))
        aspect = width / float(max(1, height))
        self.program['u_projection'] = Mat4.perspective_projection(
            aspect, config.NEAR_PLANE, config.FAR_PLANE, config.FIELD_OF_VIEW)
        self.program['u_view'] = Mat4.look_at(
            Vec3(*self.camera_position()), Vec3(*self.target), Vec3(0, 1, 0))
        self.program['u_light_dir'] = config.LIGHT_DIRECTION
        self.program['u_emissive'] = config.EMISSIVE_INTENSITY
        self.voxels.draw()


def setup():
    """ Basic OpenGL configuration.

    """
    r, g, b = config.SKY_COLOR
    gl.glClearColor(r / 255.0, g / 255.0, b / 255.0, 1)
    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)


def parse_args(argv):
    """Optional positional arguments: [seed] [width]."""
    seed = None
    width = None
    if len(argv) > 1:
        seed = int(argv[1])
    if len(argv) > 2:
        width = int(argv[2])
    return mapgen.GenerationParameters(seed=seed, width=width)


def main():
    params = parse_args(sys.argv)
    logutil.log("MAIN", f"generating {params}")
    world = mapgen.generate(params)
    window = Window(world, width=config.WINDOW_WIDTH, height=config.WINDOW_HEIGHT,
        caption='Voxel terrain', resizable=True, vsync=True)
    setup()
    try:
        pyglet.app.run()
    except Exception:
        import traceback
        logutil.log("MAIN", traceback.format_exc(), level="ERROR")
        window.close()
        raise


if __name__ == '__main__':
    main()
