from pyglet.graphics.shader import Shader, ShaderProgram


VERTEX_SOURCE = """
#version 330 core

uniform mat4 u_projection;
uniform mat4 u_view;

in vec3 position;
in vec3 normal;
in vec4 color;

out vec3 v_normal;
out vec4 v_color;

void main() {
    gl_Position = u_projection * u_view * vec4(position, 1.0);
    v_normal = normal;
    v_color = color / 255.0;
}
"""


FRAGMENT_SOURCE = """
#version 330 core

uniform vec3 u_light_dir;
uniform float u_emissive;

in vec3 v_normal;
in vec4 v_color;

out vec4 out_color;

void main() {
    vec3 n = normalize(v_normal);
    float light = max(dot(n, normalize(u_light_dir)), 0.0);
    // Standard material with the same emissive colour as its base colour.
    vec3 lit_color = v_color.rgb * light + v_color.rgb * u_emissive;
    out_color = vec4(min(lit_color, vec3(1.0)), v_color.a);
}
"""


def create_block_shader():
    """Create the shader program used for voxel rendering."""
    vertex_shader = Shader(VERTEX_SOURCE, "vertex")
    fragment_shader = Shader(FRAGMENT_SOURCE, "fragment")
    return ShaderProgram(vertex_shader, fragment_shader)
