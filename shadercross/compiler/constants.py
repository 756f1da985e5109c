"""
Constants and predefined values for the shader cross-compiler.

This module contains the fixed GLSL snippets the pipeline injects, the
optimizer enumerations and operator precedence used by the writer.
"""

# Preamble directives
DESKTOP_VERSION_DIRECTIVE = "#version 420"
ES3_VERSION_DIRECTIVE = "#version 300 es"
UNIFORM_BLOCK_EXTENSION = "#extension GL_ARB_gpu_shader5 : enable"
PIXEL_PRECISION_STATEMENT = "precision highp float;"
FRAGMENT_OUTPUT_ARRAY = "gl_FragData"

# Program emitted for an ES pixel stage requested without an entry point
EMPTY_PIXEL_PROGRAM = "void main(){}"

# Packing layout added to every uniform block
STD140_LAYOUT = "std140"

# Built-in vertex attributes remapped to custom attributes before ES vertex
# shaders reach the optimizer: (builtin, attribute name, precision, type)
ES_VERTEX_ATTRIBUTE_SHIMS: list[tuple[str, str, str, str]] = [
    ("gl_Vertex", "_glesVertex", "highp", "vec4"),
    ("gl_Normal", "_glesNormal", "mediump", "vec3"),
    ("gl_MultiTexCoord0", "_glesMultiTexCoord0", "highp", "vec4"),
    ("gl_MultiTexCoord1", "_glesMultiTexCoord1", "highp", "vec4"),
    ("gl_Color", "_glesColor", "lowp", "vec4"),
]

# glsl-optimizer API values
OPTIMIZER_TARGET_OPENGL = 0
OPTIMIZER_TARGET_OPENGLES20 = 1
OPTIMIZER_TARGET_OPENGLES30 = 2
OPTIMIZER_SHADER_VERTEX = 0
OPTIMIZER_SHADER_FRAGMENT = 1
OPTIMIZER_DEFAULT_OPTIONS = 0
OPTIMIZER_LIBRARY_NAME = "glsl_optimizer"

# Operator precedence for expression emission (higher binds tighter)
OPERATOR_PRECEDENCE: dict[str, int] = {
    # Assignment has lowest precedence
    "=": 1,
    # Ternary conditional
    "?": 2,
    # Logical operators
    "||": 3,  # Logical OR
    "^^": 4,  # Logical XOR
    "&&": 5,  # Logical AND
    # Bitwise operators
    "|": 6,
    "^": 7,
    "&": 8,
    # Equality operators
    "==": 9,  # Equal
    "!=": 9,  # Not equal
    # Relational operators
    "<": 10,  # Less than
    ">": 10,  # Greater than
    "<=": 10,  # Less than or equal
    ">=": 10,  # Greater than or equal
    # Shift operators
    "<<": 11,
    ">>": 11,
    # Additive operators
    "+": 12,  # Addition
    "-": 12,  # Subtraction
    # Multiplicative operators
    "*": 13,  # Multiplication
    "/": 13,  # Division
    "%": 13,  # Modulo
    # Unary operators
    "unary": 14,
    # Function calls and member access
    "call": 15,
    "member": 16,
}
