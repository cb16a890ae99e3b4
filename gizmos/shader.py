"""Loading, compiling and linking GLSL shader programs."""

from __future__ import annotations

import inspect
from os import PathLike
from pathlib import Path
from typing import Union

GL_NO_ERROR = 0
GL_INVALID_ENUM = 0x0500
GL_INVALID_VALUE = 0x0501
GL_INVALID_OPERATION = 0x0502
GL_STACK_OVERFLOW = 0x0503
GL_STACK_UNDERFLOW = 0x0504
GL_OUT_OF_MEMORY = 0x0505
GL_INVALID_FRAMEBUFFER_OPERATION = 0x0506

GL_FRAGMENT_SHADER = 0x8B30
GL_VERTEX_SHADER = 0x8B31
GL_GEOMETRY_SHADER = 0x8DD9
GL_TESS_EVALUATION_SHADER = 0x8E87
GL_TESS_CONTROL_SHADER = 0x8E88
GL_COMPUTE_SHADER = 0x91B9
GL_INFO_LOG_LENGTH = 0x8B84

_ERROR_NAMES = {
    GL_INVALID_ENUM: "INVALID_ENUM",
    GL_INVALID_VALUE: "INVALID_VALUE",
    GL_INVALID_OPERATION: "INVALID_OPERATION",
    GL_STACK_OVERFLOW: "STACK_OVERFLOW",
    GL_STACK_UNDERFLOW: "STACK_UNDERFLOW",
    GL_OUT_OF_MEMORY: "OUT_OF_MEMORY",
    GL_INVALID_FRAMEBUFFER_OPERATION: "INVALID_FRAMEBUFFER_OPERATION",
}

# Stage order used when detaching and deleting.
_STAGES = (
    GL_VERTEX_SHADER,
    GL_GEOMETRY_SHADER,
    GL_TESS_CONTROL_SHADER,
    GL_TESS_EVALUATION_SHADER,
    GL_FRAGMENT_SHADER,
)

StrPath = Union[str, "PathLike[str]"]


class _PygletGL:
    """Adapts plain Python values to pyglet's OpenGL bindings."""

    @staticmethod
    def _api():
        from pyglet import gl as api

        return api

    @staticmethod
    def _c_string(api, text: str):
        encoded = text.encode("utf-8") + b"\0"
        return (api.GLchar * len(encoded)).from_buffer_copy(encoded)

    def _info_log(self, get_parameter, get_log, handle: int) -> str:
        api = self._api()
        length = api.GLint(0)
        get_parameter(handle, GL_INFO_LOG_LENGTH, length)
        if length.value <= 1:
            return ""
        buffer = (api.GLchar * length.value)()
        written = api.GLsizei(0)
        get_log(handle, length.value, written, buffer)
        return buffer.value.decode("utf-8", errors="replace")

    def create_shader(self, shader_type: int) -> int:
        return self._api().glCreateShader(shader_type)

    def shader_source(self, shader: int, text: str) -> None:
        api = self._api()
        chars = self._c_string(api, text)
        char_pointer = api.glShaderSource.argtypes[2]._type_
        strings = (char_pointer * 1)(char_pointer(api.GLchar.from_buffer(chars)))
        api.glShaderSource(shader, 1, strings, None)

    def compile_shader(self, shader: int) -> None:
        self._api().glCompileShader(shader)

    def shader_info_log(self, shader: int) -> str:
        api = self._api()
        return self._info_log(api.glGetShaderiv, api.glGetShaderInfoLog, shader)

    def create_program(self) -> int:
        return self._api().glCreateProgram()

    def attach_shader(self, program: int, shader: int) -> None:
        self._api().glAttachShader(program, shader)

    def detach_shader(self, program: int, shader: int) -> None:
        self._api().glDetachShader(program, shader)

    def delete_shader(self, shader: int) -> None:
        self._api().glDeleteShader(shader)

    def delete_program(self, program: int) -> None:
        self._api().glDeleteProgram(program)

    def link_program(self, program: int) -> None:
        self._api().glLinkProgram(program)

    def program_info_log(self, program: int) -> str:
        api = self._api()
        return self._info_log(api.glGetProgramiv, api.glGetProgramInfoLog, program)

    def use_program(self, program: int) -> None:
        self._api().glUseProgram(program)

    def uniform_location(self, program: int, name: str) -> int:
        api = self._api()
        return api.glGetUniformLocation(program, self._c_string(api, name))

    def attrib_location(self, program: int, name: str) -> int:
        api = self._api()
        return api.glGetAttribLocation(program, self._c_string(api, name))

    def finish(self) -> None:
        self._api().glFinish()

    def get_error(self) -> int:
        return self._api().glGetError()


gl = _PygletGL()


class ShaderError(Exception):
    """A shader source could not be loaded."""


def read_shader_source(path: StrPath) -> str:
    """Return the text of a shader source file."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ShaderError(f"cannot read shader source {path}: {exc}") from exc


def check_gl_error(message: str = "") -> list[int]:
    """Print every pending OpenGL error and return their codes in order."""
    frame = inspect.currentframe()
    caller = frame.f_back if frame else None
    location = f"{caller.f_code.co_filename} ({caller.f_lineno})" if caller else "?"
    gl.finish()
    codes = []
    while (code := gl.get_error()) != GL_NO_ERROR:
        codes.append(code)
        print(f"{_ERROR_NAMES.get(code, '')} {code} | {location}{message}")
    print()
    return codes


def _compile(shader_type: int, path: StrPath, log_prefix: str, announce: bool) -> int:
    source = read_shader_source(path)
    shader = gl.create_shader(shader_type)
    gl.shader_source(shader, source)
    gl.compile_shader(shader)
    if announce:
        print(path)
    log = gl.shader_info_log(shader)
    if log:
        print(f"{log_prefix}{log}")
    return shader


def _link(program: int) -> None:
    gl.link_program(program)
    log = gl.program_info_log(program)
    if log:
        print(log)


class ShaderProgram:
    """A linked program built from a vertex and a fragment shader.

    Further stages may be added with :meth:`add_shader` and the program
    relinked with :meth:`link`.
    """

    def __init__(self, vertex_path: StrPath, fragment_path: StrPath) -> None:
        self._stages: dict[int, int] = {}
        self._stages[GL_VERTEX_SHADER] = _compile(
            GL_VERTEX_SHADER, vertex_path, "[Info Log load shader]", True
        )
        self._stages[GL_FRAGMENT_SHADER] = _compile(
            GL_FRAGMENT_SHADER, fragment_path, "[Info Log load shader]", True
        )
        self.program = gl.create_program()
        gl.attach_shader(self.program, self._stages[GL_VERTEX_SHADER])
        gl.attach_shader(self.program, self._stages[GL_FRAGMENT_SHADER])
        self.link()

    @property
    def shaders(self) -> dict[int, int]:
        """Attached shader handles keyed by stage type."""
        return dict(self._stages)

    def add_shader(self, shader_type: int, path: StrPath) -> None:
        """Compile and attach a stage, replacing any shader of the same stage."""
        if shader_type not in _STAGES:
            raise ValueError(f"unsupported shader type: {shader_type:#x}")
        previous = self._stages.pop(shader_type, 0)
        if previous:
            gl.detach_shader(self.program, previous)
            gl.delete_shader(previous)
        shader = _compile(shader_type, path, "[Info Log load shader]", True)
        self._stages[shader_type] = shader
        gl.attach_shader(self.program, shader)

    def link(self) -> None:
        """Link the program, printing the link log if there is one."""
        _link(self.program)

    def use(self) -> None:
        gl.use_program(self.program)

    def uniform_location(self, name: str) -> int:
        return gl.uniform_location(self.program, name)

    def attribute_location(self, name: str) -> int:
        return gl.attrib_location(self.program, name)

    def delete(self) -> None:
        """Detach and delete every shader, then the program; later calls do nothing."""
        present = [self._stages[stage] for stage in _STAGES if self._stages.get(stage)]
        for shader in present:
            gl.detach_shader(self.program, shader)
        for shader in present:
            gl.delete_shader(shader)
        self._stages.clear()
        if self.program:
            gl.delete_program(self.program)
            self.program = 0

    def __enter__(self) -> ShaderProgram:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()


class ComputeShaderProgram:
    """A program holding a single compute shader."""

    def __init__(self, path: StrPath) -> None:
        self.shader = _compile(GL_COMPUTE_SHADER, path, "[Info Log]", False)
        self.program = gl.create_program()
        gl.attach_shader(self.program, self.shader)
        _link(self.program)

    def update_shader(self, path: StrPath) -> None:
        """Replace the compute shader with one loaded from ``path`` and relink."""
        read_shader_source(path)
        gl.detach_shader(self.program, self.shader)
        gl.delete_shader(self.shader)
        self.shader = _compile(GL_COMPUTE_SHADER, path, "[Info Log]", False)
        gl.attach_shader(self.program, self.shader)
        _link(self.program)

    def use(self) -> None:
        gl.use_program(self.program)

    def delete(self) -> None:
        """Release the shader and program; later calls do nothing."""
        if self.program:
            gl.detach_shader(self.program, self.shader)
            gl.delete_shader(self.shader)
            gl.delete_program(self.program)
            self.program = 0
            self.shader = 0

    def __enter__(self) -> ComputeShaderProgram:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()