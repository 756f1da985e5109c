"""Serialized access to the external glsl-optimizer engine.

The optimizer is a native library with a manual create/use/destroy lifecycle
and no reentrancy guarantees. ``OptimizerBridge`` owns the lock that
serializes every call, and the context managers in this module guarantee the
native context and shader handles are released on every exit path.
"""

import ctypes
import ctypes.util
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Protocol

from loguru import logger

from shadercross.compiler.constants import (
    ES_VERTEX_ATTRIBUTE_SHIMS,
    OPTIMIZER_DEFAULT_OPTIONS,
    OPTIMIZER_LIBRARY_NAME,
    OPTIMIZER_SHADER_FRAGMENT,
    OPTIMIZER_SHADER_VERTEX,
    OPTIMIZER_TARGET_OPENGL,
    OPTIMIZER_TARGET_OPENGLES20,
    OPTIMIZER_TARGET_OPENGLES30,
)
from shadercross.compiler.errors import (
    CompileDiagnostics,
    DiagnosticKind,
    OptimizerUnavailableError,
)
from shadercross.compiler.settings import CompilerSettings


class OptimizerEngine(Protocol):
    """The glsl-optimizer C API, one method per entry point."""

    def initialize(self, target: int) -> Any: ...

    def optimize(self, context: Any, shader_type: int, source: str, options: int) -> Any: ...

    def get_status(self, shader: Any) -> bool: ...

    def get_output(self, shader: Any) -> str | None: ...

    def shader_delete(self, shader: Any) -> None: ...

    def cleanup(self, context: Any) -> None: ...


class NativeGlslOptimizer:
    """ctypes binding of the glsl-optimizer shared library.

    The library is loaded on first use so that importing this module never
    requires it to be installed.
    """

    def __init__(self, library_path: str | None = None):
        self.library_path = library_path
        self._lib: ctypes.CDLL | None = None

    def _library(self) -> ctypes.CDLL:
        if self._lib is not None:
            return self._lib

        path = self.library_path or ctypes.util.find_library(OPTIMIZER_LIBRARY_NAME)
        if not path:
            raise OptimizerUnavailableError(
                f"Could not locate the {OPTIMIZER_LIBRARY_NAME} library"
            )
        try:
            lib = ctypes.CDLL(path)
        except OSError as e:
            raise OptimizerUnavailableError(f"Failed to load {path}: {e}") from e

        lib.glslopt_initialize.argtypes = [ctypes.c_int]
        lib.glslopt_initialize.restype = ctypes.c_void_p
        lib.glslopt_optimize.argtypes = [
            ctypes.c_void_p,
            ctypes.c_int,
            ctypes.c_char_p,
            ctypes.c_uint,
        ]
        lib.glslopt_optimize.restype = ctypes.c_void_p
        lib.glslopt_get_status.argtypes = [ctypes.c_void_p]
        lib.glslopt_get_status.restype = ctypes.c_bool
        lib.glslopt_get_output.argtypes = [ctypes.c_void_p]
        lib.glslopt_get_output.restype = ctypes.c_char_p
        lib.glslopt_shader_delete.argtypes = [ctypes.c_void_p]
        lib.glslopt_shader_delete.restype = None
        lib.glslopt_cleanup.argtypes = [ctypes.c_void_p]
        lib.glslopt_cleanup.restype = None

        logger.debug(f"Loaded glsl-optimizer from {path}")
        self._lib = lib
        return lib

    def initialize(self, target: int) -> Any:
        context = self._library().glslopt_initialize(target)
        if not context:
            raise OptimizerUnavailableError(
                f"glslopt_initialize returned no context for target {target}"
            )
        return context

    def optimize(self, context: Any, shader_type: int, source: str, options: int) -> Any:
        return self._library().glslopt_optimize(
            context, shader_type, source.encode("ascii", errors="replace"), options
        )

    def get_status(self, shader: Any) -> bool:
        return bool(self._library().glslopt_get_status(shader))

    def get_output(self, shader: Any) -> str | None:
        output = self._library().glslopt_get_output(shader)
        if output is None:
            return None
        return output.decode("ascii", errors="replace")

    def shader_delete(self, shader: Any) -> None:
        if shader:
            self._library().glslopt_shader_delete(shader)

    def cleanup(self, context: Any) -> None:
        self._library().glslopt_cleanup(context)


@contextmanager
def optimizer_context(engine: OptimizerEngine, target: int) -> Iterator[Any]:
    """Create an optimizer context and clean it up when done."""
    context = engine.initialize(target)
    try:
        yield context
    finally:
        engine.cleanup(context)


@contextmanager
def optimized_shader(
    engine: OptimizerEngine, context: Any, shader_type: int, source: str
) -> Iterator[Any]:
    """Run one optimization and delete the resulting shader handle when done."""
    shader = engine.optimize(context, shader_type, source, OPTIMIZER_DEFAULT_OPTIONS)
    try:
        yield shader
    finally:
        engine.shader_delete(shader)


def vertex_attribute_shims() -> str:
    """Preamble remapping ES built-in vertex attributes to custom attributes."""
    lines = []
    for builtin, attribute, precision, type_name in ES_VERTEX_ATTRIBUTE_SHIMS:
        lines.append(f"#define {builtin} {attribute}")
        lines.append(f"attribute {precision} {type_name} {attribute};")
    return "".join(f"{line}\n" for line in lines)


def optimizer_target(is_constrained: bool, modern_features: bool) -> int:
    if not is_constrained:
        return OPTIMIZER_TARGET_OPENGL
    if modern_features:
        return OPTIMIZER_TARGET_OPENGLES30
    return OPTIMIZER_TARGET_OPENGLES20


class OptimizerBridge:
    """Feeds emitted programs to an optimizer engine, one call at a time.

    Args:
        engine: Optimizer engine, or None to disable optimization
        lock: Lock held for the whole duration of every engine call; all
            compilations sharing this bridge are serialized on it
    """

    def __init__(
        self,
        engine: OptimizerEngine | None,
        lock: AbstractContextManager[Any] | None = None,
    ):
        self.engine = engine
        self.lock = lock if lock is not None else threading.Lock()

    def optimize(
        self,
        source: str,
        is_constrained: bool,
        modern_features: bool,
        is_vertex: bool,
        diagnostics: CompileDiagnostics | None = None,
        source_filename: str | None = None,
    ) -> str | None:
        """Optimize a complete program.

        Args:
            source: Header and body of the emitted program
            is_constrained: Whether the program targets OpenGL ES
            modern_features: Whether the program targets ES 3
            is_vertex: Whether the program is a vertex shader
            diagnostics: Sink receiving an informational entry when skipped
            source_filename: Shader file reported in diagnostics

        Returns:
            Optimized program text, or None to keep ``source`` unchanged
        """
        if self.engine is None:
            return None

        input_source = source
        if is_constrained and is_vertex:
            input_source = vertex_attribute_shims() + input_source

        target = optimizer_target(is_constrained, modern_features)
        shader_type = OPTIMIZER_SHADER_VERTEX if is_vertex else OPTIMIZER_SHADER_FRAGMENT

        with self.lock:
            try:
                with optimizer_context(self.engine, target) as context:
                    with optimized_shader(
                        self.engine, context, shader_type, input_source
                    ) as shader:
                        if self.engine.get_status(shader):
                            output = self.engine.get_output(shader)
                            if output:
                                logger.debug(
                                    f"Optimized program ({len(source)} -> {len(output)} chars)"
                                )
                                return output
                        reason = "optimizer reported a failure"
            except OptimizerUnavailableError as e:
                reason = str(e)
            except Exception as e:
                logger.opt(exception=e).debug("Optimizer engine raised")
                reason = f"optimizer raised {type(e).__name__}: {e}"

        logger.debug(f"Optimization skipped: {reason}")
        if diagnostics is not None:
            diagnostics.info(
                DiagnosticKind.OPTIMIZATION_SKIPPED,
                f"Optimization skipped, keeping unoptimized program: {reason}",
                source_filename,
            )
        return None


_shared_bridge: OptimizerBridge | None = None
_shared_bridge_guard = threading.Lock()


def default_optimizer_bridge() -> OptimizerBridge:
    """Return the process-wide bridge around the native optimizer.

    Built once from ``CompilerSettings.from_env()``; every compiler that does
    not receive an explicit bridge shares this one and its lock.
    """
    global _shared_bridge
    with _shared_bridge_guard:
        if _shared_bridge is None:
            settings = CompilerSettings.from_env()
            engine = (
                NativeGlslOptimizer(settings.optimizer_library)
                if settings.optimize
                else None
            )
            _shared_bridge = OptimizerBridge(engine, threading.Lock())
        return _shared_bridge
