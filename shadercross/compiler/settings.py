"""Environment-driven configuration of the compiler."""

import os
from dataclasses import dataclass

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CompilerSettings:
    """Settings read from the process environment.

    Attributes:
        optimizer_library: Explicit path of the glsl-optimizer shared library;
            None means search the system library path
        optimize: Whether emitted programs go through the optimizer at all
    """

    optimizer_library: str | None = None
    optimize: bool = True

    @classmethod
    def from_env(cls) -> "CompilerSettings":
        library = os.environ.get("SHADERCROSS_GLSLOPT_LIBRARY") or None
        optimize = os.environ.get("SHADERCROSS_OPTIMIZE", "1").strip().lower()
        return cls(optimizer_library=library, optimize=optimize not in _FALSE_VALUES)
