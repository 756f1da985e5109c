"""Dialect targets for GLSL emission.

A Target encapsulates the rules of one GLSL dialect:
- Preamble content (version directive, extensions, precision, stage declarations)
- Syntax details the writer asks about (literals, qualifiers)
"""

import re
from abc import ABC, abstractmethod
from typing import Any

from shadercross.compiler.constants import (
    DESKTOP_VERSION_DIRECTIVE,
    ES3_VERSION_DIRECTIVE,
    FRAGMENT_OUTPUT_ARRAY,
    PIXEL_PRECISION_STATEMENT,
    UNIFORM_BLOCK_EXTENSION,
)
from shadercross.compiler.ir import IRType, PipelineStage, Qualifier
from shadercross.compiler.models import CapabilityTier

_FLOAT_SUFFIX = re.compile(r"^([0-9]*\.?[0-9]+(?:[eE][+-]?[0-9]+)?\.?)[fF]$")


class Target(ABC):
    """Base class for GLSL dialect targets."""

    def __init__(self, tier: CapabilityTier):
        self.tier = tier

    # --- Preamble ---

    @abstractmethod
    def version_directive(self) -> str | None:
        """Return the version directive (e.g., '#version 420')."""
        ...

    def extensions(self) -> list[str]:
        """Return extension pragmas. Default: none."""
        return []

    def precision_qualifiers(self, stage: PipelineStage) -> list[str]:
        """Return default precision statements. Default: none."""
        return []

    def stage_declarations(self, stage: PipelineStage) -> list[str]:
        """Return declarations the dialect needs before the body. Default: none."""
        return []

    # --- Syntax ---

    @abstractmethod
    def generates_uniform_blocks(self) -> bool:
        """Whether uniform blocks are emitted as blocks or flattened to uniforms."""
        ...

    def trims_float_suffix(self) -> bool:
        return False

    def type_name(self, ir_type: IRType | str) -> str:
        """Map IR type to target type name. Default: pass-through."""
        if isinstance(ir_type, IRType):
            return ir_type.base
        return ir_type

    def literal(self, value: Any, ir_type: IRType | str) -> str:
        """Format a literal value."""
        if isinstance(value, str):
            if self.trims_float_suffix():
                match = _FLOAT_SUFFIX.match(value)
                if match:
                    number = match.group(1)
                    if "." not in number and "e" not in number.lower():
                        number += ".0"
                    return number
            return value
        type_str = ir_type.base if isinstance(ir_type, IRType) else ir_type
        if type_str == "bool":
            return "true" if value else "false"
        if type_str == "float":
            s = repr(float(value))
            if "." not in s and "e" not in s.lower():
                s += ".0"
            return s
        if type_str in ("int", "uint"):
            return str(int(value))
        return str(value)

    def storage_qualifier(self, qualifier: Qualifier) -> str:
        return qualifier.value


class DesktopGLSLTarget(Target):
    """Desktop GLSL 4.20."""

    def __init__(self, tier: CapabilityTier, render_target_count: int = 1):
        super().__init__(tier)
        self.render_target_count = render_target_count

    def version_directive(self) -> str | None:
        return DESKTOP_VERSION_DIRECTIVE

    def stage_declarations(self, stage: PipelineStage) -> list[str]:
        if stage == PipelineStage.PIXEL:
            return [
                f"out vec4 {FRAGMENT_OUTPUT_ARRAY}[{self.render_target_count}];"
            ]
        return []

    def generates_uniform_blocks(self) -> bool:
        return True


class GLSLESTarget(Target):
    """OpenGL ES shading language, legacy (1.00) or modern (3.00)."""

    @property
    def modern(self) -> bool:
        return self.tier.supports_modern_features

    def version_directive(self) -> str | None:
        # ES 2 relies on the implicit #version 100
        return ES3_VERSION_DIRECTIVE if self.modern else None

    def extensions(self) -> list[str]:
        if self.generates_uniform_blocks():
            return [UNIFORM_BLOCK_EXTENSION]
        return []

    def precision_qualifiers(self, stage: PipelineStage) -> list[str]:
        if stage == PipelineStage.PIXEL:
            return [PIXEL_PRECISION_STATEMENT]
        return []

    def generates_uniform_blocks(self) -> bool:
        return self.modern

    def trims_float_suffix(self) -> bool:
        return True


def create_target(tier: CapabilityTier, render_target_count: int = 1) -> Target:
    """Create the dialect target for a capability tier.

    Args:
        tier: Capability tier of the variant being emitted
        render_target_count: Number of fragment outputs (desktop pixel shaders)

    Returns:
        Target implementing the tier's dialect
    """
    if tier.is_constrained:
        return GLSLESTarget(tier)
    return DesktopGLSLTarget(tier, render_target_count)
