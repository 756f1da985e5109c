"""
Data models for the shader cross-compiler.

This module contains the request, tier, variant and artifact types that flow
through the compilation pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto

from shadercross.compiler.errors import CompileDiagnostics, ShaderCompilationError


class ShaderStage(Enum):
    """Pipeline stage requested by the caller."""

    VERTEX = auto()
    PIXEL = auto()
    GEOMETRY = auto()
    HULL = auto()
    DOMAIN = auto()
    COMPUTE = auto()


class GraphicsPlatform(Enum):
    """Platform family the shader is compiled for."""

    OPENGL = auto()
    OPENGLES = auto()


class GraphicsProfile(IntEnum):
    """Minimum feature level, ordered from lowest to highest."""

    LEVEL_9_1 = 0x9100
    LEVEL_9_2 = 0x9200
    LEVEL_9_3 = 0x9300
    LEVEL_10_0 = 0xA000
    LEVEL_10_1 = 0xA100
    LEVEL_11_0 = 0xB000
    LEVEL_11_1 = 0xB100


# Profiles at or above this level get the modern (ES 3) dialect
MODERN_FEATURES_PROFILE = GraphicsProfile.LEVEL_10_0


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Platform family and minimum profile, as configured by the caller."""

    platform: GraphicsPlatform
    profile: GraphicsProfile


@dataclass(frozen=True)
class CapabilityTier:
    """Capability bucket that drives every dialect decision.

    Attributes:
        is_constrained: True for the mobile (OpenGL ES) family
        supports_modern_features: True when the profile reaches the ES 3 level
    """

    is_constrained: bool
    supports_modern_features: bool

    @classmethod
    def from_descriptor(cls, descriptor: CapabilityDescriptor) -> "CapabilityTier":
        return cls(
            is_constrained=descriptor.platform == GraphicsPlatform.OPENGLES,
            supports_modern_features=descriptor.profile >= MODERN_FEATURES_PROFILE,
        )

    @classmethod
    def es2(cls) -> "CapabilityTier":
        return cls(is_constrained=True, supports_modern_features=False)

    @classmethod
    def es3(cls) -> "CapabilityTier":
        return cls(is_constrained=True, supports_modern_features=True)

    @classmethod
    def desktop(cls) -> "CapabilityTier":
        return cls(is_constrained=False, supports_modern_features=True)

    @property
    def name(self) -> str:
        if not self.is_constrained:
            return "desktop"
        return "es3" if self.supports_modern_features else "es2"


@dataclass(frozen=True)
class CompileRequest:
    """Input of one compilation.

    Attributes:
        source: Shader source text in the source dialect
        entry_point: Entry point function name, or None
        stage: Requested pipeline stage
        capabilities: Platform family and profile to compile for
        render_target_count: Number of render targets written by a pixel shader
        source_filename: Optional file name used in diagnostics
    """

    source: str
    entry_point: str | None
    stage: ShaderStage
    capabilities: CapabilityDescriptor
    render_target_count: int = 1
    source_filename: str | None = None

    @property
    def tier(self) -> CapabilityTier:
        return CapabilityTier.from_descriptor(self.capabilities)


@dataclass(frozen=True)
class EmittedVariant:
    """Complete target-dialect program text for one tier."""

    text: str
    stage: ShaderStage
    tier: CapabilityTier


@dataclass(frozen=True)
class ShaderObjectId:
    """Content hash identifying a packaged artifact."""

    digest: bytes

    def __str__(self) -> str:
        return self.digest.hex()


@dataclass(frozen=True)
class ShaderArtifact:
    """Packaged, content-addressed compilation output."""

    id: ShaderObjectId
    data: bytes
    stage: ShaderStage


@dataclass(frozen=True)
class ShaderLevelBytecode:
    """Both ES dialect variants of a shader, as stored in a dual artifact."""

    legacy: str | None = None
    modern: str | None = None


@dataclass
class CompileResult:
    """Outcome of a compilation: an artifact, or the diagnostics explaining why not.

    Warnings and informational entries may accompany an artifact; an artifact is
    never present when ``diagnostics`` holds an error. ``variants`` lists the
    program texts that went into the artifact, in build order.
    """

    artifact: ShaderArtifact | None = None
    diagnostics: CompileDiagnostics = field(default_factory=CompileDiagnostics)
    variants: list[EmittedVariant] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.artifact is not None

    def unwrap(self) -> ShaderArtifact:
        """Return the artifact or raise the first recorded error."""
        if self.artifact is None:
            raise ShaderCompilationError.from_diagnostics(self.diagnostics)
        return self.artifact
