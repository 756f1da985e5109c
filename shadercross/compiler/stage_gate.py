"""Stage validation for the GLSL cross-compilation target."""

from typing import assert_never

from shadercross.compiler.errors import CompileDiagnostics, DiagnosticKind
from shadercross.compiler.ir import PipelineStage
from shadercross.compiler.models import CapabilityTier, ShaderStage


def _unsupported(stage_label: str) -> str:
    return (
        f"{stage_label} stage can't be converted to OpenGL. "
        "Only Vertex and Pixel shaders are supported"
    )


def check_stage(
    stage: ShaderStage,
    tier: CapabilityTier,
    render_target_count: int,
    diagnostics: CompileDiagnostics,
    source_filename: str | None = None,
) -> PipelineStage | None:
    """Map a requested stage to a GLSL pipeline stage.

    Multiple render targets on legacy ES only record a warning; the caller
    decides whether to continue by checking ``diagnostics.has_errors``.

    Args:
        stage: Requested shader stage
        tier: Capability tier of the variant
        render_target_count: Number of render targets the shader writes
        diagnostics: Sink receiving errors and warnings
        source_filename: Shader file reported in diagnostics

    Returns:
        The mapped pipeline stage, or None when the stage is unsupported
    """
    if (
        tier.is_constrained
        and not tier.supports_modern_features
        and render_target_count > 1
    ):
        diagnostics.warning(
            DiagnosticKind.MULTI_RENDER_TARGET_UNSUPPORTED,
            "OpenGL ES 2 does not support multiple render targets.",
            source_filename,
        )

    match stage:
        case ShaderStage.VERTEX:
            return PipelineStage.VERTEX
        case ShaderStage.PIXEL:
            return PipelineStage.PIXEL
        case ShaderStage.GEOMETRY | ShaderStage.HULL | ShaderStage.DOMAIN | ShaderStage.COMPUTE:
            diagnostics.error(
                DiagnosticKind.UNSUPPORTED_STAGE,
                _unsupported(stage.name.capitalize()),
                source_filename,
            )
            return None
        case _:
            assert_never(stage)
