"""Preamble synthesis for emitted GLSL programs."""

from loguru import logger

from shadercross.compiler.ir import PipelineStage
from shadercross.compiler.target import Target


def emit_header(target: Target, stage: PipelineStage) -> str:
    """Build the preamble placed before an emitted program body.

    The sections come in a fixed order: version directive, extension pragmas,
    precision statements, then stage declarations. Each line is followed by a
    blank line.

    Args:
        target: Dialect target of the variant
        stage: Pipeline stage of the variant

    Returns:
        Preamble text, possibly empty (legacy ES vertex shaders)
    """
    lines: list[str] = []
    version = target.version_directive()
    if version:
        lines.append(version)
    lines.extend(target.extensions())
    lines.extend(target.precision_qualifiers(stage))
    lines.extend(target.stage_declarations(stage))

    header = "".join(f"{line}\n\n" for line in lines)
    logger.debug(f"Header for {target.tier.name} {stage.name}: {lines}")
    return header


def compose_program(target: Target, stage: PipelineStage, body: str) -> str:
    """Prepend the preamble to an emitted body."""
    return emit_header(target, stage) + body
