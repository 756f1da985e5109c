"""
Cross-compilation of shader programs to the GLSL family.

This module provides the top-level interface: ``ShaderCompiler`` runs one
request through stage gating, conversion, qualifier rewriting, layout
annotation, emission, optimization and packaging.
"""

from loguru import logger

from shadercross.compiler.constants import EMPTY_PIXEL_PROGRAM
from shadercross.compiler.converter import Converter
from shadercross.compiler.emitter import GLSLWriter
from shadercross.compiler.errors import (
    CompileDiagnostics,
    ConversionError,
    DiagnosticKind,
)
from shadercross.compiler.header import compose_program
from shadercross.compiler.ir import IntermediateProgram, PipelineStage
from shadercross.compiler.layout import annotate_layouts
from shadercross.compiler.models import (
    CapabilityTier,
    CompileRequest,
    CompileResult,
    EmittedVariant,
)
from shadercross.compiler.optimizer import OptimizerBridge, default_optimizer_bridge
from shadercross.compiler.packager import package_dual, package_single
from shadercross.compiler.qualifiers import rewrite_qualifiers
from shadercross.compiler.stage_gate import check_stage
from shadercross.compiler.target import create_target
from shadercross.compiler.variants import VariantPlanner


class ShaderCompiler:
    """Compiles requests into packaged GLSL artifacts.

    A compiler holds no per-request state and may be shared between threads;
    only the optimizer bridge is serialized.

    Args:
        converter: Source-dialect converter collaborator
        optimizer: Optimizer bridge; defaults to the process-wide native bridge
    """

    def __init__(self, converter: Converter, optimizer: OptimizerBridge | None = None):
        self.converter = converter
        self.optimizer = optimizer if optimizer is not None else default_optimizer_bridge()

    def compile(self, request: CompileRequest) -> CompileResult:
        """Compile a request.

        Args:
            request: What to compile and for which capabilities

        Returns:
            A result holding either the artifact or the fatal diagnostics
        """
        diagnostics = CompileDiagnostics()
        variants: list[EmittedVariant] = []
        tier = request.tier
        logger.debug(
            f"Compiling {request.stage.name} shader "
            f"'{request.entry_point}' for {tier.name}"
        )

        def build(variant_tier: CapabilityTier) -> str | None:
            text = self._compile_variant(request, variant_tier, diagnostics)
            if text is not None:
                variants.append(EmittedVariant(text, request.stage, variant_tier))
            return text

        planned = VariantPlanner(tier).run(build)
        if planned is None or diagnostics.has_errors:
            return CompileResult(artifact=None, diagnostics=diagnostics)

        if planned.plan.dual:
            artifact = package_dual(planned.level_bytecode(), request.stage)
        else:
            artifact = package_single(planned.single_text, request.stage)
        return CompileResult(artifact=artifact, diagnostics=diagnostics, variants=variants)

    def _compile_variant(
        self,
        request: CompileRequest,
        tier: CapabilityTier,
        diagnostics: CompileDiagnostics,
    ) -> str | None:
        stage = check_stage(
            request.stage,
            tier,
            request.render_target_count,
            diagnostics,
            request.source_filename,
        )
        if stage is None or diagnostics.has_errors:
            return None

        target = create_target(tier, request.render_target_count)

        # No entry point for an ES pixel stage means no pixel shader is wanted
        if request.entry_point is None and stage == PipelineStage.PIXEL and tier.is_constrained:
            logger.debug("No pixel entry point, emitting the empty program")
            return compose_program(target, stage, EMPTY_PIXEL_PROGRAM)

        program = self._convert(request, stage, diagnostics)
        if program is None:
            return None

        if tier.is_constrained:
            rewrite_qualifiers(program, stage)
        annotate_layouts(program)

        body = GLSLWriter(target).emit(program)
        source = compose_program(target, stage, body)

        optimized = self.optimizer.optimize(
            source,
            tier.is_constrained,
            tier.supports_modern_features,
            stage == PipelineStage.VERTEX,
            diagnostics,
            request.source_filename,
        )
        return optimized if optimized else source

    def _convert(
        self,
        request: CompileRequest,
        stage: PipelineStage,
        diagnostics: CompileDiagnostics,
    ) -> IntermediateProgram | None:
        filename = request.source_filename
        try:
            result = self.converter.convert(
                request.source, request.entry_point, stage, filename
            )
        except ConversionError as e:
            diagnostics.error(DiagnosticKind.CONVERSION_FAILED, e.message, filename, e.lineno)
            return None

        for message in result.messages:
            diagnostics.error(
                DiagnosticKind.CONVERSION_FAILED, message.message, filename, message.line
            )
        if result.program is None and not result.messages:
            diagnostics.error(
                DiagnosticKind.CONVERSION_FAILED, "Converter produced no program", filename
            )
        if result.messages:
            return None
        return result.program


def compile_shader(
    request: CompileRequest,
    converter: Converter,
    optimizer: OptimizerBridge | None = None,
) -> CompileResult:
    """Compile a single request.

    Examples:
        result = compile_shader(request, my_converter)
        if result.succeeded:
            store(str(result.artifact.id), result.artifact.data)
        else:
            for diagnostic in result.diagnostics:
                print(diagnostic)
    """
    return ShaderCompiler(converter, optimizer).compile(request)


__all__ = ["ShaderCompiler", "compile_shader"]
