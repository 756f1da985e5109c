"""Tests for preamble synthesis and dialect targets."""

import pytest

from shadercross.compiler.header import compose_program, emit_header
from shadercross.compiler.ir import IRType, PipelineStage, Qualifier
from shadercross.compiler.models import CapabilityTier
from shadercross.compiler.target import DesktopGLSLTarget, GLSLESTarget, create_target


class TestHeader:
    """Preamble content by tier and stage."""

    def test_es3_vertex(self):
        target = create_target(CapabilityTier.es3())
        assert emit_header(target, PipelineStage.VERTEX) == (
            "#version 300 es\n\n#extension GL_ARB_gpu_shader5 : enable\n\n"
        )

    def test_es3_pixel(self):
        target = create_target(CapabilityTier.es3())
        assert emit_header(target, PipelineStage.PIXEL) == (
            "#version 300 es\n\n"
            "#extension GL_ARB_gpu_shader5 : enable\n\n"
            "precision highp float;\n\n"
        )

    def test_es2_vertex_has_no_version(self):
        target = create_target(CapabilityTier.es2())
        assert emit_header(target, PipelineStage.VERTEX) == ""

    def test_es2_pixel(self):
        target = create_target(CapabilityTier.es2())
        assert emit_header(target, PipelineStage.PIXEL) == "precision highp float;\n\n"

    def test_desktop_vertex(self):
        target = create_target(CapabilityTier.desktop(), render_target_count=3)
        assert emit_header(target, PipelineStage.VERTEX) == "#version 420\n\n"

    @pytest.mark.parametrize("count", [1, 4])
    def test_desktop_pixel_declares_fragment_outputs(self, count):
        target = create_target(CapabilityTier.desktop(), render_target_count=count)
        assert emit_header(target, PipelineStage.PIXEL) == (
            f"#version 420\n\nout vec4 gl_FragData[{count}];\n\n"
        )

    def test_compose_prepends_once(self):
        target = create_target(CapabilityTier.desktop())
        program = compose_program(target, PipelineStage.VERTEX, "void main() {\n}\n")
        assert program == "#version 420\n\nvoid main() {\n}\n"
        assert program.count("#version") == 1


class TestTargets:
    """Dialect rules consulted by the writer."""

    def test_create_target_picks_dialect(self):
        assert isinstance(create_target(CapabilityTier.es2()), GLSLESTarget)
        assert isinstance(create_target(CapabilityTier.desktop()), DesktopGLSLTarget)

    def test_uniform_blocks_by_tier(self):
        assert not create_target(CapabilityTier.es2()).generates_uniform_blocks()
        assert create_target(CapabilityTier.es3()).generates_uniform_blocks()
        assert create_target(CapabilityTier.desktop()).generates_uniform_blocks()

    @pytest.mark.parametrize(
        "spelling, expected",
        [("0.5f", "0.5"), ("2.F", "2."), ("1e3f", "1e3"), ("3f", "3.0"), ("0x1F", "0x1F")],
    )
    def test_es_trims_float_suffix(self, spelling, expected):
        target = create_target(CapabilityTier.es3())
        assert target.literal(spelling, IRType("float")) == expected

    def test_desktop_keeps_float_suffix(self):
        target = create_target(CapabilityTier.desktop())
        assert target.literal("0.5f", IRType("float")) == "0.5f"

    def test_python_literals(self):
        target = create_target(CapabilityTier.desktop())
        assert target.literal(1, "float") == "1.0"
        assert target.literal(0.25, "float") == "0.25"
        assert target.literal(True, "bool") == "true"
        assert target.literal(7, "int") == "7"

    def test_storage_qualifiers(self):
        target = create_target(CapabilityTier.es2())
        assert target.storage_qualifier(Qualifier.ATTRIBUTE) == "attribute"
        assert target.storage_qualifier(Qualifier.INPUT) == "in"
