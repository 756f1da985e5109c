"""
Pytest configuration and shared fixtures for compiler tests.

This module contains fixtures providing fake collaborators (converter,
optimizer engine) and a request factory.
"""

from contextlib import nullcontext

import pytest
from fakes import DESKTOP, FailingConverter, FakeOptimizerEngine, RecordingConverter

from shadercross.compiler.models import CapabilityDescriptor, CompileRequest, ShaderStage
from shadercross.compiler.optimizer import OptimizerBridge


@pytest.fixture
def converter() -> RecordingConverter:
    return RecordingConverter()


@pytest.fixture
def failing_converter() -> FailingConverter:
    return FailingConverter()


@pytest.fixture
def engine() -> FakeOptimizerEngine:
    return FakeOptimizerEngine()


@pytest.fixture
def failing_engine() -> FakeOptimizerEngine:
    return FakeOptimizerEngine(succeed=False)


@pytest.fixture
def no_optimizer() -> OptimizerBridge:
    """Bridge with optimization disabled and no real lock."""
    return OptimizerBridge(None, nullcontext())


@pytest.fixture
def make_request():
    """Factory for compile requests with sensible defaults."""

    def _make(
        stage: ShaderStage = ShaderStage.PIXEL,
        capabilities: CapabilityDescriptor = DESKTOP,
        entry_point: str | None = "main",
        render_target_count: int = 1,
        source: str = "float4 main() : SV_Target { return Tint * 0.5f; }",
    ) -> CompileRequest:
        return CompileRequest(
            source=source,
            entry_point=entry_point,
            stage=stage,
            capabilities=capabilities,
            render_target_count=render_target_count,
            source_filename="textured.hlsl",
        )

    return _make
