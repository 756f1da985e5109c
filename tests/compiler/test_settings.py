"""Tests for environment configuration."""

import pytest

from shadercross.compiler.settings import CompilerSettings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SHADERCROSS_GLSLOPT_LIBRARY", raising=False)
    monkeypatch.delenv("SHADERCROSS_OPTIMIZE", raising=False)

    assert CompilerSettings.from_env() == CompilerSettings(optimizer_library=None, optimize=True)


def test_library_path(monkeypatch):
    monkeypatch.setenv("SHADERCROSS_GLSLOPT_LIBRARY", "/opt/lib/libglsl_optimizer.so")
    assert CompilerSettings.from_env().optimizer_library == "/opt/lib/libglsl_optimizer.so"


@pytest.mark.parametrize(
    "value, expected",
    [("0", False), ("false", False), (" Off ", False), ("1", True), ("yes", True)],
)
def test_optimize_flag(monkeypatch, value, expected):
    monkeypatch.setenv("SHADERCROSS_OPTIMIZE", value)
    assert CompilerSettings.from_env().optimize is expected
