"""Fixtures and configuration for pytest."""

import ctypes.util
import os

import pytest

from shadercross.compiler.constants import OPTIMIZER_LIBRARY_NAME


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "native: mark test as requiring the glsl-optimizer library"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip native tests when the optimizer library cannot be found."""
    if os.environ.get("SHADERCROSS_GLSLOPT_LIBRARY") or ctypes.util.find_library(
        OPTIMIZER_LIBRARY_NAME
    ):
        return
    skip_native = pytest.mark.skip(reason="glsl-optimizer library not found")
    for item in items:
        if "native" in item.keywords:
            item.add_marker(skip_native)
