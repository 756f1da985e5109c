"""Interface to the source-dialect converter collaborator.

The compiler never parses shader source itself. A converter turns the source
text into an ``IntermediateProgram``; it reports problems either through the
messages of its ``ConversionResult`` or by raising ``ConversionError``.
"""

import importlib
import importlib.util
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from shadercross.compiler.errors import ConverterLoadError
from shadercross.compiler.ir import IntermediateProgram, PipelineStage


@dataclass
class ConversionMessage:
    """An error reported by the converter."""

    message: str
    line: int | None = None


@dataclass
class ConversionResult:
    """Converted program, or the messages explaining why there is none."""

    program: IntermediateProgram | None = None
    messages: list[ConversionMessage] = field(default_factory=list)


@runtime_checkable
class Converter(Protocol):
    """Converts source-dialect text into an intermediate program."""

    def convert(
        self,
        source: str,
        entry_point: str | None,
        stage: PipelineStage,
        source_filename: str | None,
    ) -> ConversionResult: ...


class FunctionConverter:
    """Adapts a plain ``convert`` function to the Converter interface."""

    def __init__(self, func: Callable[..., ConversionResult]):
        self.func = func

    def convert(
        self,
        source: str,
        entry_point: str | None,
        stage: PipelineStage,
        source_filename: str | None,
    ) -> ConversionResult:
        return self.func(source, entry_point, stage, source_filename)


def _load_module_from_path(file_path: str) -> Any:
    abs_path = os.path.abspath(file_path)
    module_dir = os.path.dirname(abs_path)
    module_name = os.path.splitext(os.path.basename(abs_path))[0]

    # Let the converter import its sibling modules
    if module_dir not in sys.path:
        sys.path.insert(0, module_dir)

    spec = importlib.util.spec_from_file_location(module_name, abs_path)
    if spec is None or spec.loader is None:
        raise ConverterLoadError(f"Could not load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_converter(reference: str) -> Converter:
    """Resolve a converter reference.

    Args:
        reference: ``path/to/file.py:name`` or ``package.module:name``; ``name``
            is a Converter object, a Converter class, or a convert function.
            It defaults to ``convert`` when omitted.

    Returns:
        The converter

    Raises:
        ConverterLoadError: If the module or attribute cannot be resolved
    """
    module_ref, _, attr = reference.rpartition(":")
    if not module_ref:
        module_ref, attr = reference, "convert"

    try:
        if module_ref.endswith(".py") or os.path.sep in module_ref:
            module = _load_module_from_path(module_ref)
        else:
            module = importlib.import_module(module_ref)
    except ConverterLoadError:
        raise
    except (ImportError, OSError) as e:
        raise ConverterLoadError(f"Failed to import converter module '{module_ref}': {e}") from e

    if not hasattr(module, attr):
        raise ConverterLoadError(f"'{attr}' not found in converter module '{module_ref}'")
    obj = getattr(module, attr)

    if isinstance(obj, type):
        obj = obj()
    if isinstance(obj, Converter):
        logger.info(f"Using converter {type(obj).__name__} from {module_ref}")
        return obj
    if callable(obj):
        logger.info(f"Using convert function {attr} from {module_ref}")
        return FunctionConverter(obj)
    raise ConverterLoadError(f"'{attr}' in '{module_ref}' is not a converter")
