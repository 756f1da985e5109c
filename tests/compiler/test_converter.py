"""Tests for converter loading."""

import textwrap

import pytest

from shadercross.compiler.converter import (
    Converter,
    ConversionResult,
    FunctionConverter,
    load_converter,
)
from shadercross.compiler.errors import ConverterLoadError
from shadercross.compiler.ir import PipelineStage

CONVERTER_MODULE = textwrap.dedent(
    """
    from shadercross.compiler.converter import ConversionResult
    from shadercross.compiler.ir import IntermediateProgram


    def convert(source, entry_point, stage, source_filename):
        return ConversionResult(program=IntermediateProgram(stage))


    class ClassConverter:
        def convert(self, source, entry_point, stage, source_filename):
            return ConversionResult(program=IntermediateProgram(stage, entry_point=entry_point))


    instance = ClassConverter()
    NOT_A_CONVERTER = 42
    """
)


@pytest.fixture
def converter_file(tmp_path):
    path = tmp_path / "my_converter.py"
    path.write_text(CONVERTER_MODULE)
    return path


def test_function_defaults_to_convert(converter_file):
    converter = load_converter(str(converter_file))

    assert isinstance(converter, FunctionConverter)
    result = converter.convert("", "main", PipelineStage.VERTEX, None)
    assert result.program.stage == PipelineStage.VERTEX


def test_class_is_instantiated(converter_file):
    converter = load_converter(f"{converter_file}:ClassConverter")

    assert isinstance(converter, Converter)
    result = converter.convert("", "ps_main", PipelineStage.PIXEL, None)
    assert result.program.entry_point == "ps_main"


def test_instance_is_used_as_is(converter_file):
    converter = load_converter(f"{converter_file}:instance")
    assert type(converter).__name__ == "ClassConverter"


def test_module_reference(monkeypatch, tmp_path):
    (tmp_path / "installed_converter.py").write_text(CONVERTER_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))

    converter = load_converter("installed_converter:ClassConverter")

    assert isinstance(converter, Converter)


def test_function_converter_forwards_arguments():
    seen = []

    def convert(source, entry_point, stage, source_filename):
        seen.append((source, entry_point, stage, source_filename))
        return ConversionResult()

    FunctionConverter(convert).convert("src", "main", PipelineStage.PIXEL, "a.hlsl")

    assert seen == [("src", "main", PipelineStage.PIXEL, "a.hlsl")]


@pytest.mark.parametrize(
    "suffix, match",
    [(":missing", "not found"), (":NOT_A_CONVERTER", "not a converter")],
)
def test_bad_attribute(converter_file, suffix, match):
    with pytest.raises(ConverterLoadError, match=match):
        load_converter(f"{converter_file}{suffix}")


def test_missing_module():
    with pytest.raises(ConverterLoadError, match="Failed to import"):
        load_converter("definitely_not_a_module_xyz:convert")


def test_missing_file(tmp_path):
    with pytest.raises(ConverterLoadError):
        load_converter(str(tmp_path / "absent.py"))
