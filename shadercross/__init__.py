from shadercross.compiler import ShaderCompiler, compile_shader
from shadercross.compiler.converter import ConversionResult, Converter
from shadercross.compiler.errors import ShaderCompilationError
from shadercross.compiler.models import (
    CapabilityDescriptor,
    CompileRequest,
    CompileResult,
    GraphicsPlatform,
    GraphicsProfile,
    ShaderArtifact,
    ShaderStage,
)

__version__ = "0.1.0"


__all__ = [
    "CapabilityDescriptor",
    "CompileRequest",
    "CompileResult",
    "ConversionResult",
    "Converter",
    "GraphicsPlatform",
    "GraphicsProfile",
    "ShaderArtifact",
    "ShaderCompilationError",
    "ShaderCompiler",
    "ShaderStage",
    "compile_shader",
]
