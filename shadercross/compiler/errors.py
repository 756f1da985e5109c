"""
Diagnostics and exceptions for the shader cross-compiler.

Compilation problems are recorded as ``Diagnostic`` entries in a per-request
``CompileDiagnostics`` sink. Exceptions are reserved for callers that want a
raised error (``CompileResult.unwrap``) and for collaborator failures.
"""

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

from loguru import logger


class Severity(Enum):
    """How a diagnostic affects the compilation."""

    ERROR = auto()
    WARNING = auto()
    INFO = auto()


class DiagnosticKind(Enum):
    """What went wrong."""

    UNSUPPORTED_STAGE = auto()
    MULTI_RENDER_TARGET_UNSUPPORTED = auto()
    CONVERSION_FAILED = auto()
    OPTIMIZATION_SKIPPED = auto()


def _location_info(source_filename: str | None, line: int | None) -> str:
    location_info = ""
    if source_filename:
        location_info = f" in {os.path.basename(source_filename)}"
        if line:
            location_info += f" at line {line}"
    return location_info


@dataclass(frozen=True)
class Diagnostic:
    """A single error, warning or informational entry.

    Attributes:
        kind: Diagnostic category
        severity: Whether the entry blocks the artifact
        message: Human readable description
        source_filename: Shader file the entry refers to, if known
        line: Line in the shader file, if known
    """

    kind: DiagnosticKind
    severity: Severity
    message: str
    source_filename: str | None = None
    line: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        label = self.severity.name.lower()
        location = _location_info(self.source_filename, self.line)
        return f"{label}: {self.message}{location}"


@dataclass
class CompileDiagnostics:
    """Append-only diagnostic sink for one compile request."""

    entries: list[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> Diagnostic:
        self.entries.append(diagnostic)
        if diagnostic.severity == Severity.ERROR:
            logger.debug(f"Recorded error: {diagnostic}")
        elif diagnostic.severity == Severity.WARNING:
            logger.warning(str(diagnostic))
        else:
            logger.debug(f"Recorded info: {diagnostic}")
        return diagnostic

    def error(
        self,
        kind: DiagnosticKind,
        message: str,
        source_filename: str | None = None,
        line: int | None = None,
    ) -> Diagnostic:
        return self.add(
            Diagnostic(kind, Severity.ERROR, message, source_filename, line)
        )

    def warning(
        self,
        kind: DiagnosticKind,
        message: str,
        source_filename: str | None = None,
        line: int | None = None,
    ) -> Diagnostic:
        return self.add(
            Diagnostic(kind, Severity.WARNING, message, source_filename, line)
        )

    def info(
        self,
        kind: DiagnosticKind,
        message: str,
        source_filename: str | None = None,
    ) -> Diagnostic:
        return self.add(Diagnostic(kind, Severity.INFO, message, source_filename))

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.entries)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.is_error]

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.entries if d.kind == kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


class ShaderCompilationError(Exception):
    """Exception raised when a compile request produced no artifact.

    The message carries the first error and, when known, the shader file and
    line it refers to.

    Example:
        ShaderCompilationError("Unknown identifier: foo", "lit.hlsl", 12) reads
        "Unknown identifier: foo in lit.hlsl at line 12".
    """

    def __init__(
        self,
        message: str,
        source_filename: str | None = None,
        line: int | None = None,
        diagnostics: CompileDiagnostics | None = None,
    ):
        self.message = message
        self.source_filename = source_filename
        self.lineno = line
        self.diagnostics = diagnostics or CompileDiagnostics()
        super().__init__(f"{message}{_location_info(source_filename, line)}")

    @classmethod
    def from_diagnostics(
        cls, diagnostics: CompileDiagnostics
    ) -> "ShaderCompilationError":
        errors = diagnostics.errors
        if not errors:
            return cls("Compilation produced no artifact", diagnostics=diagnostics)
        first = errors[0]
        return cls(first.message, first.source_filename, first.line, diagnostics)


class ConversionError(Exception):
    """Raised by converters when the source cannot be turned into a program."""

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.lineno = line
        super().__init__(message)


class OptimizerUnavailableError(RuntimeError):
    """The native GLSL optimizer library could not be loaded."""


class ArtifactFormatError(ValueError):
    """A packaged artifact buffer does not follow the dual-variant layout."""


class ConverterLoadError(ImportError):
    """A converter reference could not be resolved."""
