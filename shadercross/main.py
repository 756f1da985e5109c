"""Command line interface for shadercross.

This module provides a command-line interface for cross-compiling shader
sources to packaged GLSL artifacts, inspecting artifacts and recompiling on
file changes.
"""

import json
import os
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from shadercross.compiler import ShaderCompiler
from shadercross.compiler.converter import Converter, load_converter
from shadercross.compiler.errors import ArtifactFormatError, ConverterLoadError
from shadercross.compiler.models import (
    CapabilityDescriptor,
    CompileRequest,
    CompileResult,
    GraphicsPlatform,
    GraphicsProfile,
    ShaderArtifact,
    ShaderStage,
)
from shadercross.compiler.optimizer import OptimizerBridge
from shadercross.compiler.packager import compute_object_id, decode_level_bytecode

E = TypeVar("E", bound=Enum)
F = TypeVar("F", bound=Callable[..., Any])


def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="shadercross",
    help=(
        "Cross-compile shaders to packaged GLSL artifacts. "
        "Commands: compile, inspect, watch."
    ),
    add_completion=False,
)


def _parse_enum(enum_type: type[E], value: str, option: str) -> E:
    """Parse a case-insensitive option value into an enum member."""
    key = value.strip().upper().replace(".", "_")
    if enum_type is GraphicsProfile and not key.startswith("LEVEL_"):
        key = f"LEVEL_{key}"
    try:
        return enum_type[key]
    except KeyError as e:
        choices = ", ".join(m.name.lower() for m in enum_type)
        raise typer.BadParameter(f"'{value}' (choose from {choices})", param_hint=option) from e


def _build_request(
    source_file: str,
    stage: str,
    platform: str,
    profile: str,
    entry: str | None,
    render_targets: int,
) -> CompileRequest:
    try:
        with open(source_file) as f:
            source = f.read()
    except OSError as e:
        logger.error(f"Failed to read shader source: {e}")
        raise typer.Exit(1) from e
    return CompileRequest(
        source=source,
        entry_point=entry,
        stage=_parse_enum(ShaderStage, stage, "--stage"),
        capabilities=CapabilityDescriptor(
            platform=_parse_enum(GraphicsPlatform, platform, "--platform"),
            profile=_parse_enum(GraphicsProfile, profile, "--profile"),
        ),
        render_target_count=render_targets,
        source_filename=source_file,
    )


def _create_compiler(converter_ref: str, no_optimize: bool) -> ShaderCompiler:
    try:
        converter: Converter = load_converter(converter_ref)
    except ConverterLoadError as e:
        logger.error(f"Failed to load converter: {e}")
        raise typer.Exit(1) from e
    optimizer = OptimizerBridge(None) if no_optimize else None
    return ShaderCompiler(converter, optimizer)


def _write_artifact(artifact: ShaderArtifact, request: CompileRequest, output: Path) -> Path:
    """Write ``<id>.bin`` and its ``<id>.json`` manifest into a directory."""
    output.mkdir(parents=True, exist_ok=True)
    artifact_path = output / f"{artifact.id}.bin"
    artifact_path.write_bytes(artifact.data)

    manifest = {
        "id": str(artifact.id),
        "stage": artifact.stage.name.lower(),
        "platform": request.capabilities.platform.name.lower(),
        "profile": request.capabilities.profile.name.lower(),
        "tier": request.tier.name,
        "size": len(artifact.data),
        "source_file": os.path.basename(request.source_filename or ""),
        "compiled_at": arrow.utcnow().isoformat(),
    }
    manifest_path = output / f"{artifact.id}.json"
    manifest_path.write_text(json.dumps(manifest, indent=2) + "\n")
    return artifact_path


def _report(result: CompileResult) -> None:
    for diagnostic in result.diagnostics:
        typer.echo(str(diagnostic), err=diagnostic.is_error)


def _compile_once(
    compiler: ShaderCompiler,
    request: CompileRequest,
    output: Path | None,
    print_text: bool,
) -> CompileResult:
    result = compiler.compile(request)
    _report(result)
    if result.artifact is None:
        logger.error(f"Compilation of {request.source_filename} failed")
        return result

    typer.echo(str(result.artifact.id))
    if print_text:
        for variant in result.variants:
            typer.echo(f"// {variant.tier.name}")
            typer.echo(variant.text)
    if output is not None:
        path = _write_artifact(result.artifact, request, output)
        logger.info(f"Artifact written to {path}")
    return result


# Reusable options
CONVERTER_OPTION = typer.Option(
    ..., "--converter", "-c", help="Converter reference: file.py:name or package.module:name"
)
STAGE_OPTION = typer.Option("pixel", "--stage", "-s", help="Shader stage (vertex, pixel, ...)")
PLATFORM_OPTION = typer.Option(
    "opengl", "--platform", "-p", help="Platform family (opengl, opengles)"
)
PROFILE_OPTION = typer.Option("10_0", "--profile", help="Graphics profile (9_1 ... 11_1)")
ENTRY_OPTION = typer.Option("main", "--entry", "-e", help="Entry point function")
NO_ENTRY_OPTION = typer.Option(False, "--no-entry", help="Compile without an entry point")
RENDER_TARGETS_OPTION = typer.Option(1, "--render-targets", help="Number of render targets")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Directory receiving artifacts")
NO_OPTIMIZE_OPTION = typer.Option(False, "--no-optimize", help="Skip the GLSL optimizer")
PRINT_TEXT_OPTION = typer.Option(False, "--print-text", help="Print emitted programs")


@typed_command(app.command("compile"))
def compile_command(
    source_file: str = typer.Argument(..., help="Shader source file"),
    converter: str = CONVERTER_OPTION,
    stage: str = STAGE_OPTION,
    platform: str = PLATFORM_OPTION,
    profile: str = PROFILE_OPTION,
    entry: str = ENTRY_OPTION,
    no_entry: bool = NO_ENTRY_OPTION,
    render_targets: int = RENDER_TARGETS_OPTION,
    output: Path | None = OUTPUT_OPTION,
    no_optimize: bool = NO_OPTIMIZE_OPTION,
    print_text: bool = PRINT_TEXT_OPTION,
) -> None:
    """Compile a shader into a packaged GLSL artifact.

    Prints the artifact id and, with --output, writes <id>.bin and a
    <id>.json manifest.

    Example: shadercross compile lit.hlsl -c converters.py:convert -p opengles --profile 9_3
    """
    request = _build_request(
        source_file, stage, platform, profile, None if no_entry else entry, render_targets
    )
    compiler = _create_compiler(converter, no_optimize)
    result = _compile_once(compiler, request, output, print_text)
    if not result.succeeded:
        raise typer.Exit(1)


@typed_command(app.command("inspect"))
def inspect_artifact(
    artifact_file: Path = typer.Argument(..., help="Packaged artifact file"),
    dual: bool | None = typer.Option(
        None, "--dual/--single", help="Force the artifact layout (default: detect)"
    ),
) -> None:
    """Print the id and the GLSL variants stored in an artifact.

    Example: shadercross inspect build/3f2a...9c.bin
    """
    data = artifact_file.read_bytes()
    typer.echo(f"id: {compute_object_id(data)}")

    if dual is not False:
        try:
            bytecode = decode_level_bytecode(data)
        except ArtifactFormatError as e:
            if dual:
                logger.error(f"Invalid dual-variant artifact: {e}")
                raise typer.Exit(1) from e
            logger.debug(f"Not a dual-variant artifact ({e}), reading as text")
        else:
            for label, text in (("legacy", bytecode.legacy), ("modern", bytecode.modern)):
                typer.echo(f"// {label}: {'absent' if text is None else f'{len(text)} bytes'}")
                if text is not None:
                    typer.echo(text)
            return

    typer.echo(f"// single: {len(data)} bytes")
    typer.echo(data.decode("ascii", errors="replace"))


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for shader file changes."""

    def __init__(self, source_file: str):
        self.source_file = source_file
        self.needs_rebuild = False

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        if event.src_path == os.path.abspath(self.source_file):
            logger.info(f"Detected changes in {self.source_file}")
            self.needs_rebuild = True


@typed_command(app.command("watch"))
def watch_command(
    source_file: str = typer.Argument(..., help="Shader source file"),
    converter: str = CONVERTER_OPTION,
    stage: str = STAGE_OPTION,
    platform: str = PLATFORM_OPTION,
    profile: str = PROFILE_OPTION,
    entry: str = ENTRY_OPTION,
    no_entry: bool = NO_ENTRY_OPTION,
    render_targets: int = RENDER_TARGETS_OPTION,
    output: Path | None = OUTPUT_OPTION,
    no_optimize: bool = NO_OPTIMIZE_OPTION,
) -> None:
    """Watch a shader file and recompile it on every change.

    Example: shadercross watch lit.hlsl -c converters.py:convert -o build
    """
    abs_source_file = os.path.abspath(source_file)
    compiler = _create_compiler(converter, no_optimize)
    handler = ShaderChangeHandler(abs_source_file)

    def rebuild() -> None:
        try:
            request = _build_request(
                abs_source_file,
                stage,
                platform,
                profile,
                None if no_entry else entry,
                render_targets,
            )
        except typer.Exit:
            # File may be mid-save; wait for the next change
            return
        _compile_once(compiler, request, output, print_text=False)

    # Watch the file's directory, not the file itself
    observer = watchdog.observers.Observer()
    observer.schedule(handler, path=os.path.dirname(abs_source_file), recursive=False)
    observer.start()

    try:
        rebuild()
        logger.info(f"Watching {source_file} (Ctrl+C to stop)...")
        while True:
            if handler.needs_rebuild:
                handler.needs_rebuild = False
                rebuild()
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
