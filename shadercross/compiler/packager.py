"""Artifact packaging and content hashing.

Dual-variant buffer layout (all ES artifacts)::

    [has_legacy:u8][has_modern:u8]
    then, for each present variant in (legacy, modern) order:
    [length:u32 little-endian][ASCII program text]

Single-variant artifacts (desktop) are the ASCII program text itself.
"""

import hashlib
import struct

from loguru import logger

from shadercross.compiler.errors import ArtifactFormatError
from shadercross.compiler.models import (
    ShaderArtifact,
    ShaderLevelBytecode,
    ShaderObjectId,
    ShaderStage,
)

_FLAGS = struct.Struct("<BB")
_LENGTH = struct.Struct("<I")
OBJECT_ID_SIZE = 16


def encode_text(text: str) -> bytes:
    """Encode program text one byte per character; non-ASCII becomes '?'."""
    return text.encode("ascii", errors="replace")


def encode_level_bytecode(bytecode: ShaderLevelBytecode) -> bytes:
    """Serialize both ES variants into the dual-variant layout."""
    variants = [bytecode.legacy, bytecode.modern]
    parts = [_FLAGS.pack(*(int(v is not None) for v in variants))]
    for text in variants:
        if text is not None:
            data = encode_text(text)
            parts.append(_LENGTH.pack(len(data)))
            parts.append(data)
    return b"".join(parts)


def decode_level_bytecode(data: bytes) -> ShaderLevelBytecode:
    """Parse a dual-variant buffer.

    Raises:
        ArtifactFormatError: If the buffer is truncated, has invalid flags or
            trailing bytes
    """
    if len(data) < _FLAGS.size:
        raise ArtifactFormatError("Artifact is too short to hold variant flags")
    flags = _FLAGS.unpack_from(data, 0)
    if any(flag not in (0, 1) for flag in flags):
        raise ArtifactFormatError(f"Invalid variant flags: {flags}")

    offset = _FLAGS.size
    texts: list[str | None] = []
    for present in flags:
        if not present:
            texts.append(None)
            continue
        if offset + _LENGTH.size > len(data):
            raise ArtifactFormatError("Truncated variant length")
        (length,) = _LENGTH.unpack_from(data, offset)
        offset += _LENGTH.size
        if offset + length > len(data):
            raise ArtifactFormatError("Truncated variant data")
        texts.append(data[offset : offset + length].decode("ascii", errors="replace"))
        offset += length

    if offset != len(data):
        raise ArtifactFormatError(f"{len(data) - offset} trailing bytes after variants")
    return ShaderLevelBytecode(legacy=texts[0], modern=texts[1])


def compute_object_id(data: bytes) -> ShaderObjectId:
    """Hash a packaged buffer into its content identifier."""
    return ShaderObjectId(hashlib.blake2b(data, digest_size=OBJECT_ID_SIZE).digest())


def package_single(text: str, stage: ShaderStage) -> ShaderArtifact:
    """Package a single desktop variant as raw text."""
    return _make_artifact(encode_text(text), stage)


def package_dual(bytecode: ShaderLevelBytecode, stage: ShaderStage) -> ShaderArtifact:
    """Package the ES variants into one dual-variant buffer."""
    return _make_artifact(encode_level_bytecode(bytecode), stage)


def _make_artifact(data: bytes, stage: ShaderStage) -> ShaderArtifact:
    object_id = compute_object_id(data)
    logger.debug(f"Packaged {stage.name} artifact {object_id} ({len(data)} bytes)")
    return ShaderArtifact(id=object_id, data=data, stage=stage)
