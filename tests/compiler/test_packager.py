"""Tests for artifact packaging."""

import struct

import pytest

from shadercross.compiler.errors import ArtifactFormatError
from shadercross.compiler.models import ShaderLevelBytecode, ShaderStage
from shadercross.compiler.packager import (
    OBJECT_ID_SIZE,
    compute_object_id,
    decode_level_bytecode,
    encode_level_bytecode,
    encode_text,
    package_dual,
    package_single,
)


class TestDualLayout:
    """Byte layout of the dual-variant buffer."""

    def test_both_variants(self):
        data = encode_level_bytecode(ShaderLevelBytecode(legacy="ab", modern="xyz"))
        assert data == b"\x01\x01" + b"\x02\x00\x00\x00ab" + b"\x03\x00\x00\x00xyz"

    def test_legacy_absent(self):
        data = encode_level_bytecode(ShaderLevelBytecode(modern="void main(){}"))
        assert data[:2] == b"\x00\x01"
        assert struct.unpack_from("<I", data, 2) == (13,)
        assert data[6:] == b"void main(){}"

    def test_empty_text_is_present(self):
        data = encode_level_bytecode(ShaderLevelBytecode(legacy="", modern=None))
        assert data == b"\x01\x00\x00\x00\x00\x00"
        assert decode_level_bytecode(data) == ShaderLevelBytecode(legacy="", modern=None)

    def test_decode(self):
        bytecode = ShaderLevelBytecode(legacy="attribute vec4 p;\n", modern="#version 300 es\n")
        assert decode_level_bytecode(encode_level_bytecode(bytecode)) == bytecode

    def test_non_ascii_is_replaced(self):
        assert encode_text("// café\n") == b"// caf?\n"


class TestMalformedBuffers:
    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"\x01",
            b"\x02\x00",
            b"\x01\x00\x05\x00",
            b"\x01\x00\x05\x00\x00\x00abc",
            b"\x00\x01\x01\x00\x00\x00ab",
            b"\x00\x00\x00",
        ],
        ids=[
            "empty",
            "short-flags",
            "bad-flag",
            "short-length",
            "short-data",
            "trailing",
            "trailing-no-variants",
        ],
    )
    def test_rejected(self, data):
        with pytest.raises(ArtifactFormatError):
            decode_level_bytecode(data)


class TestArtifacts:
    def test_single_is_raw_text(self):
        artifact = package_single("#version 420\n", ShaderStage.VERTEX)
        assert artifact.data == b"#version 420\n"
        assert artifact.stage == ShaderStage.VERTEX

    def test_dual_uses_layout(self):
        bytecode = ShaderLevelBytecode(legacy="a", modern="b")
        artifact = package_dual(bytecode, ShaderStage.PIXEL)
        assert artifact.data == encode_level_bytecode(bytecode)

    def test_id_is_content_hash(self):
        first = package_single("void main(){}", ShaderStage.PIXEL)
        second = package_single("void main(){}", ShaderStage.PIXEL)
        other = package_single("void main() {}", ShaderStage.PIXEL)

        assert first.id == second.id
        assert first.id != other.id
        assert len(first.id.digest) == OBJECT_ID_SIZE
        assert str(first.id) == first.id.digest.hex()

    def test_id_covers_whole_buffer(self):
        assert compute_object_id(b"\x00\x01") != compute_object_id(b"\x01\x00")
