"""
Versioned contract module files.

A module file is ``version (u32 BE) | length (u32 BE) | source``.  The
source itself is opaque to stele and only carried into the deploy payload.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path

from ..errors import FileIOError, ParseError

SUPPORTED_MODULE_VERSIONS = (0, 1)
WASM_MAGIC = b"\x00asm"


@dataclass(frozen=True)
class WasmModule:
    version: int
    source: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "WasmModule":
        if data.startswith(WASM_MAGIC):
            raise ParseError(
                "Module is bare Wasm without a version header; "
                "deploy the versioned build output (e.g. module.wasm.v1)"
            )
        if len(data) < 8:
            raise ParseError("Module file is too short to hold a version header")
        version, length = struct.unpack(">II", data[:8])
        if version not in SUPPORTED_MODULE_VERSIONS:
            raise ParseError(f"Unsupported module version {version}")
        source = data[8:]
        if len(source) != length:
            raise ParseError(
                f"Module declares {length} source bytes but contains {len(source)}"
            )
        return cls(version=version, source=source)

    @classmethod
    def from_path(cls, path: Path) -> "WasmModule":
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileIOError(f"Could not read contract module {path}: {exc}") from exc
        return cls.from_bytes(data)

    def to_bytes(self) -> bytes:
        return struct.pack(">II", self.version, len(self.source)) + self.source
