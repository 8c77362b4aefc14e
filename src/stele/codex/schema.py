"""
Versioned module schema - parsing and method lookup.

A module schema describes, per contract, the binary layouts of the init
function and of every receive method.  The file starts with the magic
``0xffff`` followed by a version byte; versions 0 to 3 are understood and
anything else is rejected rather than guessed at.
"""

from __future__ import annotations

import binascii
import struct
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..errors import MethodNotFound, SchemaParseError
from ..utils import b64decode_lenient
from . import layout as L

SCHEMA_MAGIC = b"\xff\xff"
SUPPORTED_VERSIONS = (0, 1, 2, 3)
MAX_NESTING = 256


@dataclass(frozen=True)
class ContractMethodRef:
    contract: str
    method: str

    @property
    def receive_name(self) -> str:
        return f"{self.contract}.{self.method}"

    def __str__(self) -> str:
        return self.receive_name


@dataclass(frozen=True)
class FunctionSchema:
    parameter: Optional[L.TypeLayout] = None
    return_value: Optional[L.TypeLayout] = None
    error: Optional[L.TypeLayout] = None


@dataclass(frozen=True)
class ContractSchema:
    init: Optional[FunctionSchema] = None
    receive: Mapping[str, FunctionSchema] = field(default_factory=dict)
    event: Optional[L.TypeLayout] = None
    state: Optional[L.TypeLayout] = None


@dataclass(frozen=True)
class VersionedModuleSchema:
    version: int
    contracts: Mapping[str, ContractSchema]

    def contract_names(self) -> list[str]:
        return sorted(self.contracts)

    def method_names(self, contract: str) -> list[str]:
        return sorted(self._contract(contract).receive)

    def lookup_parameter_layout(self, contract: str, method: str) -> L.TypeLayout:
        function = self._receive(contract, method)
        if function.parameter is None:
            raise MethodNotFound(
                f"Method '{contract}.{method}' declares no parameter layout"
            )
        return function.parameter

    def lookup_return_layout(self, contract: str, method: str) -> Optional[L.TypeLayout]:
        return self._receive(contract, method).return_value

    def lookup_error_layout(self, contract: str, method: str) -> Optional[L.TypeLayout]:
        return self._receive(contract, method).error

    def lookup_init_parameter_layout(self, contract: str) -> L.TypeLayout:
        init = self._contract(contract).init
        if init is None or init.parameter is None:
            raise MethodNotFound(
                f"Contract '{contract}' declares no init parameter layout"
            )
        return init.parameter

    def lookup_event_layout(self, contract: str) -> Optional[L.TypeLayout]:
        return self._contract(contract).event

    def _contract(self, contract: str) -> ContractSchema:
        try:
            return self.contracts[contract]
        except KeyError:
            raise MethodNotFound(f"Contract '{contract}' not found in schema") from None

    def _receive(self, contract: str, method: str) -> FunctionSchema:
        try:
            return self._contract(contract).receive[method]
        except KeyError:
            raise MethodNotFound(
                f"Method '{method}' not found for contract '{contract}'"
            ) from None


def load_schema_bytes(raw: bytes) -> bytes:
    """Return binary schema bytes from a file that may be base64 encoded."""
    if raw.startswith(SCHEMA_MAGIC):
        return raw
    try:
        return b64decode_lenient(raw.decode("ascii"))
    except (UnicodeDecodeError, binascii.Error, ValueError) as exc:
        raise SchemaParseError("Schema is neither binary nor valid base64") from exc


def parse_schema(data: bytes) -> VersionedModuleSchema:
    """
    Parse a versioned module schema.

    Raises:
        SchemaParseError: on bad magic, an unsupported version, unknown type
            tags, truncated input or trailing bytes.
    """
    reader = _SchemaReader(data)
    if reader.take(2) != SCHEMA_MAGIC:
        raise SchemaParseError("Missing versioned schema prefix (0xffff)")
    version = reader.u8()
    if version not in SUPPORTED_VERSIONS:
        raise SchemaParseError(f"Unsupported schema version {version}")

    contracts: dict[str, ContractSchema] = {}
    for _ in range(reader.u32()):
        name = reader.string()
        contracts[name] = _parse_contract(reader, version)

    if reader.remaining:
        raise SchemaParseError(f"{reader.remaining} trailing bytes after schema")
    return VersionedModuleSchema(version=version, contracts=MappingProxyType(contracts))


def _parse_contract(reader: "_SchemaReader", version: int) -> ContractSchema:
    if version == 0:
        state = reader.optional(reader.type_layout)
        init_param = reader.optional(reader.type_layout)
        receive = {
            name: FunctionSchema(parameter=param)
            for name, param in reader.string_map(reader.type_layout).items()
        }
        init = FunctionSchema(parameter=init_param) if init_param is not None else None
        return ContractSchema(init=init, receive=MappingProxyType(receive), state=state)

    function = reader.function_v1 if version == 1 else reader.function_v2
    init = reader.optional(function)
    receive = reader.string_map(function)
    event = reader.optional(reader.type_layout) if version == 3 else None
    return ContractSchema(init=init, receive=MappingProxyType(receive), event=event)


class _SchemaReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self._depth = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, n: int) -> bytes:
        if self.remaining < n:
            raise SchemaParseError(
                f"Unexpected end of schema at offset {self._pos} (needed {n} bytes)"
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def string(self) -> str:
        raw = self.take(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SchemaParseError("Schema contains an invalid UTF-8 name") from exc

    def optional(self, parse):
        flag = self.u8()
        if flag == 0:
            return None
        if flag == 1:
            return parse()
        raise SchemaParseError(f"Invalid option flag {flag}")

    def string_map(self, parse) -> dict:
        entries = {}
        for _ in range(self.u32()):
            key = self.string()
            entries[key] = parse()
        return entries

    def size_length(self) -> L.SizeLength:
        raw = self.u8()
        try:
            return L.SizeLength(raw)
        except ValueError:
            raise SchemaParseError(f"Invalid size length {raw}") from None

    def function_v1(self) -> FunctionSchema:
        tag = self.u8()
        if tag == 0:
            return FunctionSchema(parameter=self.type_layout())
        if tag == 1:
            return FunctionSchema(return_value=self.type_layout())
        if tag == 2:
            param = self.type_layout()
            return FunctionSchema(parameter=param, return_value=self.type_layout())
        raise SchemaParseError(f"Invalid function schema tag {tag}")

    def function_v2(self) -> FunctionSchema:
        # Tag enumerates which of (parameter, return value, error) follow.
        tag = self.u8()
        if tag > 7:
            raise SchemaParseError(f"Invalid function schema tag {tag}")
        present = {
            0: (True, False, False),
            1: (False, True, False),
            2: (True, True, False),
            3: (False, False, True),
            4: (True, False, True),
            5: (False, True, True),
            6: (True, True, True),
            7: (False, False, False),
        }[tag]
        parts = [self.type_layout() if flag else None for flag in present]
        return FunctionSchema(parameter=parts[0], return_value=parts[1], error=parts[2])

    def fields(self) -> L.Fields:
        kind = self.u8()
        if kind == L.FieldsKind.NAMED:
            named = []
            for _ in range(self.u32()):
                name = self.string()
                named.append((name, self.type_layout()))
            return L.Fields.of_named(*named)
        if kind == L.FieldsKind.UNNAMED:
            return L.Fields.of_unnamed(*[self.type_layout() for _ in range(self.u32())])
        if kind == L.FieldsKind.NONE:
            return L.Fields.none()
        raise SchemaParseError(f"Invalid fields kind {kind}")

    def type_layout(self) -> L.TypeLayout:
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise SchemaParseError("Type layout nested too deeply")
        try:
            return self._type_layout()
        finally:
            self._depth -= 1

    def _type_layout(self) -> L.TypeLayout:
        raw = self.u8()
        try:
            tag = L.Tag(raw)
        except ValueError:
            raise SchemaParseError(f"Unknown type tag {raw}") from None

        if tag in L.SCALAR_TAGS:
            return L.Scalar(tag)
        if tag is L.Tag.PAIR:
            left = self.type_layout()
            return L.Pair(left, self.type_layout())
        if tag is L.Tag.LIST:
            size = self.size_length()
            return L.List(size, self.type_layout())
        if tag is L.Tag.SET:
            size = self.size_length()
            return L.Set(size, self.type_layout())
        if tag is L.Tag.MAP:
            size = self.size_length()
            key = self.type_layout()
            return L.Map(size, key, self.type_layout())
        if tag is L.Tag.ARRAY:
            length = self.u32()
            return L.Array(length, self.type_layout())
        if tag is L.Tag.STRUCT:
            return L.Struct(self.fields())
        if tag is L.Tag.ENUM:
            variants = []
            for _ in range(self.u32()):
                name = self.string()
                variants.append((name, self.fields()))
            return L.Enum(tuple(variants))
        if tag is L.Tag.TAGGED_ENUM:
            tagged = []
            for _ in range(self.u32()):
                discriminant = self.u8()
                name = self.string()
                tagged.append((discriminant, name, self.fields()))
            return L.TaggedEnum(tuple(tagged))
        if tag is L.Tag.STRING:
            return L.String(self.size_length())
        if tag is L.Tag.CONTRACT_NAME:
            return L.ContractName(self.size_length())
        if tag is L.Tag.RECEIVE_NAME:
            return L.ReceiveName(self.size_length())
        if tag is L.Tag.ULEB128:
            return L.ULeb128(self.u32())
        if tag is L.Tag.ILEB128:
            return L.ILeb128(self.u32())
        if tag is L.Tag.BYTE_LIST:
            return L.ByteList(self.size_length())
        return L.ByteArray(self.u32())


__all__ = [
    "ContractMethodRef",
    "ContractSchema",
    "FunctionSchema",
    "VersionedModuleSchema",
    "load_schema_bytes",
    "parse_schema",
]
