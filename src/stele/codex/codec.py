"""
Schema-driven value codec.

Converts between JSON-shaped values (``None``, ``bool``, ``int``, ``str``,
``list``, ``dict``) and the contract binary encoding described by a
``TypeLayout``.  Integers are little-endian at their declared width and
variable-size data is preceded by an unsigned length prefix of the width
the layout declares.

Values are never coerced: a string where an integer is expected, or a
``bool`` where a number is expected, is an ``EncodeError`` naming the
offending location.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from eth_utils import to_checksum_address

from ..errors import DecodeError, EncodeError, PathElement
from ..utils import millis_to_rfc3339, parse_hex, rfc3339_to_millis
from . import layout as L

Path = tuple[PathElement, ...]

_UNSIGNED_RE = re.compile(r"^[0-9]+$")
_SIGNED_RE = re.compile(r"^-?[0-9]+$")
_DURATION_RE = re.compile(r"^([0-9]+)(ms|s|m|h|d)$")
_DURATION_UNITS = (("d", 86_400_000), ("h", 3_600_000), ("m", 60_000), ("s", 1000), ("ms", 1))

# Account addresses occupy a 32-byte word; 20-byte addresses are left-padded.
ACCOUNT_ADDRESS_SIZE = 32
_SHORT_ADDRESS_SIZE = 20

# Bound on element counts for layouts that may encode to zero bytes.
_MAX_ZERO_SIZED_ELEMENTS = 1 << 16


# ============ Public API ============


def encode(value: Any, layout: L.TypeLayout) -> bytes:
    """Encode ``value`` following ``layout``."""
    out = bytearray()
    _encode(value, layout, (), out)
    return bytes(out)


def decode(data: bytes, layout: L.TypeLayout, *, allow_trailing: bool = True) -> Any:
    """
    Decode a value following ``layout``.

    Args:
        data: Encoded bytes.
        layout: Layout to decode with.
        allow_trailing: When False, bytes left over after the value is
            complete are an error.

    Raises:
        DecodeError: on truncated input, an unknown union discriminant or
            malformed content.
    """
    value, consumed = decode_prefix(data, layout)
    if not allow_trailing and consumed != len(data):
        raise DecodeError((), f"{len(data) - consumed} trailing bytes after value")
    return value


def decode_prefix(data: bytes, layout: L.TypeLayout) -> tuple[Any, int]:
    """Decode one value from the start of ``data``; return it and the bytes used."""
    cursor = _Cursor(data)
    value = _decode(cursor, layout, ())
    return value, cursor.pos


# ============ Helpers ============


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _expect(value: Any, expected: type, kind: str, path: Path) -> None:
    if not isinstance(value, expected) or isinstance(value, bool) and expected is not bool:
        raise EncodeError(path, f"expected {kind}, got {_kind(value)}")


def _int_range(width: int, signed: bool) -> tuple[int, int]:
    bits = width * 8
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _int_name(width: int, signed: bool) -> str:
    return f"{'i' if signed else 'u'}{width * 8}"


def _parse_decimal(value: Any, signed: bool, path: Path) -> int:
    _expect(value, str, "decimal string", path)
    pattern = _SIGNED_RE if signed else _UNSIGNED_RE
    if not pattern.match(value):
        raise EncodeError(path, f"invalid {'signed' if signed else 'unsigned'} decimal {value!r}")
    return int(value)


def _write_int(out: bytearray, value: int, width: int, signed: bool, path: Path) -> None:
    lo, hi = _int_range(width, signed)
    if not lo <= value <= hi:
        raise EncodeError(path, f"{value} out of range for {_int_name(width, signed)}")
    out += value.to_bytes(width, "little", signed=signed)


def _check_zero_sized(count: int, element_min: int, path: Path) -> None:
    if not element_min and count > _MAX_ZERO_SIZED_ELEMENTS:
        raise EncodeError(
            path, f"{count} zero-sized elements, the limit is {_MAX_ZERO_SIZED_ELEMENTS}"
        )


def _write_length(out: bytearray, length: int, size: L.SizeLength, path: Path) -> None:
    if length > size.max_length:
        raise EncodeError(
            path, f"length {length} exceeds maximum {size.max_length} for a {size.name} prefix"
        )
    out += length.to_bytes(size.width, "little")


def _hex_bytes(value: Any, path: Path) -> bytes:
    _expect(value, str, "hex string", path)
    try:
        return parse_hex(value)
    except ValueError as exc:
        raise EncodeError(path, str(exc)) from None


def _min_size(layout: L.TypeLayout) -> int:
    """Smallest number of bytes any value of ``layout`` can occupy."""
    if isinstance(layout, L.Scalar):
        if layout.tag is L.Tag.UNIT:
            return 0
        if layout.tag in L.INTEGER_TAGS:
            return L.INTEGER_TAGS[layout.tag][0]
        return {
            L.Tag.BOOL: 1,
            L.Tag.AMOUNT: 8,
            L.Tag.ACCOUNT_ADDRESS: ACCOUNT_ADDRESS_SIZE,
            L.Tag.CONTRACT_ADDRESS: 16,
            L.Tag.TIMESTAMP: 8,
            L.Tag.DURATION: 8,
        }[layout.tag]
    if isinstance(layout, L.Pair):
        return _min_size(layout.left) + _min_size(layout.right)
    if isinstance(layout, (L.List, L.Set, L.Map, L.String, L.ContractName, L.ReceiveName, L.ByteList)):
        return layout.size_length.width
    if isinstance(layout, L.Array):
        return layout.length * _min_size(layout.item)
    if isinstance(layout, L.ByteArray):
        return layout.length
    if isinstance(layout, L.Struct):
        return _fields_min_size(layout.fields)
    if isinstance(layout, L.Enum):
        return layout.discriminant_width
    if isinstance(layout, L.TaggedEnum):
        return 1
    return 1  # LEB128


def _fields_min_size(fields: L.Fields) -> int:
    if fields.kind is L.FieldsKind.NAMED:
        return sum(_min_size(t) for _, t in fields.named)
    if fields.kind is L.FieldsKind.UNNAMED:
        return sum(_min_size(t) for t in fields.unnamed)
    return 0


# ============ Encoding ============


def _encode(value: Any, layout: L.TypeLayout, path: Path, out: bytearray) -> None:
    encoder = _ENCODERS.get(type(layout))
    if encoder is None:
        raise TypeError(f"Not a type layout: {layout!r}")
    encoder(value, layout, path, out)


def _encode_scalar(value: Any, layout: L.Scalar, path: Path, out: bytearray) -> None:
    tag = layout.tag
    if tag in L.INTEGER_TAGS:
        width, signed = L.INTEGER_TAGS[tag]
        if width == 16:
            number = _parse_decimal(value, signed, path)
        else:
            _expect(value, int, "integer", path)
            number = value
        _write_int(out, number, width, signed, path)
    elif tag is L.Tag.UNIT:
        if value is not None and value != []:
            raise EncodeError(path, f"expected [] for unit, got {_kind(value)}")
    elif tag is L.Tag.BOOL:
        _expect(value, bool, "bool", path)
        out.append(1 if value else 0)
    elif tag is L.Tag.AMOUNT:
        _write_int(out, _parse_decimal(value, False, path), 8, False, path)
    elif tag is L.Tag.ACCOUNT_ADDRESS:
        raw = _hex_bytes(value, path)
        if len(raw) == _SHORT_ADDRESS_SIZE:
            raw = bytes(ACCOUNT_ADDRESS_SIZE - _SHORT_ADDRESS_SIZE) + raw
        if len(raw) != ACCOUNT_ADDRESS_SIZE:
            raise EncodeError(path, f"account address must be 20 or 32 bytes, got {len(raw)}")
        out += raw
    elif tag is L.Tag.CONTRACT_ADDRESS:
        _expect(value, dict, "object with index and subindex", path)
        if set(value) != {"index", "subindex"}:
            raise EncodeError(path, "contract address needs exactly 'index' and 'subindex'")
        for key in ("index", "subindex"):
            _expect(value[key], int, "integer", path + (key,))
            _write_int(out, value[key], 8, False, path + (key,))
    elif tag is L.Tag.TIMESTAMP:
        _expect(value, str, "RFC 3339 timestamp", path)
        try:
            millis = rfc3339_to_millis(value)
        except ValueError as exc:
            raise EncodeError(path, f"invalid timestamp: {exc}") from None
        _write_int(out, millis, 8, False, path)
    elif tag is L.Tag.DURATION:
        _write_int(out, _parse_duration(value, path), 8, False, path)


def _parse_duration(value: Any, path: Path) -> int:
    _expect(value, str, "duration string", path)
    tokens = value.split()
    if not tokens:
        raise EncodeError(path, "empty duration")
    total = 0
    for token in tokens:
        match = _DURATION_RE.match(token)
        if match is None:
            raise EncodeError(path, f"invalid duration component {token!r}")
        amount, unit = match.groups()
        total += int(amount) * dict(_DURATION_UNITS)[unit]
    return total


def _encode_pair(value: Any, layout: L.Pair, path: Path, out: bytearray) -> None:
    _expect(value, list, "array of 2", path)
    if len(value) != 2:
        raise EncodeError(path, f"pair needs 2 elements, got {len(value)}")
    _encode(value[0], layout.left, path + (0,), out)
    _encode(value[1], layout.right, path + (1,), out)


def _encode_list(value: Any, layout: L.List, path: Path, out: bytearray) -> None:
    _expect(value, list, "array", path)
    _check_zero_sized(len(value), _min_size(layout.item), path)
    _write_length(out, len(value), layout.size_length, path)
    for index, item in enumerate(value):
        _encode(item, layout.item, path + (index,), out)


def _encode_set(value: Any, layout: L.Set, path: Path, out: bytearray) -> None:
    _expect(value, list, "array", path)
    _check_zero_sized(len(value), _min_size(layout.item), path)
    _write_length(out, len(value), layout.size_length, path)
    seen: set[bytes] = set()
    for index, item in enumerate(value):
        encoded = encode_at(item, layout.item, path + (index,))
        if encoded in seen:
            raise EncodeError(path + (index,), "duplicate set element")
        seen.add(encoded)
        out += encoded


def _encode_map(value: Any, layout: L.Map, path: Path, out: bytearray) -> None:
    _expect(value, list, "array of [key, value] pairs", path)
    _check_zero_sized(len(value), _min_size(layout.key) + _min_size(layout.value), path)
    _write_length(out, len(value), layout.size_length, path)
    for index, entry in enumerate(value):
        entry_path = path + (index,)
        _expect(entry, list, "[key, value] pair", entry_path)
        if len(entry) != 2:
            raise EncodeError(entry_path, f"map entry needs 2 elements, got {len(entry)}")
        _encode(entry[0], layout.key, entry_path + (0,), out)
        _encode(entry[1], layout.value, entry_path + (1,), out)


def _encode_array(value: Any, layout: L.Array, path: Path, out: bytearray) -> None:
    _expect(value, list, "array", path)
    if len(value) != layout.length:
        raise EncodeError(path, f"expected exactly {layout.length} elements, got {len(value)}")
    for index, item in enumerate(value):
        _encode(item, layout.item, path + (index,), out)


def _encode_fields(value: Any, fields: L.Fields, path: Path, out: bytearray) -> None:
    if fields.kind is L.FieldsKind.NAMED:
        _expect(value, dict, "object", path)
        known = {name for name, _ in fields.named}
        for key in value:
            if key not in known:
                raise EncodeError(path + (key,), "unexpected field")
        for name, field_layout in fields.named:
            if name not in value:
                raise EncodeError(path + (name,), "missing field")
            _encode(value[name], field_layout, path + (name,), out)
    elif fields.kind is L.FieldsKind.UNNAMED:
        _expect(value, list, "array", path)
        if len(value) != len(fields.unnamed):
            raise EncodeError(
                path, f"expected {len(fields.unnamed)} fields, got {len(value)}"
            )
        for index, (item, field_layout) in enumerate(zip(value, fields.unnamed)):
            _encode(item, field_layout, path + (index,), out)
    elif value not in (None, [], {}):
        raise EncodeError(path, f"expected no fields, got {_kind(value)}")


def _encode_struct(value: Any, layout: L.Struct, path: Path, out: bytearray) -> None:
    _encode_fields(value, layout.fields, path, out)


def _variant_entry(value: Any, path: Path) -> tuple[str, Any]:
    _expect(value, dict, "object with a single variant key", path)
    if len(value) != 1:
        raise EncodeError(path, f"expected exactly one variant key, got {len(value)}")
    (name, payload), = value.items()
    return name, payload


def _encode_enum(value: Any, layout: L.Enum, path: Path, out: bytearray) -> None:
    name, payload = _variant_entry(value, path)
    for index, (variant, fields) in enumerate(layout.variants):
        if variant == name:
            out += index.to_bytes(layout.discriminant_width, "little")
            _encode_fields(payload, fields, path + (name,), out)
            return
    raise EncodeError(path + (name,), "unknown variant")


def _encode_tagged_enum(value: Any, layout: L.TaggedEnum, path: Path, out: bytearray) -> None:
    name, payload = _variant_entry(value, path)
    for discriminant, variant, fields in layout.variants:
        if variant == name:
            out.append(discriminant)
            _encode_fields(payload, fields, path + (name,), out)
            return
    raise EncodeError(path + (name,), "unknown variant")


def _encode_text(text: str, size: L.SizeLength, path: Path, out: bytearray) -> None:
    raw = text.encode("utf-8")
    _write_length(out, len(raw), size, path)
    out += raw


def _encode_string(value: Any, layout: L.String, path: Path, out: bytearray) -> None:
    _expect(value, str, "string", path)
    _encode_text(value, layout.size_length, path, out)


def _encode_contract_name(value: Any, layout: L.ContractName, path: Path, out: bytearray) -> None:
    _expect(value, dict, "object with 'contract'", path)
    if set(value) != {"contract"}:
        raise EncodeError(path, "contract name needs exactly 'contract'")
    _expect(value["contract"], str, "string", path + ("contract",))
    _encode_text(f"init_{value['contract']}", layout.size_length, path, out)


def _encode_receive_name(value: Any, layout: L.ReceiveName, path: Path, out: bytearray) -> None:
    _expect(value, dict, "object with 'contract' and 'func'", path)
    if set(value) != {"contract", "func"}:
        raise EncodeError(path, "receive name needs exactly 'contract' and 'func'")
    for key in ("contract", "func"):
        _expect(value[key], str, "string", path + (key,))
    _encode_text(f"{value['contract']}.{value['func']}", layout.size_length, path, out)


def _encode_uleb128(value: Any, layout: L.ULeb128, path: Path, out: bytearray) -> None:
    number = _parse_decimal(value, False, path)
    encoded = bytearray()
    while True:
        byte = number & 0x7F
        number >>= 7
        if number:
            encoded.append(byte | 0x80)
        else:
            encoded.append(byte)
            break
    _check_leb_length(encoded, layout.max_bytes, path)
    out += encoded


def _encode_ileb128(value: Any, layout: L.ILeb128, path: Path, out: bytearray) -> None:
    number = _parse_decimal(value, True, path)
    encoded = bytearray()
    while True:
        byte = number & 0x7F
        number >>= 7
        done = (number == 0 and not byte & 0x40) or (number == -1 and byte & 0x40)
        encoded.append(byte if done else byte | 0x80)
        if done:
            break
    _check_leb_length(encoded, layout.max_bytes, path)
    out += encoded


def _check_leb_length(encoded: bytearray, max_bytes: int, path: Path) -> None:
    if len(encoded) > max_bytes:
        raise EncodeError(path, f"value needs {len(encoded)} LEB128 bytes, maximum is {max_bytes}")


def _encode_byte_list(value: Any, layout: L.ByteList, path: Path, out: bytearray) -> None:
    raw = _hex_bytes(value, path)
    _write_length(out, len(raw), layout.size_length, path)
    out += raw


def _encode_byte_array(value: Any, layout: L.ByteArray, path: Path, out: bytearray) -> None:
    raw = _hex_bytes(value, path)
    if len(raw) != layout.length:
        raise EncodeError(path, f"expected exactly {layout.length} bytes, got {len(raw)}")
    out += raw


def encode_at(value: Any, layout: L.TypeLayout, path: Path) -> bytes:
    """Encode a nested value, reporting errors relative to ``path``."""
    out = bytearray()
    _encode(value, layout, path, out)
    return bytes(out)


_ENCODERS: dict[type, Callable[[Any, Any, Path, bytearray], None]] = {
    L.Scalar: _encode_scalar,
    L.Pair: _encode_pair,
    L.List: _encode_list,
    L.Set: _encode_set,
    L.Map: _encode_map,
    L.Array: _encode_array,
    L.Struct: _encode_struct,
    L.Enum: _encode_enum,
    L.TaggedEnum: _encode_tagged_enum,
    L.String: _encode_string,
    L.ContractName: _encode_contract_name,
    L.ReceiveName: _encode_receive_name,
    L.ULeb128: _encode_uleb128,
    L.ILeb128: _encode_ileb128,
    L.ByteList: _encode_byte_list,
    L.ByteArray: _encode_byte_array,
}


# ============ Decoding ============


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def take(self, n: int, path: Path) -> bytes:
        if self.remaining < n:
            raise DecodeError(path, f"need {n} bytes, only {self.remaining} left")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def read_int(self, width: int, signed: bool, path: Path) -> int:
        return int.from_bytes(self.take(width, path), "little", signed=signed)


def _decode(cursor: _Cursor, layout: L.TypeLayout, path: Path) -> Any:
    decoder = _DECODERS.get(type(layout))
    if decoder is None:
        raise TypeError(f"Not a type layout: {layout!r}")
    return decoder(cursor, layout, path)


def _decode_scalar(cursor: _Cursor, layout: L.Scalar, path: Path) -> Any:
    tag = layout.tag
    if tag in L.INTEGER_TAGS:
        width, signed = L.INTEGER_TAGS[tag]
        number = cursor.read_int(width, signed, path)
        return str(number) if width == 16 else number
    if tag is L.Tag.UNIT:
        return []
    if tag is L.Tag.BOOL:
        byte = cursor.take(1, path)[0]
        if byte > 1:
            raise DecodeError(path, f"invalid bool byte {byte}")
        return byte == 1
    if tag is L.Tag.AMOUNT:
        return str(cursor.read_int(8, False, path))
    if tag is L.Tag.ACCOUNT_ADDRESS:
        raw = cursor.take(ACCOUNT_ADDRESS_SIZE, path)
        padding = ACCOUNT_ADDRESS_SIZE - _SHORT_ADDRESS_SIZE
        if not any(raw[:padding]):
            return to_checksum_address("0x" + raw[padding:].hex())
        return "0x" + raw.hex()
    if tag is L.Tag.CONTRACT_ADDRESS:
        index = cursor.read_int(8, False, path + ("index",))
        return {"index": index, "subindex": cursor.read_int(8, False, path + ("subindex",))}
    if tag is L.Tag.TIMESTAMP:
        millis = cursor.read_int(8, False, path)
        try:
            return millis_to_rfc3339(millis)
        except OverflowError:
            raise DecodeError(path, f"timestamp {millis} out of range") from None
    return _format_duration(cursor.read_int(8, False, path))


def _format_duration(millis: int) -> str:
    parts = []
    for unit, size in _DURATION_UNITS:
        amount, millis = divmod(millis, size)
        if amount:
            parts.append(f"{amount}{unit}")
    return " ".join(parts) or "0ms"


def _read_count(cursor: _Cursor, count: int, element_min: int, path: Path) -> None:
    """Reject element counts the remaining input cannot possibly hold."""
    if element_min:
        if count * element_min > cursor.remaining:
            raise DecodeError(
                path, f"{count} elements need at least {count * element_min} bytes, "
                f"only {cursor.remaining} left"
            )
    elif count > _MAX_ZERO_SIZED_ELEMENTS:
        raise DecodeError(path, f"implausible element count {count}")


def _decode_pair(cursor: _Cursor, layout: L.Pair, path: Path) -> Any:
    left = _decode(cursor, layout.left, path + (0,))
    return [left, _decode(cursor, layout.right, path + (1,))]


def _decode_sequence(cursor: _Cursor, layout: Any, path: Path) -> Any:
    size = layout.size_length
    count = cursor.read_int(size.width, False, path)
    _read_count(cursor, count, _min_size(layout.item), path)
    return [_decode(cursor, layout.item, path + (index,)) for index in range(count)]


def _decode_map(cursor: _Cursor, layout: L.Map, path: Path) -> Any:
    count = cursor.read_int(layout.size_length.width, False, path)
    _read_count(cursor, count, _min_size(layout.key) + _min_size(layout.value), path)
    entries = []
    for index in range(count):
        key = _decode(cursor, layout.key, path + (index, 0))
        entries.append([key, _decode(cursor, layout.value, path + (index, 1))])
    return entries


def _decode_array(cursor: _Cursor, layout: L.Array, path: Path) -> Any:
    _read_count(cursor, layout.length, _min_size(layout.item), path)
    return [_decode(cursor, layout.item, path + (index,)) for index in range(layout.length)]


def _decode_fields(cursor: _Cursor, fields: L.Fields, path: Path) -> Any:
    if fields.kind is L.FieldsKind.NAMED:
        return {name: _decode(cursor, t, path + (name,)) for name, t in fields.named}
    if fields.kind is L.FieldsKind.UNNAMED:
        return [_decode(cursor, t, path + (index,)) for index, t in enumerate(fields.unnamed)]
    return []


def _decode_struct(cursor: _Cursor, layout: L.Struct, path: Path) -> Any:
    return _decode_fields(cursor, layout.fields, path)


def _decode_enum(cursor: _Cursor, layout: L.Enum, path: Path) -> Any:
    index = cursor.read_int(layout.discriminant_width, False, path)
    if index >= len(layout.variants):
        raise DecodeError(path, f"unknown variant discriminant {index}")
    name, fields = layout.variants[index]
    return {name: _decode_fields(cursor, fields, path + (name,))}


def _decode_tagged_enum(cursor: _Cursor, layout: L.TaggedEnum, path: Path) -> Any:
    discriminant = cursor.take(1, path)[0]
    for tag, name, fields in layout.variants:
        if tag == discriminant:
            return {name: _decode_fields(cursor, fields, path + (name,))}
    raise DecodeError(path, f"unknown variant discriminant {discriminant}")


def _decode_text(cursor: _Cursor, size: L.SizeLength, path: Path) -> str:
    length = cursor.read_int(size.width, False, path)
    raw = cursor.take(length, path)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise DecodeError(path, "invalid UTF-8") from None


def _decode_string(cursor: _Cursor, layout: L.String, path: Path) -> Any:
    return _decode_text(cursor, layout.size_length, path)


def _decode_contract_name(cursor: _Cursor, layout: L.ContractName, path: Path) -> Any:
    name = _decode_text(cursor, layout.size_length, path)
    if not name.startswith("init_"):
        raise DecodeError(path, f"contract name {name!r} lacks the 'init_' prefix")
    return {"contract": name[len("init_"):]}


def _decode_receive_name(cursor: _Cursor, layout: L.ReceiveName, path: Path) -> Any:
    name = _decode_text(cursor, layout.size_length, path)
    contract, dot, func = name.partition(".")
    if not dot:
        raise DecodeError(path, f"receive name {name!r} lacks a '.' separator")
    return {"contract": contract, "func": func}


def _read_leb(cursor: _Cursor, max_bytes: int, path: Path) -> bytes:
    encoded = bytearray()
    while True:
        if len(encoded) == max_bytes:
            raise DecodeError(path, f"LEB128 value longer than {max_bytes} bytes")
        byte = cursor.take(1, path)[0]
        encoded.append(byte)
        if not byte & 0x80:
            return bytes(encoded)


def _decode_uleb128(cursor: _Cursor, layout: L.ULeb128, path: Path) -> Any:
    number = 0
    for shift, byte in enumerate(_read_leb(cursor, layout.max_bytes, path)):
        number |= (byte & 0x7F) << (7 * shift)
    return str(number)


def _decode_ileb128(cursor: _Cursor, layout: L.ILeb128, path: Path) -> Any:
    encoded = _read_leb(cursor, layout.max_bytes, path)
    number = 0
    for shift, byte in enumerate(encoded):
        number |= (byte & 0x7F) << (7 * shift)
    if encoded[-1] & 0x40:
        number -= 1 << (7 * len(encoded))
    return str(number)


def _decode_byte_list(cursor: _Cursor, layout: L.ByteList, path: Path) -> Any:
    length = cursor.read_int(layout.size_length.width, False, path)
    return cursor.take(length, path).hex()


def _decode_byte_array(cursor: _Cursor, layout: L.ByteArray, path: Path) -> Any:
    return cursor.take(layout.length, path).hex()


_DECODERS: dict[type, Callable[[_Cursor, Any, Path], Any]] = {
    L.Scalar: _decode_scalar,
    L.Pair: _decode_pair,
    L.List: _decode_sequence,
    L.Set: _decode_sequence,
    L.Map: _decode_map,
    L.Array: _decode_array,
    L.Struct: _decode_struct,
    L.Enum: _decode_enum,
    L.TaggedEnum: _decode_tagged_enum,
    L.String: _decode_string,
    L.ContractName: _decode_contract_name,
    L.ReceiveName: _decode_receive_name,
    L.ULeb128: _decode_uleb128,
    L.ILeb128: _decode_ileb128,
    L.ByteList: _decode_byte_list,
    L.ByteArray: _decode_byte_array,
}


__all__ = ["decode", "decode_prefix", "encode", "encode_at"]
