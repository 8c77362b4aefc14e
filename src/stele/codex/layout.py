"""
Type layouts - recursive descriptions of contract binary encodings.

A layout is one of the frozen dataclasses below.  Each class carries the
type tag it is written with in the schema binary format, so the parser and
the codec can dispatch on the class instead of inspecting values.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Union


class Tag(enum.IntEnum):
    UNIT = 0
    BOOL = 1
    U8 = 2
    U16 = 3
    U32 = 4
    U64 = 5
    I8 = 6
    I16 = 7
    I32 = 8
    I64 = 9
    AMOUNT = 10
    ACCOUNT_ADDRESS = 11
    CONTRACT_ADDRESS = 12
    TIMESTAMP = 13
    DURATION = 14
    PAIR = 15
    LIST = 16
    SET = 17
    MAP = 18
    ARRAY = 19
    STRUCT = 20
    ENUM = 21
    STRING = 22
    U128 = 23
    I128 = 24
    CONTRACT_NAME = 25
    RECEIVE_NAME = 26
    ULEB128 = 27
    ILEB128 = 28
    BYTE_LIST = 29
    BYTE_ARRAY = 30
    TAGGED_ENUM = 31


class SizeLength(enum.IntEnum):
    """Width of the unsigned length prefix in front of variable-size data."""

    U8 = 0
    U16 = 1
    U32 = 2
    U64 = 3

    @property
    def width(self) -> int:
        return 1 << self.value

    @property
    def max_length(self) -> int:
        return (1 << (8 * self.width)) - 1


class FieldsKind(enum.IntEnum):
    NAMED = 0
    UNNAMED = 1
    NONE = 2


# Scalars that map onto a fixed-width integer: tag -> (byte width, signed).
INTEGER_TAGS: dict[Tag, tuple[int, bool]] = {
    Tag.U8: (1, False),
    Tag.U16: (2, False),
    Tag.U32: (4, False),
    Tag.U64: (8, False),
    Tag.I8: (1, True),
    Tag.I16: (2, True),
    Tag.I32: (4, True),
    Tag.I64: (8, True),
    Tag.U128: (16, False),
    Tag.I128: (16, True),
}

SCALAR_TAGS = frozenset(
    set(INTEGER_TAGS)
    | {
        Tag.UNIT,
        Tag.BOOL,
        Tag.AMOUNT,
        Tag.ACCOUNT_ADDRESS,
        Tag.CONTRACT_ADDRESS,
        Tag.TIMESTAMP,
        Tag.DURATION,
    }
)


@dataclass(frozen=True)
class Scalar:
    tag: Tag

    def __post_init__(self) -> None:
        if self.tag not in SCALAR_TAGS:
            raise ValueError(f"{self.tag.name} is not a scalar type")


@dataclass(frozen=True)
class Pair:
    tag: ClassVar[Tag] = Tag.PAIR
    left: "TypeLayout"
    right: "TypeLayout"


@dataclass(frozen=True)
class List:
    tag: ClassVar[Tag] = Tag.LIST
    size_length: SizeLength
    item: "TypeLayout"


@dataclass(frozen=True)
class Set:
    tag: ClassVar[Tag] = Tag.SET
    size_length: SizeLength
    item: "TypeLayout"


@dataclass(frozen=True)
class Map:
    tag: ClassVar[Tag] = Tag.MAP
    size_length: SizeLength
    key: "TypeLayout"
    value: "TypeLayout"


@dataclass(frozen=True)
class Array:
    tag: ClassVar[Tag] = Tag.ARRAY
    length: int
    item: "TypeLayout"


@dataclass(frozen=True)
class Fields:
    kind: FieldsKind
    named: tuple[tuple[str, "TypeLayout"], ...] = ()
    unnamed: tuple["TypeLayout", ...] = ()

    @classmethod
    def of_named(cls, *fields: tuple[str, "TypeLayout"]) -> "Fields":
        return cls(FieldsKind.NAMED, named=tuple(fields))

    @classmethod
    def of_unnamed(cls, *layouts: "TypeLayout") -> "Fields":
        return cls(FieldsKind.UNNAMED, unnamed=tuple(layouts))

    @classmethod
    def none(cls) -> "Fields":
        return cls(FieldsKind.NONE)


@dataclass(frozen=True)
class Struct:
    tag: ClassVar[Tag] = Tag.STRUCT
    fields: Fields


@dataclass(frozen=True)
class Enum:
    """Tagged union; the discriminant is the variant's position."""

    tag: ClassVar[Tag] = Tag.ENUM
    variants: tuple[tuple[str, Fields], ...]

    @property
    def discriminant_width(self) -> int:
        count = len(self.variants)
        if count <= 256:
            return 1
        if count <= 256 * 256:
            return 2
        return 4


@dataclass(frozen=True)
class TaggedEnum:
    """Tagged union with explicit one-byte discriminants."""

    tag: ClassVar[Tag] = Tag.TAGGED_ENUM
    variants: tuple[tuple[int, str, Fields], ...]


@dataclass(frozen=True)
class String:
    tag: ClassVar[Tag] = Tag.STRING
    size_length: SizeLength


@dataclass(frozen=True)
class ContractName:
    tag: ClassVar[Tag] = Tag.CONTRACT_NAME
    size_length: SizeLength


@dataclass(frozen=True)
class ReceiveName:
    tag: ClassVar[Tag] = Tag.RECEIVE_NAME
    size_length: SizeLength


@dataclass(frozen=True)
class ULeb128:
    tag: ClassVar[Tag] = Tag.ULEB128
    max_bytes: int


@dataclass(frozen=True)
class ILeb128:
    tag: ClassVar[Tag] = Tag.ILEB128
    max_bytes: int


@dataclass(frozen=True)
class ByteList:
    tag: ClassVar[Tag] = Tag.BYTE_LIST
    size_length: SizeLength


@dataclass(frozen=True)
class ByteArray:
    tag: ClassVar[Tag] = Tag.BYTE_ARRAY
    length: int


TypeLayout = Union[
    Scalar,
    Pair,
    List,
    Set,
    Map,
    Array,
    Struct,
    Enum,
    TaggedEnum,
    String,
    ContractName,
    ReceiveName,
    ULeb128,
    ILeb128,
    ByteList,
    ByteArray,
]

UNIT = Scalar(Tag.UNIT)
BOOL = Scalar(Tag.BOOL)
U8 = Scalar(Tag.U8)
U16 = Scalar(Tag.U16)
U32 = Scalar(Tag.U32)
U64 = Scalar(Tag.U64)
U128 = Scalar(Tag.U128)
I8 = Scalar(Tag.I8)
I16 = Scalar(Tag.I16)
I32 = Scalar(Tag.I32)
I64 = Scalar(Tag.I64)
I128 = Scalar(Tag.I128)
AMOUNT = Scalar(Tag.AMOUNT)
ACCOUNT_ADDRESS = Scalar(Tag.ACCOUNT_ADDRESS)
CONTRACT_ADDRESS = Scalar(Tag.CONTRACT_ADDRESS)
TIMESTAMP = Scalar(Tag.TIMESTAMP)
DURATION = Scalar(Tag.DURATION)


def option_of(inner: TypeLayout) -> Enum:
    """Optional value: ``None`` (no payload) or ``Some`` (one unnamed field)."""
    return Enum(
        variants=(
            ("None", Fields.none()),
            ("Some", Fields.of_unnamed(inner)),
        )
    )


def describe(layout: TypeLayout) -> str:
    """Short human-readable rendering, used by ``stele inspect``."""
    if isinstance(layout, Scalar):
        return layout.tag.name.lower()
    if isinstance(layout, Pair):
        return f"({describe(layout.left)}, {describe(layout.right)})"
    if isinstance(layout, (List, Set)):
        kind = "list" if isinstance(layout, List) else "set"
        return f"{kind}<{layout.size_length.name.lower()}>[{describe(layout.item)}]"
    if isinstance(layout, Map):
        return (
            f"map<{layout.size_length.name.lower()}>"
            f"[{describe(layout.key)} -> {describe(layout.value)}]"
        )
    if isinstance(layout, Array):
        return f"[{describe(layout.item)}; {layout.length}]"
    if isinstance(layout, Struct):
        return "struct " + _describe_fields(layout.fields)
    if isinstance(layout, Enum):
        inner = " | ".join(
            f"{name}{_describe_variant_fields(fields)}" for name, fields in layout.variants
        )
        return f"enum {{{inner}}}"
    if isinstance(layout, TaggedEnum):
        inner = " | ".join(
            f"{name}={tag}{_describe_variant_fields(fields)}"
            for tag, name, fields in layout.variants
        )
        return f"enum {{{inner}}}"
    if isinstance(layout, (String, ContractName, ReceiveName, ByteList)):
        kind = {
            String: "string",
            ContractName: "contract_name",
            ReceiveName: "receive_name",
            ByteList: "bytes",
        }[type(layout)]
        return f"{kind}<{layout.size_length.name.lower()}>"
    if isinstance(layout, ByteArray):
        return f"bytes[{layout.length}]"
    if isinstance(layout, ULeb128):
        return f"uleb128<{layout.max_bytes}>"
    if isinstance(layout, ILeb128):
        return f"ileb128<{layout.max_bytes}>"
    raise TypeError(f"Not a type layout: {layout!r}")


def _describe_fields(fields: Fields) -> str:
    if fields.kind is FieldsKind.NAMED:
        return "{" + ", ".join(f"{n}: {describe(t)}" for n, t in fields.named) + "}"
    if fields.kind is FieldsKind.UNNAMED:
        return "(" + ", ".join(describe(t) for t in fields.unnamed) + ")"
    return "{}"


def _describe_variant_fields(fields: Fields) -> str:
    if fields.kind is FieldsKind.NONE:
        return ""
    return _describe_fields(fields)
