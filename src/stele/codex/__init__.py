"""
Codex - contract schemas and the schema-driven value codec.

Parses versioned module schemas into type layouts and uses those layouts
to translate JSON parameters into contract binary encoding, and contract
return values back into JSON.
"""

from .codec import decode, decode_prefix, encode
from .schema import ContractMethodRef, VersionedModuleSchema, load_schema_bytes, parse_schema

__all__ = [
    "ContractMethodRef",
    "VersionedModuleSchema",
    "decode",
    "decode_prefix",
    "encode",
    "load_schema_bytes",
    "parse_schema",
]
