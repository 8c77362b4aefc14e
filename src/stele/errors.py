"""
Error taxonomy for the stele CLI.

Every error carries an ``exit_code`` so that command implementations can
terminate with a stage-specific status.  A rejection reported by the ledger
is *not* an error and never appears here.
"""

from __future__ import annotations

from typing import Sequence, Union

PathElement = Union[str, int]


def format_path(path: Sequence[PathElement]) -> str:
    """Render a codec location such as ``items[2].owner``."""
    if not path:
        return "<root>"
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = part
    return rendered


class SteleError(RuntimeError):
    exit_code: int = 1


class FileIOError(SteleError):
    exit_code = 2


class ParseError(SteleError):
    exit_code = 3


class SchemaParseError(ParseError):
    pass


class SchemaLookupError(SteleError):
    exit_code = 4


class MethodNotFound(SchemaLookupError):
    pass


class _CodecError(SteleError):
    def __init__(self, path: Sequence[PathElement], reason: str) -> None:
        self.path = tuple(path)
        self.reason = reason
        super().__init__(f"{format_path(self.path)}: {reason}")


class EncodeError(_CodecError):
    exit_code = 5


class DecodeError(_CodecError):
    exit_code = 6


class KeyFileError(SteleError):
    exit_code = 7


class RpcError(SteleError):
    exit_code = 8


class SubmissionError(RpcError):
    exit_code = 9


__all__ = [
    "DecodeError",
    "EncodeError",
    "FileIOError",
    "KeyFileError",
    "MethodNotFound",
    "ParseError",
    "RpcError",
    "SchemaLookupError",
    "SchemaParseError",
    "SteleError",
    "SubmissionError",
    "format_path",
]
