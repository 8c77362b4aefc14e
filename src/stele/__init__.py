__all__ = [
    # Schema + codec
    "ContractMethodRef",
    "VersionedModuleSchema",
    "decode",
    "decode_prefix",
    "encode",
    "load_schema_bytes",
    "parse_schema",
    # Transactions
    "ContractAddress",
    "TransactionAttempt",
    "TransactionIntent",
    "TransactionState",
    "build_deploy",
    "build_init",
    "build_update",
    "send_and_await",
    # Outcomes
    "Finalized",
    "Outcome",
    "interpret",
    # Keys
    "AccountKeys",
    "load_account",
    # Errors
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
]

from .codex import (
    ContractMethodRef,
    VersionedModuleSchema,
    decode,
    decode_prefix,
    encode,
    load_schema_bytes,
    parse_schema,
)
from .errors import (
    DecodeError,
    EncodeError,
    FileIOError,
    KeyFileError,
    MethodNotFound,
    ParseError,
    RpcError,
    SchemaLookupError,
    SchemaParseError,
    SteleError,
    SubmissionError,
)
from .pneuma.effects import ContractAddress, Finalized
from .pneuma.outcome import Outcome, interpret
from .pneuma.tx import (
    TransactionAttempt,
    TransactionIntent,
    TransactionState,
    build_deploy,
    build_init,
    build_update,
    send_and_await,
)
from .sigil.keys import AccountKeys, load_account
