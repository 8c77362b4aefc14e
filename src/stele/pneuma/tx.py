"""
Transaction Builder and Submission/Finalization Driver.

Builders are pure: they assemble a ``TransactionIntent`` from already
encoded inputs.  ``TransactionAttempt`` then walks one intent through
sign -> submit -> await finalization.  Submission happens at most once;
a failed submission is not retried.
"""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ..errors import EncodeError
from ..sigil.keys import AccountKeys
from ..utils import sha256, sha256_hex
from .effects import ContractAddress, Finalized, parse_summary
from .module import WasmModule
from .rpc import send_block_item, wait_until_finalized

logger = logging.getLogger(__name__)

ACCOUNT_TRANSACTION_TAG = 0
MAX_PARAMETER_SIZE = 65_535
MAX_NAME_SIZE = 65_535
SENDER_SIZE = 32


class PayloadKind(enum.IntEnum):
    DEPLOY_MODULE = 0
    INIT_CONTRACT = 1
    UPDATE_CONTRACT = 2


def check_name(name: str) -> str:
    if not name.isascii():
        raise EncodeError((), f"name {name!r} is not ASCII")
    if len(name) > MAX_NAME_SIZE:
        raise EncodeError((), f"name is {len(name)} bytes, the limit is {MAX_NAME_SIZE}")
    return name


def _name_bytes(name: str) -> bytes:
    raw = check_name(name).encode("ascii")
    return struct.pack(">H", len(raw)) + raw


def check_parameter_size(parameter: bytes) -> bytes:
    if len(parameter) > MAX_PARAMETER_SIZE:
        raise EncodeError(
            (), f"encoded parameter is {len(parameter)} bytes, the limit is {MAX_PARAMETER_SIZE}"
        )
    return parameter


def _parameter_bytes(parameter: bytes) -> bytes:
    return struct.pack(">H", len(parameter)) + parameter


@dataclass(frozen=True)
class DeployModule:
    module: WasmModule
    kind = PayloadKind.DEPLOY_MODULE

    def to_bytes(self) -> bytes:
        return bytes([self.kind]) + self.module.to_bytes()


@dataclass(frozen=True)
class InitContract:
    amount: int
    module_ref: bytes
    init_name: str
    parameter: bytes = b""
    kind = PayloadKind.INIT_CONTRACT

    def to_bytes(self) -> bytes:
        return (
            bytes([self.kind])
            + struct.pack(">Q", self.amount)
            + self.module_ref
            + _name_bytes(self.init_name)
            + _parameter_bytes(self.parameter)
        )


@dataclass(frozen=True)
class UpdateContract:
    amount: int
    address: ContractAddress
    receive_name: str
    message: bytes = b""
    kind = PayloadKind.UPDATE_CONTRACT

    def to_bytes(self) -> bytes:
        return (
            bytes([self.kind])
            + struct.pack(">QQQ", self.amount, self.address.index, self.address.subindex)
            + _name_bytes(self.receive_name)
            + _parameter_bytes(self.message)
        )


Payload = Union[DeployModule, InitContract, UpdateContract]


@dataclass(frozen=True)
class TransactionHeader:
    sender: bytes
    nonce: int
    energy: int
    expiry: int

    def to_bytes(self, payload_size: int) -> bytes:
        sender = self.sender.rjust(SENDER_SIZE, b"\x00")
        return sender + struct.pack(">QQIQ", self.nonce, self.energy, payload_size, self.expiry)


@dataclass(frozen=True)
class TransactionIntent:
    header: TransactionHeader
    payload: Payload

    def signing_bytes(self) -> bytes:
        payload = self.payload.to_bytes()
        return self.header.to_bytes(len(payload)) + payload

    def digest(self) -> bytes:
        return sha256(self.signing_bytes())


@dataclass(frozen=True)
class SignedTransaction:
    intent: TransactionIntent
    signature: bytes

    def to_bytes(self) -> bytes:
        return (
            bytes([ACCOUNT_TRANSACTION_TAG])
            + struct.pack(">H", len(self.signature))
            + self.signature
            + self.intent.signing_bytes()
        )

    @property
    def hash(self) -> str:
        return sha256_hex(self.to_bytes())


# ============ Builders ============


def _header(sender: bytes, nonce: int, expiry: int, energy: int) -> TransactionHeader:
    return TransactionHeader(sender=sender, nonce=nonce, energy=energy, expiry=expiry)


def build_deploy(
    module: WasmModule,
    *,
    sender: bytes,
    nonce: int,
    expiry: int,
    energy: int,
) -> TransactionIntent:
    return TransactionIntent(_header(sender, nonce, expiry, energy), DeployModule(module))


def build_init(
    module_ref: bytes,
    contract: str,
    parameter: bytes = b"",
    *,
    sender: bytes,
    nonce: int,
    expiry: int,
    energy: int,
    amount: int = 0,
) -> TransactionIntent:
    payload = InitContract(
        amount=amount,
        module_ref=module_ref,
        init_name=check_name(f"init_{contract}"),
        parameter=check_parameter_size(parameter),
    )
    return TransactionIntent(_header(sender, nonce, expiry, energy), payload)


def build_update(
    address: ContractAddress,
    receive_name: str,
    message: bytes = b"",
    *,
    sender: bytes,
    nonce: int,
    expiry: int,
    energy: int,
    amount: int = 0,
) -> TransactionIntent:
    payload = UpdateContract(
        amount=amount,
        address=address,
        receive_name=check_name(receive_name),
        message=check_parameter_size(message),
    )
    return TransactionIntent(_header(sender, nonce, expiry, energy), payload)


# ============ Driver ============


class TransactionState(enum.Enum):
    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    FINALIZED = "finalized"


class TransactionAttempt:
    """One intent on its way from built to finalized."""

    def __init__(self, intent: TransactionIntent, rpc_url: Optional[str] = None) -> None:
        self.intent = intent
        self.rpc_url = rpc_url
        self.state = TransactionState.BUILT
        self.signed: Optional[SignedTransaction] = None
        self.tx_hash: Optional[str] = None
        self.finalized: Optional[Finalized] = None

    def _require(self, state: TransactionState) -> None:
        if self.state is not state:
            raise RuntimeError(
                f"Transaction is {self.state.value}, expected {state.value}"
            )

    def sign(self, keys: AccountKeys) -> SignedTransaction:
        self._require(TransactionState.BUILT)
        signature = keys.sign_digest(self.intent.digest())
        self.signed = SignedTransaction(intent=self.intent, signature=signature)
        self.state = TransactionState.SIGNED
        logger.debug("signed transaction %s", self.signed.hash)
        return self.signed

    def submit(self) -> str:
        self._require(TransactionState.SIGNED)
        assert self.signed is not None
        self.tx_hash = send_block_item(self.signed.to_bytes().hex(), rpc_url=self.rpc_url)
        self.state = TransactionState.SUBMITTED
        logger.debug("submitted transaction %s", self.tx_hash)
        return self.tx_hash

    def await_finalization(self, interval: Optional[float] = None) -> Finalized:
        self._require(TransactionState.SUBMITTED)
        assert self.tx_hash is not None
        block_hash, summary = wait_until_finalized(
            self.tx_hash, rpc_url=self.rpc_url, interval=interval
        )
        self.finalized = Finalized(
            tx_hash=self.tx_hash,
            block_hash=block_hash,
            effect=parse_summary(summary),
        )
        self.state = TransactionState.FINALIZED
        return self.finalized


def send_and_await(
    intent: TransactionIntent,
    keys: AccountKeys,
    rpc_url: Optional[str] = None,
    on_submitted: Optional[Callable[[str], None]] = None,
    interval: Optional[float] = None,
) -> Finalized:
    """Sign, submit and wait for finalization of a single transaction."""
    attempt = TransactionAttempt(intent, rpc_url=rpc_url)
    attempt.sign(keys)
    tx_hash = attempt.submit()
    if on_submitted is not None:
        on_submitted(tx_hash)
    return attempt.await_finalization(interval=interval)
