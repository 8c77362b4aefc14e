"""
Finalized block item effects.

The node reports the outcome of a finalized block item as a JSON summary.
``parse_summary`` turns it into one of the effect dataclasses below so the
outcome interpreter never has to look at raw node JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import RpcError
from ..utils import parse_hex


@dataclass(frozen=True, order=True)
class ContractAddress:
    index: int
    subindex: int = 0

    @classmethod
    def from_json(cls, value: Any) -> "ContractAddress":
        return cls(index=int(value["index"]), subindex=int(value["subindex"]))

    def to_json(self) -> dict[str, int]:
        return {"index": self.index, "subindex": self.subindex}

    def __str__(self) -> str:
        return f"<{self.index}, {self.subindex}>"


# ============ Update sub-effects ============


@dataclass(frozen=True)
class Updated:
    address: ContractAddress
    receive_name: str
    amount: int
    events: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class Transferred:
    sender: ContractAddress
    amount: int
    to: str


@dataclass(frozen=True)
class Interrupted:
    address: ContractAddress
    events: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class Resumed:
    address: ContractAddress
    success: bool


UpdateEffect = Union[Updated, Transferred, Interrupted, Resumed]


# ============ Block item effects ============


@dataclass(frozen=True)
class ModuleDeployed:
    module_ref: str


@dataclass(frozen=True)
class ContractInitialized:
    address: ContractAddress
    contract_name: Optional[str] = None
    events: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class ContractUpdateIssued:
    effects: tuple[UpdateEffect, ...] = ()
    return_value: Optional[bytes] = None


@dataclass(frozen=True)
class Rejected:
    reason: Any
    transaction_type: Optional[str] = None


@dataclass(frozen=True)
class OtherOutcome:
    """A finalized block item that is not an account transaction."""

    kind: str


FinalizedEffect = Union[
    ModuleDeployed, ContractInitialized, ContractUpdateIssued, Rejected, OtherOutcome
]


@dataclass(frozen=True)
class Finalized:
    tx_hash: str
    block_hash: str
    effect: FinalizedEffect


# ============ Parsing ============


def _events(values: Any) -> tuple[bytes, ...]:
    return tuple(parse_hex(event) for event in values or ())


def _update_effect(raw: dict) -> UpdateEffect:
    tag = raw.get("tag")
    if tag == "updated":
        return Updated(
            address=ContractAddress.from_json(raw["address"]),
            receive_name=raw["receiveName"],
            amount=int(raw.get("amount", 0)),
            events=_events(raw.get("events")),
        )
    if tag == "transferred":
        return Transferred(
            sender=ContractAddress.from_json(raw["from"]),
            amount=int(raw["amount"]),
            to=raw["to"],
        )
    if tag == "interrupted":
        return Interrupted(
            address=ContractAddress.from_json(raw["address"]),
            events=_events(raw.get("events")),
        )
    if tag == "resumed":
        return Resumed(
            address=ContractAddress.from_json(raw["address"]),
            success=bool(raw["success"]),
        )
    raise RpcError(f"Unrecognised contract update effect {tag!r}")


def _account_effect(raw: dict) -> FinalizedEffect:
    tag = raw.get("tag")
    if tag == "moduleDeployed":
        return ModuleDeployed(module_ref=raw["moduleRef"])
    if tag == "contractInitialized":
        return ContractInitialized(
            address=ContractAddress.from_json(raw["address"]),
            contract_name=raw.get("contractName"),
            events=_events(raw.get("events")),
        )
    if tag == "contractUpdateIssued":
        return_value = raw.get("returnValue")
        return ContractUpdateIssued(
            effects=tuple(_update_effect(item) for item in raw.get("effects", ())),
            return_value=parse_hex(return_value) if return_value is not None else None,
        )
    if tag == "none":
        return Rejected(
            reason=raw.get("rejectReason"),
            transaction_type=raw.get("transactionType"),
        )
    raise RpcError(f"Unrecognised transaction effect {tag!r}")


def parse_summary(summary: Any) -> FinalizedEffect:
    """
    Interpret the summary of a finalized block item.

    Args:
        summary: ``summary`` object from ``getBlockItemStatus``

    Returns:
        The effect of the block item

    Raises:
        RpcError: If the summary does not have the expected shape
    """
    if not isinstance(summary, dict):
        raise RpcError(f"Malformed block item summary: {summary!r}")
    kind = summary.get("type")
    if kind != "accountTransaction":
        return OtherOutcome(kind=str(kind))
    try:
        return _account_effect(summary["effects"])
    except (KeyError, TypeError, ValueError) as exc:
        raise RpcError(f"Malformed transaction effects: {exc}") from exc
