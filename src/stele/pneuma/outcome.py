"""
Outcome interpreter - renders finalized effects for the terminal.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from ..codex import decode
from ..codex.layout import TypeLayout
from ..errors import DecodeError
from .effects import (
    ContractInitialized,
    ContractUpdateIssued,
    FinalizedEffect,
    Interrupted,
    ModuleDeployed,
    OtherOutcome,
    Rejected,
    Resumed,
    Transferred,
    UpdateEffect,
    Updated,
)


@dataclass(frozen=True)
class Outcome:
    lines: list[str] = field(default_factory=list)
    value: Any = None
    rejected: bool = False

    def render(self) -> str:
        return "\n".join(self.lines)


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _describe_update(effect: UpdateEffect) -> str:
    if isinstance(effect, Updated):
        return (
            f"Updated contract {effect.address} via {effect.receive_name} "
            f"with amount {effect.amount} ({len(effect.events)} events)"
        )
    if isinstance(effect, Transferred):
        return f"Transferred {effect.amount} from {effect.sender} to {effect.to}"
    if isinstance(effect, Interrupted):
        return f"Interrupted contract {effect.address} ({len(effect.events)} events)"
    if isinstance(effect, Resumed):
        state = "succeeded" if effect.success else "failed"
        return f"Resumed contract {effect.address}; call {state}"
    raise TypeError(f"Unknown update effect {effect!r}")


def _return_value(
    raw: Optional[bytes], return_layout: Optional[TypeLayout]
) -> tuple[list[str], Any]:
    if raw is None:
        return ["No return value"], None
    if return_layout is None:
        return [f"Return value (raw): {raw.hex()}"], None
    value = decode(raw, return_layout)
    return ["Return value:", _pretty(value)], value


def interpret(
    effect: FinalizedEffect,
    return_layout: Optional[TypeLayout] = None,
    read_only: bool = False,
) -> Outcome:
    """
    Turn a finalized effect into printable lines.

    Args:
        effect: Effect parsed from the finalized block item
        return_layout: Layout of the method's return value, if declared
        read_only: True for a view; only the return value is rendered

    Returns:
        Outcome holding the lines, the decoded value (views) and whether
        the ledger rejected the transaction

    Raises:
        DecodeError: If a view's return value does not match ``return_layout``
    """
    if isinstance(effect, ModuleDeployed):
        return Outcome(lines=[f"Module reference: {effect.module_ref}"])

    if isinstance(effect, ContractInitialized):
        lines = [f"Contract address: {effect.address}"]
        if effect.contract_name:
            lines.append(f"Contract name: {effect.contract_name}")
        lines.extend(f"Event: {event.hex()}" for event in effect.events)
        return Outcome(lines=lines)

    if isinstance(effect, ContractUpdateIssued):
        if read_only:
            lines, value = _return_value(effect.return_value, return_layout)
            return Outcome(lines=lines, value=value)
        lines = [_describe_update(item) for item in effect.effects]
        if effect.return_value is not None and return_layout is not None:
            # The update is already final; an undecodable value is shown raw.
            try:
                extra, value = _return_value(effect.return_value, return_layout)
            except DecodeError:
                extra, value = _return_value(effect.return_value, None)
            return Outcome(lines=lines + extra, value=value)
        return Outcome(lines=lines or ["Contract updated"])

    if isinstance(effect, Rejected):
        lines = ["Transaction rejected:", _pretty(effect.reason)]
        if effect.transaction_type:
            lines.insert(1, f"Transaction type: {effect.transaction_type}")
        return Outcome(lines=lines, rejected=True)

    if isinstance(effect, OtherOutcome):
        return Outcome(lines=[f"Finalized block item of kind {effect.kind}"])

    raise TypeError(f"Unknown finalized effect {effect!r}")
