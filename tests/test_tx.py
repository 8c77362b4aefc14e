"""Unit tests for transaction building, signing and the submission driver."""

from __future__ import annotations

import struct
from pathlib import Path
from unittest.mock import patch

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from stele.errors import EncodeError, FileIOError, ParseError, SubmissionError
from stele.pneuma.effects import ContractAddress, ModuleDeployed
from stele.pneuma.module import WasmModule
from stele.pneuma.tx import (
    MAX_NAME_SIZE,
    MAX_PARAMETER_SIZE,
    TransactionAttempt,
    TransactionState,
    build_deploy,
    build_init,
    build_update,
    send_and_await,
)
from stele.sigil.keys import AccountKeys

from conftest import PRIVATE_KEY

MODULE_REF = bytes(range(32))
TX_HASH = "ab" * 32
DEPLOYED_SUMMARY = {
    "type": "accountTransaction",
    "effects": {"tag": "moduleDeployed", "moduleRef": "cd" * 32},
}


@pytest.fixture()
def keys() -> AccountKeys:
    return AccountKeys(account=Account.from_key(PRIVATE_KEY))


def _common(keys: AccountKeys) -> dict:
    return {"sender": keys.address_bytes, "nonce": 5, "expiry": 1_700_000_000, "energy": 10_000}


class TestWasmModule:
    """Versioned module files."""

    def test_round_trip(self) -> None:
        data = struct.pack(">II", 1, 4) + b"\x00asm"
        module = WasmModule.from_bytes(data)
        assert module.version == 1
        assert module.source == b"\x00asm"
        assert module.to_bytes() == data

    def test_bare_wasm_rejected(self) -> None:
        with pytest.raises(ParseError, match="without a version header"):
            WasmModule.from_bytes(b"\x00asm\x01\x00\x00\x00")

    def test_length_mismatch(self) -> None:
        with pytest.raises(ParseError, match="declares 10 source bytes but contains 2"):
            WasmModule.from_bytes(struct.pack(">II", 0, 10) + b"ab")

    def test_unsupported_version(self) -> None:
        with pytest.raises(ParseError, match="Unsupported module version 7"):
            WasmModule.from_bytes(struct.pack(">II", 7, 0))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileIOError, match="Could not read contract module"):
            WasmModule.from_path(tmp_path / "missing.wasm.v1")


class TestBuilders:
    """Builders are pure and serialize deterministically."""

    def test_header_layout(self, keys: AccountKeys) -> None:
        intent = build_deploy(WasmModule(1, b"code"), **_common(keys))
        payload = intent.payload.to_bytes()
        signing = intent.signing_bytes()
        header = signing[: len(signing) - len(payload)]
        assert len(header) == 60
        assert header[:12] == bytes(12)
        assert header[12:32] == keys.address_bytes
        nonce, energy, size, expiry = struct.unpack(">QQIQ", header[32:])
        assert (nonce, energy, size, expiry) == (5, 10_000, len(payload), 1_700_000_000)

    def test_deploy_payload(self, keys: AccountKeys) -> None:
        intent = build_deploy(WasmModule(1, b"code"), **_common(keys))
        assert intent.payload.to_bytes() == b"\x00" + struct.pack(">II", 1, 4) + b"code"

    def test_init_payload(self, keys: AccountKeys) -> None:
        intent = build_init(MODULE_REF, "nft", b"\x01\x02", amount=9, **_common(keys))
        assert intent.payload.init_name == "init_nft"
        assert intent.payload.to_bytes() == (
            b"\x01"
            + struct.pack(">Q", 9)
            + MODULE_REF
            + b"\x00\x08init_nft"
            + b"\x00\x02\x01\x02"
        )

    def test_amount_defaults_to_zero(self, keys: AccountKeys) -> None:
        intent = build_update(ContractAddress(3, 0), "nft.mint", **_common(keys))
        assert intent.payload.amount == 0
        assert intent.payload.message == b""

    def test_update_payload(self, keys: AccountKeys) -> None:
        intent = build_update(ContractAddress(3, 1), "nft.mint", b"\xff", **_common(keys))
        assert intent.payload.to_bytes() == (
            b"\x02"
            + struct.pack(">QQQ", 0, 3, 1)
            + b"\x00\x08nft.mint"
            + b"\x00\x01\xff"
        )

    def test_parameter_size_limit(self, keys: AccountKeys) -> None:
        with pytest.raises(EncodeError, match="the limit is 65535"):
            build_update(
                ContractAddress(3, 0),
                "nft.mint",
                bytes(MAX_PARAMETER_SIZE + 1),
                **_common(keys),
            )

    def test_non_ascii_contract_name(self, keys: AccountKeys) -> None:
        with pytest.raises(EncodeError, match="is not ASCII"):
            build_init(MODULE_REF, "nft\u00fc", **_common(keys))

    def test_receive_name_length_limit(self, keys: AccountKeys) -> None:
        with pytest.raises(EncodeError, match="the limit is 65535"):
            build_update(ContractAddress(3, 0), "n." + "x" * MAX_NAME_SIZE, **_common(keys))

    def test_intents_are_frozen(self, keys: AccountKeys) -> None:
        intent = build_deploy(WasmModule(1, b"code"), **_common(keys))
        with pytest.raises(AttributeError):
            intent.header = None  # type: ignore[misc]


class TestSigning:
    """The signature commits to header and payload."""

    def test_signature_recovers_sender(self, keys: AccountKeys) -> None:
        intent = build_init(MODULE_REF, "nft", **_common(keys))
        attempt = TransactionAttempt(intent)
        signed = attempt.sign(keys)
        recovered = Account.recover_message(
            encode_defunct(primitive=intent.digest()), signature=signed.signature
        )
        assert recovered == keys.address
        assert attempt.state is TransactionState.SIGNED

    def test_block_item_layout(self, keys: AccountKeys) -> None:
        intent = build_init(MODULE_REF, "nft", **_common(keys))
        signed = TransactionAttempt(intent).sign(keys)
        item = signed.to_bytes()
        assert item[0] == 0
        assert struct.unpack(">H", item[1:3])[0] == 65
        assert item[3:68] == signed.signature
        assert item[68:] == intent.signing_bytes()
        assert len(signed.hash) == 64


class TestTransactionAttempt:
    """The driver walks BUILT -> SIGNED -> SUBMITTED -> FINALIZED in order."""

    def test_submit_before_sign(self, keys: AccountKeys) -> None:
        attempt = TransactionAttempt(build_deploy(WasmModule(1, b""), **_common(keys)))
        with pytest.raises(RuntimeError, match="expected signed"):
            attempt.submit()

    def test_await_before_submit(self, keys: AccountKeys) -> None:
        attempt = TransactionAttempt(build_deploy(WasmModule(1, b""), **_common(keys)))
        attempt.sign(keys)
        with pytest.raises(RuntimeError, match="expected submitted"):
            attempt.await_finalization()

    def test_cannot_sign_twice(self, keys: AccountKeys) -> None:
        attempt = TransactionAttempt(build_deploy(WasmModule(1, b""), **_common(keys)))
        attempt.sign(keys)
        with pytest.raises(RuntimeError):
            attempt.sign(keys)

    def test_full_lifecycle(self, keys: AccountKeys) -> None:
        intent = build_deploy(WasmModule(1, b"code"), **_common(keys))
        seen: list[str] = []
        with patch("stele.pneuma.tx.send_block_item", return_value=TX_HASH) as send, patch(
            "stele.pneuma.tx.wait_until_finalized", return_value=("block1", DEPLOYED_SUMMARY)
        ):
            finalized = send_and_await(
                intent, keys, rpc_url="http://node", on_submitted=seen.append
            )

        assert seen == [TX_HASH]
        raw_item = send.call_args.args[0]
        assert bytes.fromhex(raw_item)[68:] == intent.signing_bytes()
        assert finalized.tx_hash == TX_HASH
        assert finalized.block_hash == "block1"
        assert finalized.effect == ModuleDeployed(module_ref="cd" * 32)

    def test_submission_failure_is_not_retried(self, keys: AccountKeys) -> None:
        attempt = TransactionAttempt(build_deploy(WasmModule(1, b""), **_common(keys)))
        attempt.sign(keys)
        with patch(
            "stele.pneuma.tx.send_block_item",
            side_effect=SubmissionError("Transaction was not accepted: nonce too low"),
        ) as send:
            with pytest.raises(SubmissionError, match="nonce too low"):
                attempt.submit()
        assert send.call_count == 1
        assert attempt.state is TransactionState.SIGNED
        assert attempt.tx_hash is None
