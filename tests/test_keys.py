"""Tests for account key file loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from eth_account import Account

from stele.errors import FileIOError, KeyFileError
from stele.sigil.keys import load_account

from conftest import PRIVATE_KEY


class TestLoadAccount:
    """Plain and encrypted key files."""

    def test_plain_key_file(self, keys_file: Path, account_address: str) -> None:
        keys = load_account(keys_file)
        assert keys.address == account_address
        assert len(keys.address_bytes) == 20

    def test_address_is_optional(self, tmp_path: Path, account_address: str) -> None:
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"privateKey": PRIVATE_KEY[2:]}), encoding="utf-8")
        assert load_account(path).address == account_address

    def test_mismatched_address(self, tmp_path: Path) -> None:
        path = tmp_path / "keys.json"
        path.write_text(
            json.dumps({"privateKey": PRIVATE_KEY, "address": "0x" + "00" * 20}),
            encoding="utf-8",
        )
        with pytest.raises(KeyFileError, match="does not match"):
            load_account(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileIOError, match="Could not read the keys file"):
            load_account(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "keys.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(KeyFileError, match="not valid JSON"):
            load_account(path)

    def test_unexpected_shape(self, tmp_path: Path) -> None:
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"secret": "x"}), encoding="utf-8")
        with pytest.raises(KeyFileError, match="unexpected shape"):
            load_account(path)

    def test_encrypted_keystore(self, tmp_path: Path, account_address: str) -> None:
        keystore = Account.encrypt(PRIVATE_KEY, "hunter2", kdf="pbkdf2", iterations=2)
        path = tmp_path / "keystore.json"
        path.write_text(json.dumps(keystore), encoding="utf-8")

        assert load_account(path, password="hunter2").address == account_address
        with pytest.raises(KeyFileError, match="password is required"):
            load_account(path)
        with pytest.raises(KeyFileError, match="Could not unlock keystore"):
            load_account(path, password="wrong")
