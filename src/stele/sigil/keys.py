"""
Account key files and transaction signing.

A key file is JSON in one of two shapes:

- plain: ``{"privateKey": "0x...", "address": "0x..."}`` (address optional)
- an encrypted Web3 keystore (version 3), unlocked with a password

Signing is ECDSA/secp256k1 via eth-account: the transaction digest is
signed as an EIP-191 ``personal_sign`` message.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import jsonschema
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from ..errors import FileIOError, KeyFileError

KEY_FILE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "oneOf": [
        {
            "required": ["privateKey"],
            "properties": {
                "privateKey": {"type": "string", "pattern": "^(0x)?[0-9a-fA-F]{64}$"},
                "address": {"type": "string", "pattern": "^(0x)?[0-9a-fA-F]{40}$"},
            },
        },
        {
            "required": ["crypto", "version"],
            "properties": {
                "crypto": {"type": "object"},
                "version": {"const": 3},
            },
        },
    ],
}


@dataclass(frozen=True)
class AccountKeys:
    """Signing material and sender address loaded from a key file."""

    account: LocalAccount

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def address_bytes(self) -> bytes:
        return bytes.fromhex(self.account.address[2:])

    def sign_digest(self, digest: bytes) -> bytes:
        """Sign a 32-byte digest (EIP-191); returns r || s || v."""
        signed = self.account.sign_message(encode_defunct(primitive=digest))
        return bytes(signed.signature)


def _validate_key_file(payload: Any) -> None:
    validator_cls = jsonschema.validators.validator_for(KEY_FILE_SCHEMA)
    validator = validator_cls(KEY_FILE_SCHEMA)
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.path))
    if errors:
        details = "; ".join(err.message for err in errors)
        raise KeyFileError(f"Key file has an unexpected shape: {details}")


def load_account(path: Path, password: Optional[str] = None) -> AccountKeys:
    """
    Load signing keys from a key file.

    Args:
        path: Path to the JSON key file
        password: Password for encrypted keystores

    Returns:
        AccountKeys for signing

    Raises:
        FileIOError: If the file cannot be read
        KeyFileError: If the file is malformed, locked or inconsistent
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileIOError(f"Could not read the keys file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise KeyFileError(f"Keys file {path} is not UTF-8 text: {exc}") from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise KeyFileError(f"Keys file {path} is not valid JSON: {exc}") from exc

    _validate_key_file(payload)

    if "crypto" in payload:
        if password is None:
            raise KeyFileError("Keys file is an encrypted keystore; a password is required")
        try:
            private_key = Account.decrypt(payload, password)
        except ValueError as exc:
            raise KeyFileError(f"Could not unlock keystore: {exc}") from exc
        account = Account.from_key(private_key)
    else:
        account = Account.from_key(payload["privateKey"])

    declared = payload.get("address")
    if declared:
        normalized = declared.lower()
        if not normalized.startswith("0x"):
            normalized = "0x" + normalized
        if normalized != account.address.lower():
            raise KeyFileError(
                f"Keys file address {declared} does not match its private key "
                f"({account.address})"
            )

    return AccountKeys(account=account)
