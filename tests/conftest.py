"""Shared fixtures: a small module schema and an account key file."""

from __future__ import annotations

import json
import struct
from pathlib import Path

import pytest
from eth_account import Account

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def u32(n: int) -> bytes:
    return struct.pack("<I", n)


def name(text: str) -> bytes:
    raw = text.encode("utf-8")
    return u32(len(raw)) + raw


def named_struct(*fields: tuple[str, bytes]) -> bytes:
    out = bytes([20, 0]) + u32(len(fields))
    for field_name, layout in fields:
        out += name(field_name) + layout
    return out


# Type layouts in schema binary form.
T_UNIT = bytes([0])
T_U32 = bytes([4])
T_U64 = bytes([5])
T_ACCOUNT = bytes([11])
T_BYTES32 = bytes([30]) + u32(32)
T_STRING16 = bytes([22, 1])


def nft_schema() -> bytes:
    """Version 2 schema for a contract ``nft`` with three receive methods."""
    mint = named_struct(("tokenId", T_U32), ("owner", T_BYTES32))
    balance_param = named_struct(("owner", T_ACCOUNT))
    metadata_rv = bytes([16, 1]) + named_struct(("url", T_STRING16))

    receive = (
        name("mint") + bytes([0]) + mint
        + name("balanceOf") + bytes([2]) + balance_param + T_U64
        + name("tokenMetadata") + bytes([1]) + metadata_rv
    )
    contract = bytes([1, 0]) + T_UNIT + u32(3) + receive
    return b"\xff\xff\x02" + u32(1) + name("nft") + contract


@pytest.fixture()
def schema_bytes() -> bytes:
    return nft_schema()


@pytest.fixture()
def schema_file(tmp_path: Path) -> Path:
    path = tmp_path / "nft.schema.bin"
    path.write_bytes(nft_schema())
    return path


@pytest.fixture()
def account_address() -> str:
    return Account.from_key(PRIVATE_KEY).address


@pytest.fixture()
def keys_file(tmp_path: Path, account_address: str) -> Path:
    path = tmp_path / "keys.json"
    path.write_text(
        json.dumps({"address": account_address, "privateKey": PRIVATE_KEY}),
        encoding="utf-8",
    )
    return path
