"""
JSON-RPC client for the ledger node.

Thin layer over httpx: one JSON-RPC 2.0 request per call, no connection
reuse and no retries.  Supports account nonce lookup, block item
submission, status polling until finalization and read-only contract
invocation.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional

import httpx

from ..config import DEFAULT_HTTP_TIMEOUT, DEFAULT_NODE_URL, poll_interval
from ..errors import RpcError, SubmissionError

logger = logging.getLogger(__name__)

# Block item states that precede finalization.
PENDING_STATES = ("received", "committed")


def get_rpc_url() -> str:
    """Get the node URL from environment or default."""
    return os.environ.get("STELE_NODE", DEFAULT_NODE_URL)


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=DEFAULT_HTTP_TIMEOUT)


def _rpc_call(method: str, params: list, rpc_url: Optional[str] = None) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        method: RPC method name (e.g., "getAccountInfo")
        params: RPC parameters
        rpc_url: Node endpoint URL

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: If the node cannot be reached or answers with an error
    """
    url = rpc_url or get_rpc_url()
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": 1,
    }

    logger.debug("rpc %s -> %s", method, url)
    try:
        with _http_client() as client:
            response = client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as exc:
        raise RpcError(f"Cannot reach node at {url}: {exc}") from exc
    except ValueError as exc:
        raise RpcError(f"Node at {url} returned invalid JSON") from exc

    if "error" in data:
        raise RpcError(f"RPC error from {method}: {data['error']}")

    return data.get("result")


def get_account_nonce(address: str, rpc_url: Optional[str] = None) -> int:
    """
    Get the next nonce for an account at the best block.

    Args:
        address: 0x-prefixed account address
        rpc_url: Node endpoint URL

    Returns:
        Next account nonce
    """
    info = _rpc_call("getAccountInfo", [address, "best"], rpc_url=rpc_url)
    if not isinstance(info, dict) or "accountNonce" not in info:
        raise RpcError(f"Account {address} not found on the node")
    return int(info["accountNonce"])


def send_block_item(raw_item: str, rpc_url: Optional[str] = None) -> str:
    """
    Submit a signed block item.

    Args:
        raw_item: Hex encoded signed block item

    Returns:
        Transaction hash (hex)

    Raises:
        SubmissionError: If the node cannot be reached or rejects the item
    """
    try:
        tx_hash = _rpc_call("sendBlockItem", [raw_item], rpc_url=rpc_url)
    except RpcError as exc:
        raise SubmissionError(f"Transaction was not accepted: {exc}") from exc
    if not isinstance(tx_hash, str):
        raise SubmissionError(f"Node returned no transaction hash: {tx_hash!r}")
    return tx_hash


def get_block_item_status(tx_hash: str, rpc_url: Optional[str] = None) -> dict:
    """Get the status of a submitted block item."""
    status = _rpc_call("getBlockItemStatus", [tx_hash], rpc_url=rpc_url)
    if not isinstance(status, dict):
        raise RpcError(f"Transaction {tx_hash} is unknown to the node")
    return status


def wait_until_finalized(
    tx_hash: str,
    rpc_url: Optional[str] = None,
    interval: Optional[float] = None,
) -> tuple[str, dict]:
    """
    Poll until a block item is finalized.

    No timeout is applied: the call returns once the node reports
    finality, or the process is interrupted.

    Args:
        tx_hash: Transaction hash
        rpc_url: Node endpoint URL
        interval: Polling interval in seconds

    Returns:
        Tuple of (block_hash, summary)
    """
    interval = poll_interval() if interval is None else interval
    while True:
        status = get_block_item_status(tx_hash, rpc_url=rpc_url)
        state = status.get("status")
        if state == "finalized":
            block_hash, summary = status.get("blockHash"), status.get("summary")
            if not isinstance(block_hash, str) or not isinstance(summary, dict):
                raise RpcError(f"Malformed finalized status for transaction {tx_hash}: {status!r}")
            return block_hash, summary
        if state not in PENDING_STATES:
            raise RpcError(f"Unexpected status {state!r} for transaction {tx_hash}")
        logger.debug("transaction %s is %s, polling again in %.1fs", tx_hash, state, interval)
        time.sleep(interval)


def invoke_instance(context: dict, rpc_url: Optional[str] = None) -> dict:
    """
    Invoke a contract method at the best block without sending a transaction.

    Args:
        context: Invocation context (contract, method, parameter, ...)
        rpc_url: Node endpoint URL

    Returns:
        Invocation result with ``tag`` of "success" or "failure"
    """
    result = _rpc_call("invokeInstance", [context, "best"], rpc_url=rpc_url)
    if not isinstance(result, dict) or result.get("tag") not in ("success", "failure"):
        raise RpcError(f"Malformed invocation result: {result!r}")
    return result
