"""
Pneuma - Ledger interaction layer for stele.

Provides the node JSON-RPC client, the transaction builders, the
submission/finalization driver and the interpretation of finalized effects.

Uses httpx + eth-account for transport and signing.
"""
