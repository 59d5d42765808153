"""
Token Fanout — Bulk ERC20 distribution to disposable addresses.

Sends a fixed token amount from every funded wallet listed in PRIVATE_KEYS
to a batch of freshly generated destination addresses, one transfer at a
time, pausing between submissions so the RPC endpoint is not flooded.
"""

__version__ = "0.1.0"
