"""
RPC layer for the Ultrapoint wallet daemon.

Request construction (request), the outcome union (outcome) and the
httpx-based transport (transport).
"""
