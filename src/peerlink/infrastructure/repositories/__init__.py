"""Repositories encapsulating SQL for ledger, edge, and identity access."""

from peerlink.infrastructure.repositories.directory import IdentityLookup, UserDirectory
from peerlink.infrastructure.repositories.edges import EdgeWriter
from peerlink.infrastructure.repositories.ledger import PendingPairConflict, RequestLedger

__all__ = [
    "EdgeWriter",
    "IdentityLookup",
    "PendingPairConflict",
    "RequestLedger",
    "UserDirectory",
]
