"""
Network module - Peer-to-peer state mirroring.

This module contains:
- NetworkState: Per-tick state record and its wire codec
- LineDecoder: Buffered newline-delimited record reader
- PeerLink: Server/client handshake and per-tick exchange
"""

from laneracer.network.protocol import NetworkState, LineDecoder
from laneracer.network.link import PeerLink, NetworkConfig, SyncError

__all__ = [
    "NetworkState",
    "LineDecoder",
    "PeerLink",
    "NetworkConfig",
    "SyncError",
]
