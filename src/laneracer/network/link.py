"""
Peer link - Two-player state mirroring over TCP.

Provides:
- Server role: accept exactly one peer with a timeout
- Client role: connect with retries, per-attempt timeout and backoff
- Non-blocking per-tick exchange that never raises

The handshake blocks and must finish before ticking starts. After it the
socket is switched to non-blocking mode so a stalled or vanished peer
never holds up the simulation.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import socket
import time

from laneracer.network.protocol import (
    MAX_RECORD_BYTES,
    LineDecoder,
    NetworkState,
    latest_state,
)


logger = logging.getLogger(__name__)


class SyncError(ConnectionError):
    """Raised when a peer connection cannot be established."""


@dataclass
class NetworkConfig:
    """Peer link configuration."""
    port: int = 9999
    bind_host: str = "0.0.0.0"

    accept_timeout_s: float = 120.0

    connect_attempts: int = 5
    connect_timeout_s: float = 15.0
    connect_delay_s: float = 3.0

    # Per-tick limits
    recv_chunk_bytes: int = 1024
    max_recv_bytes_per_tick: int = 16384
    max_outbound_bytes: int = 16384
    max_record_bytes: int = MAX_RECORD_BYTES


class PeerLink:
    """Connection to the other player.

    Usage:
        link = PeerLink()
        link.serve()              # or link.connect("192.168.1.20")

        # each tick
        remote = link.exchange(NetworkState.from_car(car, score))
        if remote is not None:
            remote.apply_to(remote_car)

        link.disconnect()
    """

    def __init__(
        self,
        config: NetworkConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize an unconnected link.

        Args:
            config: Network configuration
            sleep: Delay function used between connect attempts
        """
        self.config = config or NetworkConfig()
        self._sleep = sleep

        self._listener: Optional[socket.socket] = None
        self._peer: Optional[socket.socket] = None
        self._decoder = LineDecoder(self.config.max_record_bytes)
        self._outbound = bytearray()

        self.is_server: bool = False
        self.peer_address: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self._peer is not None

    @property
    def listen_port(self) -> Optional[int]:
        """Bound port while listening (useful with port 0)."""
        if self._listener is None:
            return None
        return self._listener.getsockname()[1]

    def listen(self, port: int | None = None) -> int:
        """Bind the listening socket without waiting for a peer.

        Args:
            port: Port to bind (config default if None; 0 picks a free port)

        Returns:
            The bound port

        Raises:
            SyncError: If the port cannot be bound
        """
        port = self.config.port if port is None else port
        self._close_listener()
        try:
            listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.config.bind_host, port))
            listener.listen(1)
        except OSError as e:
            raise SyncError(f"Could not listen on port {port}: {e}") from e

        self._listener = listener
        self.is_server = True
        bound = listener.getsockname()[1]
        logger.info("Server listening on port %d (local IP %s)", bound, _local_ip())
        return bound

    def accept(self, timeout_s: float | None = None) -> str:
        """Wait for exactly one peer on the listening socket.

        Args:
            timeout_s: Seconds to wait (config default if None)

        Returns:
            Peer address

        Raises:
            SyncError: If not listening or no peer connects in time
        """
        if self._listener is None:
            raise SyncError("accept() called before listen()")

        timeout_s = self.config.accept_timeout_s if timeout_s is None else timeout_s
        self._listener.settimeout(timeout_s)
        try:
            peer, address = self._listener.accept()
        except socket.timeout as e:
            self._close_listener()
            raise SyncError(f"No player connected within {timeout_s:.0f}s") from e
        except OSError as e:
            self._close_listener()
            raise SyncError(f"Accept failed: {e}") from e

        self._attach(peer, address[0])
        logger.info("Player 2 connected from %s", self.peer_address)
        return self.peer_address

    def serve(self, port: int | None = None, timeout_s: float | None = None) -> str:
        """Listen and accept one peer.

        Returns:
            Peer address

        Raises:
            SyncError: On bind failure or accept timeout
        """
        self.listen(port)
        return self.accept(timeout_s)

    def connect(self, host: str, port: int | None = None) -> None:
        """Connect to a serving peer, retrying on failure.

        Args:
            host: Host name or IP address
            port: Port (config default if None)

        Raises:
            SyncError: If every attempt fails
        """
        cfg = self.config
        port = cfg.port if port is None else port
        self._log_resolution(host)

        last_error: Exception | None = None
        for attempt in range(1, cfg.connect_attempts + 1):
            logger.info("Attempt %d/%d: connecting to %s:%d", attempt, cfg.connect_attempts, host, port)
            try:
                peer = socket.create_connection((host, port), timeout=cfg.connect_timeout_s)
            except socket.timeout as e:
                logger.warning("Attempt %d timed out after %.0fs", attempt, cfg.connect_timeout_s)
                last_error = e
            except OSError as e:
                logger.warning("Attempt %d failed: %s", attempt, type(e).__name__)
                last_error = e
            else:
                self.is_server = False
                self._attach(peer, host)
                logger.info("Connected to %s:%d", host, port)
                return

            if attempt < cfg.connect_attempts:
                self._sleep(cfg.connect_delay_s)

        raise SyncError(
            f"Could not connect to {host}:{port} after {cfg.connect_attempts} attempts"
        ) from last_error

    def _log_resolution(self, host: str) -> None:
        try:
            infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            logger.warning("DNS resolution failed for %s: %s", host, e)
            return
        if infos:
            logger.info("Resolved %s to %s", host, infos[0][4][0])

    def _attach(self, peer: socket.socket, address: str) -> None:
        peer.setblocking(False)
        try:
            peer.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            pass
        self._peer = peer
        self.peer_address = address
        self._decoder.reset()
        self._outbound.clear()

    def send(self, state: NetworkState) -> bool:
        """Queue and flush the local state without blocking.

        If the peer stops reading, the oldest queued bytes are dropped
        rather than growing the queue without bound.

        Returns:
            True if everything queued was written
        """
        if self._peer is None:
            return False

        self._outbound.extend(state.encode())
        if len(self._outbound) > self.config.max_outbound_bytes:
            overflow = len(self._outbound) - self.config.max_outbound_bytes
            cut = self._outbound.find(b"\n", overflow)
            del self._outbound[: (cut + 1) if cut >= 0 else len(self._outbound)]

        try:
            while self._outbound:
                sent = self._peer.send(self._outbound)
                if sent == 0:
                    break
                del self._outbound[:sent]
        except BlockingIOError:
            return False
        except OSError as e:
            logger.warning("Send failed, peer lost: %s", e)
            self._drop_peer()
            return False
        return not self._outbound

    def receive(self) -> Optional[NetworkState]:
        """Read whatever has arrived without blocking.

        Returns:
            Newest complete state, or None if nothing usable arrived
        """
        if self._peer is None:
            return None

        records = []
        received = 0
        while received < self.config.max_recv_bytes_per_tick:
            try:
                chunk = self._peer.recv(self.config.recv_chunk_bytes)
            except BlockingIOError:
                break
            except OSError as e:
                logger.warning("Receive failed, peer lost: %s", e)
                self._drop_peer()
                break
            if not chunk:
                logger.warning("Peer closed the connection")
                self._drop_peer()
                break
            received += len(chunk)
            records.extend(self._decoder.feed(chunk))

        return latest_state(records)

    def exchange(self, state: NetworkState) -> Optional[NetworkState]:
        """Send local state and read the peer's, for one tick.

        Never raises; any failure means no update this tick.
        """
        try:
            self.send(state)
            return self.receive()
        except Exception as e:  # tick must survive any I/O error
            logger.debug("Exchange failed: %s", e)
            return None

    def _drop_peer(self) -> None:
        if self._peer is not None:
            try:
                self._peer.close()
            except OSError:
                pass
        self._peer = None

    def _close_listener(self) -> None:
        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
        self._listener = None

    def disconnect(self) -> None:
        """Close both the peer and listening sockets."""
        if self._peer is not None:
            try:
                self._peer.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        self._drop_peer()
        self._close_listener()
        self._decoder.reset()
        self._outbound.clear()


def _local_ip() -> str:
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return "localhost"
