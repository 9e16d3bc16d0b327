"""Tests for the peer wire format and TCP link."""

import json
import socket
import threading
import time

import pytest

from laneracer.models import Car
from laneracer.network import LineDecoder, NetworkConfig, NetworkState, PeerLink, SyncError
from laneracer.network.protocol import latest_state


STATE = NetworkState(lane=2, distance=120.5, speed=88.0, health=60, score=420)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        time.sleep(0.01)
    return predicate()


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestNetworkState:
    """Test the record codec."""

    def test_wire_keys(self):
        """Test records use the exact key casing peers expect."""
        raw = STATE.encode()

        assert raw.endswith(b"\n")
        assert raw.count(b"\n") == 1
        assert set(json.loads(raw)) == {"Lane", "Distance", "Speed", "Health", "score"}

    def test_decode(self):
        """Test a record decodes with or without its newline."""
        assert NetworkState.decode(STATE.encode()) == STATE
        assert NetworkState.decode(STATE.encode().strip().decode()) == STATE

    @pytest.mark.parametrize("line", [
        b"not json",
        b"[1, 2]",
        b'{"Lane": 1, "Distance": 2.0, "Speed": 3.0, "Health": 4}',
        b'{"Lane": null, "Distance": 2.0, "Speed": 3.0, "Health": 4, "score": 5}',
        b'{"Lane": 1e999, "Distance": 2.0, "Speed": 3.0, "Health": 4, "score": 5}',
        b'{"Lane": 1, "Distance": 1e999, "Speed": 3.0, "Health": 4, "score": 5}',
        b'{"Lane": 1, "Distance": 2.0, "Speed": NaN, "Health": 4, "score": 5}',
    ])
    def test_decode_rejects(self, line):
        """Test malformed records raise ValueError."""
        with pytest.raises(ValueError):
            NetworkState.decode(line)

    def test_car_round_trip(self):
        """Test state copies to and from a car."""
        car = Car(lane=0, distance=10.0, speed=5.0, health=100)

        STATE.apply_to(car)

        assert NetworkState.from_car(car, 420) == STATE

    def test_apply_clamps_to_car_limits(self):
        """Test out-of-range peer values cannot break the car."""
        car = Car()
        state = NetworkState(lane=7, distance=50.0, speed=-20.0, health=250, score=0)

        state.apply_to(car, lane_count=3)

        assert car.lane == 2
        assert car.speed == 0.0
        assert car.health == 100

        NetworkState(lane=-4, distance=50.0, speed=10.0, health=-5, score=0).apply_to(car, lane_count=3)

        assert car.lane == 0
        assert car.health == 0


class TestLineDecoder:
    """Test newline-delimited reassembly."""

    def test_partial_record(self):
        """Test partial records wait for their newline."""
        decoder = LineDecoder()
        raw = STATE.encode()

        assert decoder.feed(raw[:10]) == []
        assert decoder.pending == 10
        assert decoder.feed(raw[10:]) == [raw.strip()]
        assert decoder.pending == 0

    def test_several_records(self):
        """Test one chunk can carry several records."""
        decoder = LineDecoder()

        records = decoder.feed(b"a\nb\n\nc")

        assert records == [b"a", b"b"]
        assert decoder.feed(b"\n") == [b"c"]

    def test_oversized_dropped(self):
        """Test a record past the size limit is dropped whole."""
        decoder = LineDecoder(max_record_bytes=16)

        assert decoder.feed(b"x" * 20) == []
        assert decoder.pending == 0
        assert decoder.feed(b"yyy\nok\n") == [b"ok"]

    def test_latest_state(self):
        """Test the newest valid record wins."""
        older = NetworkState(0, 1.0, 2.0, 100, 1)
        records = [older.encode().strip(), STATE.encode().strip(), b"garbage"]

        assert latest_state(records) == STATE
        assert latest_state([b"garbage"]) is None


class TestPeerLink:
    """Test the TCP link over loopback."""

    def connect_pair(self):
        server = PeerLink(NetworkConfig(bind_host="127.0.0.1"))
        client = PeerLink(NetworkConfig(connect_attempts=1, connect_timeout_s=2.0))
        port = server.listen(0)

        thread = threading.Thread(target=server.accept, kwargs={"timeout_s": 5.0})
        thread.start()
        client.connect("127.0.0.1", port)
        thread.join(timeout=5.0)
        return server, client

    def test_exchange(self):
        """Test both sides see each other's newest state."""
        server, client = self.connect_pair()
        try:
            assert server.is_server and server.is_connected
            assert not client.is_server and client.is_connected

            client.send(NetworkState(0, 1.0, 1.0, 100, 0))
            client.send(STATE)
            assert wait_for(lambda: server.receive() == STATE)

            reply = NetworkState(1, 50.0, 40.0, 90, 7)
            server.send(reply)
            assert wait_for(lambda: client.exchange(STATE)) == reply
        finally:
            client.disconnect()
            server.disconnect()

    def test_nothing_arrived(self):
        """Test receive returns None without blocking when idle."""
        server, client = self.connect_pair()
        try:
            start = time.monotonic()
            assert server.receive() is None
            assert time.monotonic() - start < 1.0
        finally:
            client.disconnect()
            server.disconnect()

    def test_peer_closed(self):
        """Test a closed peer is detected without raising."""
        server, client = self.connect_pair()
        try:
            client.disconnect()

            wait_for(lambda: server.exchange(STATE) is None and not server.is_connected)

            assert not server.is_connected
            assert server.exchange(STATE) is None
        finally:
            server.disconnect()

    def test_unconnected(self):
        """Test an unconnected link sends and receives nothing."""
        link = PeerLink()

        assert not link.is_connected
        assert not link.send(STATE)
        assert link.receive() is None
        assert link.exchange(STATE) is None

    def test_accept_timeout(self):
        """Test the server gives up when nobody connects."""
        server = PeerLink(NetworkConfig(bind_host="127.0.0.1"))
        server.listen(0)

        with pytest.raises(SyncError):
            server.accept(timeout_s=0.1)

        assert server.listen_port is None

    def test_accept_before_listen(self):
        """Test accept needs a listening socket."""
        with pytest.raises(SyncError):
            PeerLink().accept(timeout_s=0.1)

    def test_connect_retries(self):
        """Test the client retries with a delay, then raises."""
        sleeps = []
        client = PeerLink(
            NetworkConfig(connect_attempts=3, connect_timeout_s=1.0, connect_delay_s=3.0),
            sleep=sleeps.append,
        )

        with pytest.raises(SyncError):
            client.connect("127.0.0.1", free_port())

        assert sleeps == [3.0, 3.0]
        assert not client.is_connected

    def test_sync_error_is_connection_error(self):
        """Test handshake failures can be caught as ConnectionError."""
        assert issubclass(SyncError, ConnectionError)
