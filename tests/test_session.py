"""Tests for the session exchange policies."""

import socket
import threading
from unittest.mock import MagicMock, patch

import pytest

from conftest import qna3e_response
from melsec_mc import ConnectionError, MCSession, Type3E


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _reliable(session: MCSession, frame: bytes) -> bytes:
    return session.exchange_reliable(frame, 9, Type3E.response_body_length)


def test_single_shot_requires_connection():
    session = MCSession("127.0.0.1", _free_port(), timeout=0.5)
    with patch.object(session, "connect") as connect:
        with pytest.raises(ConnectionError):
            session.exchange_single(b"\x00")
    connect.assert_not_called()
    assert session.connected is False


def test_connect_failure_raises_connection_error():
    session = MCSession("127.0.0.1", _free_port(), timeout=0.5)
    with pytest.raises(ConnectionError):
        session.connect()
    assert session.connected is False


def test_single_shot_exchange(stub_plc):
    plc = stub_plc([b"\x81\x00\x34\x12"])
    with MCSession("127.0.0.1", plc.port, timeout=2) as session:
        session.connect()
        assert session.connected
        assert session.exchange_single(b"\x01\x02") == b"\x81\x00\x34\x12"
    assert plc.requests == [b"\x01\x02"]
    assert session.connected is False


def test_connect_clears_socket_timeout(stub_plc):
    plc = stub_plc([b"\x00"])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    session.connect()
    try:
        assert session._sock.gettimeout() is None
    finally:
        session.close()


def test_single_shot_peer_close_drops_connection(stub_plc):
    plc = stub_plc([None])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    session.connect()
    with pytest.raises(ConnectionError):
        session.exchange_single(b"\x01")
    assert session.connected is False


def test_reliable_connects_when_disconnected(stub_plc):
    response = qna3e_response(b"\x10\x00")
    plc = stub_plc([response])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    try:
        assert _reliable(session, b"\xAA") == response
        assert plc.connections == 1
    finally:
        session.close()


def test_reliable_retries_once_after_read_failure(stub_plc):
    response = qna3e_response(b"\x01\x00")
    plc = stub_plc([None, response])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    session.connect()
    try:
        assert _reliable(session, b"\xAA") == response
    finally:
        session.close()
    assert plc.requests == [b"\xAA", b"\xAA"]
    assert plc.connections == 2


def test_reliable_gives_up_after_second_failure(stub_plc):
    plc = stub_plc([None, None, qna3e_response(b"\x00\x00")])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    session.connect()
    with pytest.raises(ConnectionError):
        _reliable(session, b"\xAA")
    assert session.connected is False
    assert len(plc.requests) == 2


def test_reliable_reads_declared_length_across_chunks():
    response = qna3e_response(b"\x01\x02\x03\x04")
    chunks = [response[:5], response[5:9], response[9:11], response[11:]]
    sock = MagicMock()
    sock.recv.side_effect = chunks
    session = MCSession("127.0.0.1", 0)
    session._sock = sock
    assert _reliable(session, b"\xAA") == response
    sock.sendall.assert_called_once_with(b"\xAA")


def test_send_failure_is_not_retried():
    sock = MagicMock()
    sock.sendall.side_effect = OSError("broken pipe")
    session = MCSession("127.0.0.1", 0)
    session._sock = sock
    with patch.object(session, "connect") as connect:
        with pytest.raises(ConnectionError):
            _reliable(session, b"\xAA")
    connect.assert_not_called()
    assert session.connected is False


def _held_elsewhere(lock) -> bool:
    """True when another thread cannot acquire the lock."""
    acquired = []

    def try_acquire():
        ok = lock.acquire(blocking=False)
        if ok:
            lock.release()
        acquired.append(ok)

    t = threading.Thread(target=try_acquire)
    t.start()
    t.join()
    return not acquired[0]


def test_exchange_holds_lock_for_write_and_read():
    session = MCSession("127.0.0.1", 0)
    observed = []

    def recv(size):
        observed.append(_held_elsewhere(session._lock))
        return b"\x81\x00"

    sock = MagicMock()
    sock.sendall.side_effect = lambda data: observed.append(_held_elsewhere(session._lock))
    sock.recv.side_effect = recv
    session._sock = sock
    session.exchange_single(b"\x01")
    assert observed == [True, True]
    assert not _held_elsewhere(session._lock)


def test_close_waits_for_in_flight_exchange():
    session = MCSession("127.0.0.1", 0)
    entered = threading.Event()
    release = threading.Event()

    def recv(size):
        entered.set()
        release.wait(5)
        return b"\x81\x00\x01\x00"

    sock = MagicMock()
    sock.recv.side_effect = recv
    session._sock = sock

    results = []
    exchanger = threading.Thread(target=lambda: results.append(session.exchange_single(b"\x01")))
    exchanger.start()
    assert entered.wait(5)

    closer = threading.Thread(target=session.close)
    closer.start()
    closer.join(0.3)
    assert closer.is_alive()
    sock.close.assert_not_called()

    release.set()
    exchanger.join(5)
    closer.join(5)
    assert results == [b"\x81\x00\x01\x00"]
    sock.close.assert_called_once()
    assert session.connected is False


def test_reliable_reconnect_under_lock(stub_plc):
    response = qna3e_response(b"\x00\x00")
    plc = stub_plc([response])
    session = MCSession("127.0.0.1", plc.port, timeout=2)
    with session:
        with session._lock:
            assert _reliable(session, b"\xAA") == response


def test_concurrent_exchanges_are_serialized():
    session = MCSession("127.0.0.1", 0)
    in_flight = []
    overlap = []
    gate = threading.Lock()

    def sendall(data):
        with gate:
            if in_flight:
                overlap.append(data)
            in_flight.append(data)

    def recv(size):
        with gate:
            in_flight.pop()
        return b"\x81\x00"

    sock = MagicMock()
    sock.sendall.side_effect = sendall
    sock.recv.side_effect = recv
    session._sock = sock

    threads = [threading.Thread(target=session.exchange_single, args=(bytes([i]),)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert overlap == []
    assert sock.sendall.call_count == 8
