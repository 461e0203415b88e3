"""Tests for the typed client facade."""

import math
import struct
from unittest.mock import MagicMock

import pytest

from conftest import ScriptedStream, qna3e_response
from melsec_mc import (
    AddressResolutionError,
    ConnectionError,
    EmptyResponseError,
    MitsubishiClient,
    MitsubishiVersion,
    ProtocolError,
    Type1E,
    Type3E,
    UnsupportedTypeError,
    ValueKind,
)


def _client_with_socket(version, replies):
    """Client whose session talks to a mocked socket returning the given chunks."""
    client = MitsubishiClient(version, "127.0.0.1", 0)
    sock = MagicMock()
    sock.recv.side_effect = ScriptedStream(replies).recv
    client.session._sock = sock
    return client, sock


def test_variant_is_chosen_at_construction():
    assert isinstance(MitsubishiClient("A-1E", "127.0.0.1", 6000).protocol, Type1E)
    assert isinstance(MitsubishiClient(MitsubishiVersion.QNA_3E, "127.0.0.1", 6001).protocol, Type3E)


def test_unknown_version_raises():
    with pytest.raises(ProtocolError):
        MitsubishiClient("4E", "127.0.0.1", 6000)


def test_read_bool_against_stub_responder(stub_plc):
    plc = stub_plc([qna3e_response(b"\x10\x00")])
    with MitsubishiClient(MitsubishiVersion.QNA_3E, "127.0.0.1", plc.port, timeout=2) as client:
        client.connect()
        assert client.read_bool("M100") is True

    request = plc.requests[0]
    assert request[12] == 0x04
    assert request[13] == 0x01
    assert request[15:18] == (100).to_bytes(3, "little")
    assert request[18] == 0x90


def test_write_bool_sends_bit_frame(stub_plc):
    plc = stub_plc([qna3e_response(b"\x00\x00")])
    with MitsubishiClient("Qna-3E", "127.0.0.1", plc.port, timeout=2) as client:
        client.connect()
        client.write_value("M200", True)

    frame = plc.requests[0]
    assert frame[12] == 0x14
    assert frame[13] == 0x01
    assert frame[-1] == 0x10


def test_write_float32_sends_word_frame():
    client, sock = _client_with_socket("Qna-3E", [qna3e_response(b"\x00\x00")])
    client.write_value("D204", -134.2, ValueKind.FLOAT32)

    frame = sock.sendall.call_args[0][0]
    assert frame[13] == 0x00
    assert frame[19:21] == b"\x02\x00"
    assert frame[21:] == struct.pack("<f", -134.2)


def test_write_int_defaults_to_int16():
    client, sock = _client_with_socket("Qna-3E", [qna3e_response(b"\x00\x00")])
    client.write_value("D0", -2)
    frame = sock.sendall.call_args[0][0]
    assert frame[21:] == b"\xFE\xFF"


def test_write_unsupported_type_sends_nothing():
    client, sock = _client_with_socket("Qna-3E", [])
    with pytest.raises(UnsupportedTypeError):
        client.write_value("D0", "12")
    sock.sendall.assert_not_called()


def test_unknown_address_sends_nothing():
    client, sock = _client_with_socket("Qna-3E", [])
    with pytest.raises(AddressResolutionError):
        client.read_int16("Q100")
    sock.sendall.assert_not_called()


@pytest.mark.parametrize(
    "method, kind, value",
    [
        ("read_int16", ValueKind.INT16, -12345),
        ("read_uint16", ValueKind.UINT16, 54321),
        ("read_int32", ValueKind.INT32, -(2 ** 30)),
        ("read_uint32", ValueKind.UINT32, 2 ** 32 - 2),
        ("read_int64", ValueKind.INT64, -(2 ** 60)),
        ("read_uint64", ValueKind.UINT64, 2 ** 64 - 3),
        ("read_float32", ValueKind.FLOAT32, 1.5),
        ("read_float64", ValueKind.FLOAT64, -2.25e100),
    ],
)
def test_typed_reads_3e(method, kind, value):
    payload = struct.pack(kind.fmt, value)
    client, sock = _client_with_socket("Qna-3E", [qna3e_response(payload)])

    assert getattr(client, method)("D100") == value

    frame = sock.sendall.call_args[0][0]
    assert frame[13] == 0x00
    assert int.from_bytes(frame[19:21], "little") == kind.width // 2


def test_typed_read_1e_uses_single_shot():
    client, sock = _client_with_socket("A-1E", [b"\x81\x00" + struct.pack("<i", -7)])
    assert client.read_int32("D10") == -7

    frame = sock.sendall.call_args[0][0]
    assert frame[0] == 0x01
    assert frame[10:12] == b"\x02\x00"
    sock.recv.assert_called_once()


def test_read_bool_1e():
    client, _ = _client_with_socket("A-1E", [b"\x80\x00\x10"])
    assert client.read_bool("X10") is True


def test_read_float64_nan():
    client, _ = _client_with_socket("Qna-3E", [qna3e_response(struct.pack("<d", math.nan))])
    assert math.isnan(client.read_float64("D0"))


def test_1e_single_shot_does_not_reconnect():
    client = MitsubishiClient("A-1E", "127.0.0.1", 1)
    client.session.connect = MagicMock()
    with pytest.raises(ConnectionError):
        client.read_int16("D0")
    client.session.connect.assert_not_called()


def test_empty_1e_response():
    client, _ = _client_with_socket("A-1E", [b"\x81\x00"])
    with pytest.raises(EmptyResponseError):
        client.read_int16("D0")


def test_low_level_read_and_write():
    client, sock = _client_with_socket("Qna-3E", [qna3e_response(b"\x01\x02\x03\x04"), qna3e_response(b"\x00\x00")])
    assert client.read("D0", 4, False) == b"\x01\x02\x03\x04"
    client.write("M0", b"\x10\x10", True)
    frame = sock.sendall.call_args[0][0]
    assert frame[19:21] == b"\x02\x00"
    assert frame[21:] == b"\x10\x10"
