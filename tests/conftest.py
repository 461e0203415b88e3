"""Shared fixtures: a scripted TCP responder standing in for the PLC."""

import socket
import threading
from typing import List, Optional

import pytest


class StubPLC:
    """Accepts connections and answers each received request with the next scripted reply.

    A reply of ``None`` closes the current connection instead of answering.
    """

    def __init__(self, replies: List[Optional[bytes]]):
        self.replies = list(replies)
        self.requests: List[bytes] = []
        self.connections = 0
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen(4)
        self._server.settimeout(5)
        self.port = self._server.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        while self.replies:
            try:
                conn, _ = self._server.accept()
            except OSError:
                return
            self.connections += 1
            with conn:
                conn.settimeout(5)
                while self.replies:
                    try:
                        request = conn.recv(4096)
                    except OSError:
                        break
                    if not request:
                        break
                    self.requests.append(request)
                    reply = self.replies.pop(0)
                    if reply is None:
                        break
                    conn.sendall(reply)

    def close(self) -> None:
        self._server.close()
        self._thread.join(timeout=5)


@pytest.fixture
def stub_plc():
    servers = []

    def factory(replies: List[Optional[bytes]]) -> StubPLC:
        server = StubPLC(replies)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.close()


def qna3e_response(content: bytes) -> bytes:
    """9-byte 3E response header (content length big-endian in bytes 7-8) + content."""
    return b"\xD0\x00\x00\xFF\xFF\x03\x00" + len(content).to_bytes(2, "big") + content


class ScriptedStream:
    """Byte stream for a mocked socket: ``recv(size)`` honours ``size`` across scripted replies."""

    def __init__(self, replies: List[bytes]):
        self.replies = list(replies)
        self.buffer = b""

    def recv(self, size: int) -> bytes:
        if not self.buffer and self.replies:
            self.buffer = self.replies.pop(0)
        data, self.buffer = self.buffer[:size], self.buffer[size:]
        return data
