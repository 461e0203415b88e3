"""
MC Protocol Core Module
=======================

PLCとの接続を保持し、送受信を排他制御するセッション
"""

import logging
import socket
import threading
from typing import Callable, Optional

from .errors import ConnectionError

logger = logging.getLogger(__name__)


class MCSession:
    """MCプロトコル通信セッション（1接続・1リクエストずつ送受信）"""

    def __init__(self, host: str, port: int, timeout: float = 2.0):
        """
        Args:
            host: PLCのIPアドレスまたはホスト名
            port: ポート番号
            timeout: 接続タイムアウト秒数
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        # exchange_reliable は保持中に connect() を呼ぶため再入可能ロック
        self._lock = threading.RLock()
        self._sockbufsize = 1024

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """PLC接続（既存の接続は閉じてから再接続）"""
        with self._lock:
            self._close_socket()
            logger.info(f"Connecting to {self.host}:{self.port} (timeout={self.timeout}s)")
            try:
                sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
            except OSError as e:
                raise ConnectionError(f"Failed to connect to {self.host}:{self.port} - {e}") from e
            # タイムアウトは接続時のみ適用
            sock.settimeout(None)
            self._sock = sock

    def close(self) -> None:
        """接続を閉じる（送受信中の場合は完了を待つ）"""
        with self._lock:
            if self._sock is not None:
                logger.info(f"Closing connection to {self.host}:{self.port}")
            self._close_socket()

    def _close_socket(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Socket close failed: {e}")
            self._sock = None

    def _send(self, data: bytes) -> None:
        """データ送信（失敗時は接続を破棄）"""
        if self._sock is None:
            raise ConnectionError("Socket is not connected. Please use connect method")

        logger.debug(f"Send: {data.hex()}")
        try:
            self._sock.sendall(data)
        except OSError as e:
            self._close_socket()
            raise ConnectionError(f"Send failed - {e}") from e

    def _recv(self, size: Optional[int] = None) -> bytes:
        """1回分のデータ受信"""
        if self._sock is None:
            raise ConnectionError("Socket is not connected")

        recv_data = self._sock.recv(size or self._sockbufsize)
        if not recv_data:
            raise ConnectionError("Connection closed by peer")

        logger.debug(f"Recv: {recv_data.hex()}")
        return recv_data

    def _recv_exact(self, size: int) -> bytes:
        """指定バイト数を受信するまで読み込む"""
        data = b""
        while len(data) < size:
            data += self._recv(size - len(data))
        return data

    def exchange_single(self, frame: bytes) -> bytes:
        """
        送信して1回だけ受信する（未接続時は再接続しない）

        Args:
            frame: 送信フレーム

        Returns:
            受信データ
        """
        with self._lock:
            if self._sock is None:
                raise ConnectionError("not connected")
            self._send(frame)
            try:
                return self._recv()
            except ConnectionError:
                self._close_socket()
                raise
            except OSError as e:
                self._close_socket()
                raise ConnectionError(f"Receive failed - {e}") from e

    def exchange_reliable(self, frame: bytes, header_size: int,
                          body_length: Callable[[bytes], int]) -> bytes:
        """
        長さ付き応答を受信する（未接続時・受信失敗時に1回だけ再接続）

        Args:
            frame: 送信フレーム
            header_size: 応答ヘッダーのバイト数
            body_length: ヘッダーから後続データ長を求める関数

        Returns:
            応答フレーム全体（ヘッダー + データ）
        """
        with self._lock:
            if self._sock is None:
                logger.warning("Not connected, reconnecting before request")
                self.connect()

            self._send(frame)
            try:
                return self._read_framed(header_size, body_length)
            except (ConnectionError, OSError) as e:
                logger.warning(f"Receive failed ({e}), reconnecting and retrying once")

            self.connect()
            self._send(frame)
            try:
                return self._read_framed(header_size, body_length)
            except ConnectionError:
                self._close_socket()
                raise
            except OSError as e:
                self._close_socket()
                raise ConnectionError(f"Receive failed after retry - {e}") from e

    def _read_framed(self, header_size: int, body_length: Callable[[bytes], int]) -> bytes:
        header = self._recv_exact(header_size)
        return header + self._recv_exact(body_length(header))

    def __enter__(self):
        """コンテキストマネージャー対応"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """コンテキストマネージャー終了時"""
        self.close()
