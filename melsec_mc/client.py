"""
Mitsubishi MC Protocol Client
=============================

型付き読み書きAPIを提供するクライアント
"""

import logging
from typing import Optional, Union

from .constants import MitsubishiVersion
from .core import MCSession
from .protocol_1e import Type1E
from .protocol_3e import Type3E
from .protocol_base import ProtocolVariant
from .values import Scalar, ValueKind, decode_value, encode_value, kind_for

logger = logging.getLogger(__name__)

_VARIANTS = {
    MitsubishiVersion.A_1E: Type1E,
    MitsubishiVersion.QNA_3E: Type3E,
}


class MitsubishiClient:
    """三菱PLC MCプロトコルクライアント"""

    def __init__(self, version: Union[str, MitsubishiVersion], host: str, port: int,
                 timeout: float = 2.0):
        """
        コンストラクタ

        Args:
            version: フレーム世代 ("A-1E" or "Qna-3E")
            host: PLCのIPアドレスまたはホスト名
            port: ポート番号
            timeout: 接続タイムアウト秒数
        """
        self.version = MitsubishiVersion.parse(version)
        self.protocol: ProtocolVariant = _VARIANTS[self.version]()
        self.session = MCSession(host, port, timeout)

    @property
    def connected(self) -> bool:
        return self.session.connected

    def connect(self) -> None:
        self.session.connect()

    def close(self) -> None:
        self.session.close()

    def read(self, address: str, length: int, is_bit: bool) -> bytes:
        """
        低レベル読み取り

        Args:
            address: デバイス指定文字列
            length: ビットは点数、ワードはバイト長
            is_bit: ビット単位かどうか

        Returns:
            応答ペイロード
        """
        device = self.protocol.resolve_address(address)
        frame = self.protocol.build_read_frame(device, length, is_bit)
        response = self.protocol.exchange(self.session, frame)
        return self.protocol.parse_response(response, length, is_bit)

    def write(self, address: str, data: bytes, is_bit: bool) -> None:
        """
        低レベル書き込み

        Args:
            address: デバイス指定文字列
            data: 書き込みデータ
            is_bit: ビット単位かどうか
        """
        device = self.protocol.resolve_address(address)
        frame = self.protocol.build_write_frame(device, data, is_bit)
        self.protocol.exchange(self.session, frame)

    def read_value(self, address: str, kind: Union[str, ValueKind]) -> Scalar:
        """
        指定した型で1値を読み取り

        Args:
            address: デバイス指定文字列
            kind: 値の型

        Returns:
            デコード済み値
        """
        kind = ValueKind.parse(kind)
        if kind is ValueKind.BOOL:
            payload = self.read(address, 1, True)
        else:
            payload = self.read(address, kind.width, False)
        value = decode_value(payload, kind)
        logger.debug(f"Read {address} ({kind.name}) -> {value!r}")
        return value

    def write_value(self, address: str, value: Scalar,
                    kind: Optional[Union[str, ValueKind]] = None) -> None:
        """
        値を書き込み（bool はビット、それ以外はワード単位）

        Args:
            address: デバイス指定文字列
            value: 書き込み値
            kind: 値の型（省略時は bool → BOOL, int → INT16, float → FLOAT64）
        """
        kind = kind_for(value) if kind is None else ValueKind.parse(kind)
        data = encode_value(value, kind)
        logger.debug(f"Write {address} ({kind.name}) <- {value!r}")
        self.write(address, data, kind is ValueKind.BOOL)

    def read_bool(self, address: str) -> bool:
        return self.read_value(address, ValueKind.BOOL)

    def read_int16(self, address: str) -> int:
        return self.read_value(address, ValueKind.INT16)

    def read_uint16(self, address: str) -> int:
        return self.read_value(address, ValueKind.UINT16)

    def read_int32(self, address: str) -> int:
        return self.read_value(address, ValueKind.INT32)

    def read_uint32(self, address: str) -> int:
        return self.read_value(address, ValueKind.UINT32)

    def read_int64(self, address: str) -> int:
        return self.read_value(address, ValueKind.INT64)

    def read_uint64(self, address: str) -> int:
        return self.read_value(address, ValueKind.UINT64)

    def read_float32(self, address: str) -> float:
        return self.read_value(address, ValueKind.FLOAT32)

    def read_float64(self, address: str) -> float:
        return self.read_value(address, ValueKind.FLOAT64)

    def __enter__(self):
        """コンテキストマネージャー対応"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """コンテキストマネージャー終了時"""
        self.close()
