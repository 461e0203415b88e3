"""
MC Protocol Type 3E Implementation
==================================

MCプロトコルQnA互換3Eフレーム（バイナリ）実装
"""

from .constants import (
    QNA3E_LENGTH_OFFSET,
    QNA3E_READ,
    QNA3E_RESPONSE_HEADER_SIZE,
    QNA3E_SUB_BIT,
    QNA3E_SUB_WORD,
    QNA3E_SUBHEADER,
    QNA3E_TIMER,
    QNA3E_WRITE,
    MitsubishiVersion,
)
from .core import MCSession
from .device_manager import DeviceAddress
from .errors import ProtocolError
from .protocol_base import ProtocolVariant


class Type3E(ProtocolVariant):
    """MCプロトコル3E通信クラス"""

    version = MitsubishiVersion.QNA_3E

    def _make_senddata(self, request_data: bytes) -> bytes:
        """送信データ作成（サブヘッダー + データ長 + 要求データ）"""
        mc_data = QNA3E_SUBHEADER
        # データ長: 監視タイマー以降のバイト数
        mc_data += (len(QNA3E_TIMER) + len(request_data)).to_bytes(2, "little")
        mc_data += QNA3E_TIMER
        mc_data += request_data
        return mc_data

    def _make_requestdata(self, command: int, is_bit: bool,
                          address: DeviceAddress, count: int) -> bytes:
        """コマンド + デバイス指定 + 点数"""
        request_data = bytes([command, QNA3E_SUB_BIT if is_bit else QNA3E_SUB_WORD, 0x00])
        request_data += (address.begin_address & 0xFFFFFF).to_bytes(3, "little")
        request_data += address.type_code[:1]
        request_data += (count & 0xFFFF).to_bytes(2, "little")
        return request_data

    def build_read_frame(self, address: DeviceAddress, length: int, is_bit: bool) -> bytes:
        self._check_address(address)
        count = length if is_bit else length // 2
        return self._make_senddata(self._make_requestdata(QNA3E_READ, is_bit, address, count))

    def build_write_frame(self, address: DeviceAddress, data: bytes, is_bit: bool) -> bytes:
        self._check_address(address)
        # ビット書き込みの点数はデータのバイト数
        count = len(data) if is_bit else len(data) // 2
        request_data = self._make_requestdata(QNA3E_WRITE, is_bit, address, count)
        return self._make_senddata(request_data + bytes(data))

    @staticmethod
    def response_body_length(header: bytes) -> int:
        """応答ヘッダー（9バイト）から後続データ長を取得"""
        if len(header) < QNA3E_RESPONSE_HEADER_SIZE:
            raise ProtocolError(
                f"Response header too short: expected {QNA3E_RESPONSE_HEADER_SIZE} bytes, got {len(header)}"
            )
        return int.from_bytes(header[QNA3E_LENGTH_OFFSET - 2:QNA3E_LENGTH_OFFSET], "big")

    def parse_response(self, response: bytes, length: int, is_bit: bool) -> bytes:
        body_length = self.response_body_length(response)
        content = bytes(response[QNA3E_RESPONSE_HEADER_SIZE:QNA3E_RESPONSE_HEADER_SIZE + body_length])
        if len(content) < body_length:
            raise ProtocolError(
                f"Truncated response: header declares {body_length} bytes, got {len(content)}"
            )
        expected = self.expected_payload_size(length, is_bit)
        return self._check_payload(content, expected)[:expected]

    def exchange(self, session: MCSession, frame: bytes) -> bytes:
        return session.exchange_reliable(
            frame, QNA3E_RESPONSE_HEADER_SIZE, self.response_body_length
        )
