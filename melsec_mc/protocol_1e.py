"""
MC Protocol Type 1E Implementation
==================================

MCプロトコル A互換1Eフレーム（バイナリ）実装
"""

from .constants import (
    A1E_BIT_READ,
    A1E_BIT_WRITE,
    A1E_PC_NUMBER,
    A1E_RESPONSE_HEADER_SIZE,
    A1E_TIMER,
    A1E_WORD_READ,
    A1E_WORD_WRITE,
    MitsubishiVersion,
)
from .core import MCSession
from .device_manager import DeviceAddress
from .protocol_base import ProtocolVariant


class Type1E(ProtocolVariant):
    """MCプロトコル1E通信クラス"""

    version = MitsubishiVersion.A_1E

    def _make_header(self, subcommand: int, address: DeviceAddress, count: int) -> bytes:
        """共通ヘッダー（12バイト）作成"""
        header = bytes([subcommand, A1E_PC_NUMBER])
        header += A1E_TIMER
        # 先頭デバイス番号（下位16ビット） + 上位2バイトは0固定
        header += (address.begin_address & 0xFFFF).to_bytes(2, "little")
        header += b"\x00\x00"
        # デバイスコードは逆順で送信
        header += address.type_code[::-1]
        header += (count & 0xFFFF).to_bytes(2, "little")
        return header

    def build_read_frame(self, address: DeviceAddress, length: int, is_bit: bool) -> bytes:
        self._check_address(address)
        if is_bit:
            return self._make_header(A1E_BIT_READ, address, length)
        return self._make_header(A1E_WORD_READ, address, length // 2)

    def build_write_frame(self, address: DeviceAddress, data: bytes, is_bit: bool) -> bytes:
        self._check_address(address)
        if is_bit:
            # ビット書き込みは1点固定
            return self._make_header(A1E_BIT_WRITE, address, 1) + bytes(data)
        return self._make_header(A1E_WORD_WRITE, address, len(data) // 2) + bytes(data)

    def parse_response(self, response: bytes, length: int, is_bit: bool) -> bytes:
        # 先頭2バイト（サブヘッダー + 終了コード）以降がデータ
        payload = bytes(response[A1E_RESPONSE_HEADER_SIZE:])
        return self._check_payload(payload, self.expected_payload_size(length, is_bit))

    def exchange(self, session: MCSession, frame: bytes) -> bytes:
        return session.exchange_single(frame)
