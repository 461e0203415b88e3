"""
Protocol Variant Base
=====================

フレーム世代ごとの実装（1E / 3E）の抽象基底クラス
"""

import math
from abc import ABC, abstractmethod

from .constants import MitsubishiVersion
from .core import MCSession
from .device_manager import DeviceAddress, DeviceManager
from .errors import EmptyResponseError, ProtocolError


class ProtocolVariant(ABC):
    """MCプロトコル フレーム世代の抽象基底クラス"""

    version: MitsubishiVersion

    def resolve_address(self, address: str) -> DeviceAddress:
        """
        この世代のデバイステーブルでアドレスを解決

        Args:
            address: デバイス指定文字列

        Returns:
            DeviceAddress
        """
        return DeviceManager.resolve(address, self.version)

    @abstractmethod
    def build_read_frame(self, address: DeviceAddress, length: int, is_bit: bool) -> bytes:
        """
        読み取り要求フレームを作成

        Args:
            address: 解決済みデバイスアドレス
            length: ビット読み取り時は点数、ワード読み取り時はバイト長
            is_bit: ビット単位かどうか

        Returns:
            送信フレーム
        """

    @abstractmethod
    def build_write_frame(self, address: DeviceAddress, data: bytes, is_bit: bool) -> bytes:
        """
        書き込み要求フレームを作成

        Args:
            address: 解決済みデバイスアドレス
            data: 書き込みデータ
            is_bit: ビット単位かどうか

        Returns:
            送信フレーム
        """

    @abstractmethod
    def parse_response(self, response: bytes, length: int, is_bit: bool) -> bytes:
        """
        読み取り応答からペイロードを取り出す

        Args:
            response: 受信した応答フレーム全体
            length: 要求した長さ（build_read_frame と同じ意味）
            is_bit: ビット単位かどうか

        Returns:
            ペイロード
        """

    @abstractmethod
    def exchange(self, session: MCSession, frame: bytes) -> bytes:
        """この世代の送受信ポリシーでフレームを送受信"""

    def _check_address(self, address: DeviceAddress) -> None:
        if address.version != self.version:
            raise ProtocolError(
                f"Device address resolved for {address.version.value} "
                f"cannot be used with {self.version.value} frame"
            )

    @staticmethod
    def expected_payload_size(length: int, is_bit: bool) -> int:
        """応答ペイロードのバイト数（ビットは1バイトに2点）"""
        if is_bit:
            return math.ceil(length / 2)
        return length

    @staticmethod
    def _check_payload(payload: bytes, expected: int) -> bytes:
        if not payload:
            raise EmptyResponseError()
        if len(payload) < expected:
            raise ProtocolError(
                f"Response payload too short: expected {expected} bytes, got {len(payload)}"
            )
        return payload
