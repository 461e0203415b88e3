"""
Device Manager
==============

デバイスアドレス解決ユーティリティ
"""

import logging
import re
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict

from .constants import DeviceConstants, DeviceSpec, MitsubishiVersion
from .errors import AddressResolutionError

logger = logging.getLogger(__name__)

_ADDRESS_PATTERN = re.compile(r"^([A-Z]{1,2}?)([0-9A-F]+)$")

_BASE_DIGITS = {
    8: "01234567",
    10: "0123456789",
    16: "0123456789ABCDEF",
    100: "0123456789",
}


class DeviceAddress(BaseModel):
    """解決済みデバイスアドレス"""

    model_config = ConfigDict(frozen=True)

    version: MitsubishiVersion
    type_code: bytes
    is_bit: bool
    base: int
    begin_address: int
    type_char: str


def parse_numeral(numeral: str, base: int) -> int:
    """
    デバイス番号を基数に従って整数に変換

    基数100は10進2桁を1桁として扱う（例: "0105" → 1*100 + 5）

    Args:
        numeral: デバイス番号文字列
        base: 基数 (8, 10, 16, 100)

    Returns:
        デバイス番号の整数値
    """
    if base not in _BASE_DIGITS:
        raise ValueError(f"Unsupported numeral base: {base}")
    if not numeral or any(ch not in _BASE_DIGITS[base] for ch in numeral):
        raise ValueError(f"'{numeral}' is not a valid base-{base} number")

    if base == 100:
        if len(numeral) % 2:
            numeral = "0" + numeral
        value = 0
        for i in range(0, len(numeral), 2):
            value = value * 100 + int(numeral[i:i + 2])
        return value

    return int(numeral, base)


class DeviceManager:
    """デバイス管理クラス"""

    @staticmethod
    def split_address(address: str, version: MitsubishiVersion) -> Tuple[str, DeviceSpec, str]:
        """
        デバイス指定文字列をプレフィックスと番号に分割

        2文字プレフィックス（SN, ZR, TN 等）を1文字より優先して照合する

        Args:
            address: "M100", "SN10", "ZR1A" 等（大文字に正規化済み）
            version: プロトコル世代

        Returns:
            (プレフィックス, デバイス定義, 番号文字列)
        """
        table = DeviceConstants.get_device_table(version)

        for size in (2, 1):
            prefix = address[:size]
            if len(address) > size and prefix in table:
                return prefix, table[prefix], address[size:]

        raise AddressResolutionError(version.value, address, "unknown device prefix")

    @staticmethod
    def resolve(address: str, version: Union[str, MitsubishiVersion]) -> DeviceAddress:
        """
        デバイス指定文字列をデバイスアドレスに解決

        Args:
            address: デバイス指定文字列（例: "D200", "X10", "SN10"）
            version: プロトコル世代

        Returns:
            DeviceAddress
        """
        version = MitsubishiVersion.parse(version)
        if not isinstance(address, str):
            raise AddressResolutionError(version.value, repr(address), "address must be a string")

        normalized = address.strip().upper()
        if not _ADDRESS_PATTERN.match(normalized):
            raise AddressResolutionError(version.value, address, "expected device letters followed by a number")

        prefix, spec, numeral = DeviceManager.split_address(normalized, version)
        try:
            begin_address = parse_numeral(numeral, spec.base)
        except ValueError as e:
            raise AddressResolutionError(version.value, address, str(e)) from e

        logger.debug(
            f"デバイス解析成功: '{address}' -> type_char='{prefix}', "
            f"code={spec.type_code.hex()}, base={spec.base}, address={begin_address}"
        )

        return DeviceAddress(
            version=version,
            type_code=spec.type_code,
            is_bit=spec.is_bit,
            base=spec.base,
            begin_address=begin_address,
            type_char=prefix,
        )

    @staticmethod
    def is_bit_device(address: str, version: Union[str, MitsubishiVersion]) -> bool:
        """
        ビットデバイスかどうか判定

        Args:
            address: デバイス指定文字列
            version: プロトコル世代

        Returns:
            ビットデバイスの場合True
        """
        return DeviceManager.resolve(address, version).is_bit


def resolve_address(address: str, version: Union[str, MitsubishiVersion]) -> DeviceAddress:
    """DeviceManager.resolve のショートカット"""
    return DeviceManager.resolve(address, version)
