"""
MC Protocol Constants
====================

MCプロトコルで使用する定数定義
"""

from enum import Enum
from typing import Dict, NamedTuple, Union


class MitsubishiVersion(str, Enum):
    """MCプロトコルのフレーム世代"""

    A_1E = "A-1E"
    QNA_3E = "Qna-3E"

    @classmethod
    def parse(cls, value: Union[str, "MitsubishiVersion"]) -> "MitsubishiVersion":
        """
        文字列またはEnumからプロトコル世代を取得

        Args:
            value: "A-1E", "Qna-3E", "1E", "3E" など（大文字小文字は区別しない）

        Returns:
            MitsubishiVersion
        """
        from .errors import ProtocolError

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("_", "-")
            aliases = {
                "A-1E": cls.A_1E,
                "1E": cls.A_1E,
                "QNA-3E": cls.QNA_3E,
                "3E": cls.QNA_3E,
            }
            if key in aliases:
                return aliases[key]
        raise ProtocolError(f"Unknown protocol version: {value!r}")


class DeviceSpec(NamedTuple):
    """デバイス種別ごとの定義（デバイスコード, ビットデバイスか, 基数）"""

    type_code: bytes
    is_bit: bool
    base: int


class DeviceConstants:
    """MCプロトコルデバイス定数クラス"""

    # 3Eフレーム デバイスコード（1バイト）
    SM_DEVICE = 0x91
    SD_DEVICE = 0xA9
    X_DEVICE = 0x9C
    Y_DEVICE = 0x9D
    M_DEVICE = 0x90
    L_DEVICE = 0x92
    F_DEVICE = 0x93
    V_DEVICE = 0x94
    S_DEVICE = 0x98
    B_DEVICE = 0xA0
    D_DEVICE = 0xA8
    W_DEVICE = 0xB4
    TS_DEVICE = 0xC1
    TC_DEVICE = 0xC0
    TN_DEVICE = 0xC2
    SS_DEVICE = 0xC7
    SC_DEVICE = 0xC6
    SN_DEVICE = 0xC8
    CS_DEVICE = 0xC4
    CC_DEVICE = 0xC3
    CN_DEVICE = 0xC5
    Z_DEVICE = 0xCC
    R_DEVICE = 0xAF
    ZR_DEVICE = 0xB0

    # 1Eフレーム デバイスコード（2バイト、送信時は逆順）
    A1E_X_DEVICE = b"\x58\x20"
    A1E_Y_DEVICE = b"\x59\x20"
    A1E_M_DEVICE = b"\x4D\x20"
    A1E_S_DEVICE = b"\x53\x20"
    A1E_D_DEVICE = b"\x44\x20"
    A1E_R_DEVICE = b"\x52\x20"

    # 3Eフレーム デバイステーブル（プレフィックス → 定義）
    QNA_3E_DEVICES: Dict[str, DeviceSpec] = {
        "M": DeviceSpec(bytes([M_DEVICE]), True, 10),
        "X": DeviceSpec(bytes([X_DEVICE]), True, 16),
        "Y": DeviceSpec(bytes([Y_DEVICE]), True, 16),
        "D": DeviceSpec(bytes([D_DEVICE]), False, 10),
        "W": DeviceSpec(bytes([W_DEVICE]), False, 16),
        "L": DeviceSpec(bytes([L_DEVICE]), True, 10),
        "F": DeviceSpec(bytes([F_DEVICE]), True, 10),
        "V": DeviceSpec(bytes([V_DEVICE]), True, 10),
        "B": DeviceSpec(bytes([B_DEVICE]), True, 16),
        "R": DeviceSpec(bytes([R_DEVICE]), False, 10),
        "S": DeviceSpec(bytes([S_DEVICE]), True, 10),
        "SC": DeviceSpec(bytes([SC_DEVICE]), True, 10),
        "SS": DeviceSpec(bytes([SS_DEVICE]), True, 10),
        "SN": DeviceSpec(bytes([SN_DEVICE]), False, 100),
        "SM": DeviceSpec(bytes([SM_DEVICE]), True, 10),
        "SD": DeviceSpec(bytes([SD_DEVICE]), False, 10),
        "Z": DeviceSpec(bytes([Z_DEVICE]), False, 10),
        "ZR": DeviceSpec(bytes([ZR_DEVICE]), False, 16),
        "TN": DeviceSpec(bytes([TN_DEVICE]), False, 10),
        "TS": DeviceSpec(bytes([TS_DEVICE]), True, 10),
        "TC": DeviceSpec(bytes([TC_DEVICE]), True, 10),
        "CN": DeviceSpec(bytes([CN_DEVICE]), False, 10),
        "CS": DeviceSpec(bytes([CS_DEVICE]), True, 10),
        "CC": DeviceSpec(bytes([CC_DEVICE]), True, 10),
    }

    # 1Eフレーム デバイステーブル
    A_1E_DEVICES: Dict[str, DeviceSpec] = {
        "X": DeviceSpec(A1E_X_DEVICE, True, 8),
        "Y": DeviceSpec(A1E_Y_DEVICE, True, 16),
        "M": DeviceSpec(A1E_M_DEVICE, True, 10),
        "S": DeviceSpec(A1E_S_DEVICE, True, 10),
        "D": DeviceSpec(A1E_D_DEVICE, False, 10),
        "R": DeviceSpec(A1E_R_DEVICE, False, 10),
    }

    @staticmethod
    def get_device_table(version: MitsubishiVersion) -> Dict[str, DeviceSpec]:
        """
        プロトコル世代ごとのデバイステーブル取得

        Args:
            version: プロトコル世代

        Returns:
            プレフィックス → DeviceSpec の辞書
        """
        if version == MitsubishiVersion.A_1E:
            return DeviceConstants.A_1E_DEVICES
        return DeviceConstants.QNA_3E_DEVICES


# ──────────────────── 1Eフレーム ────────────────────
A1E_BIT_READ = 0x00
A1E_WORD_READ = 0x01
A1E_BIT_WRITE = 0x02
A1E_WORD_WRITE = 0x03
A1E_PC_NUMBER = 0xFF
A1E_TIMER = b"\x0A\x00"
A1E_HEADER_SIZE = 12
A1E_RESPONSE_HEADER_SIZE = 2

# ──────────────────── 3Eフレーム ────────────────────
# サブヘッダー(50 00), ネットワーク番号, PC番号, 要求先ユニットI/O番号(03FF), 局番
QNA3E_SUBHEADER = b"\x50\x00\x00\xFF\xFF\x03\x00"
# 監視タイマー(000A) + コマンド下位バイト(01)
QNA3E_TIMER = b"\x0A\x00\x01"
QNA3E_READ = 0x04
QNA3E_WRITE = 0x14
QNA3E_SUB_BIT = 0x01
QNA3E_SUB_WORD = 0x00
QNA3E_HEADER_SIZE = 21
QNA3E_LENGTH_OFFSET = 9
QNA3E_RESPONSE_HEADER_SIZE = 9
