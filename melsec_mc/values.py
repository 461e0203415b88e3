"""
Value Codec
===========

スカラー値とバイト列（リトルエンディアン）の相互変換
"""

import struct
from enum import Enum
from typing import Optional, Union

from .errors import CodecError, EmptyResponseError, ProtocolError, UnsupportedTypeError

Scalar = Union[bool, int, float]

BIT_ON = 0x10
BIT_OFF = 0x00


class ValueKind(Enum):
    """読み書き可能なスカラー型（値: struct書式, バイト幅）"""

    BOOL = ("?", 1)
    INT16 = ("<h", 2)
    UINT16 = ("<H", 2)
    INT32 = ("<i", 4)
    UINT32 = ("<I", 4)
    INT64 = ("<q", 8)
    UINT64 = ("<Q", 8)
    FLOAT32 = ("<f", 4)
    FLOAT64 = ("<d", 8)

    def __init__(self, fmt: str, width: int):
        self.fmt = fmt
        self.width = width

    @property
    def is_float(self) -> bool:
        return self in (ValueKind.FLOAT32, ValueKind.FLOAT64)

    @classmethod
    def parse(cls, name: Union[str, "ValueKind"]) -> "ValueKind":
        """"int16", "FLOAT32" などの名前から取得"""
        if isinstance(name, cls):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise CodecError(f"Unknown value type: {name!r}") from None


def kind_for(value: object) -> ValueKind:
    """
    書き込み値の型から ValueKind を決定

    bool → BOOL, int → INT16, float → FLOAT64

    Args:
        value: 書き込み値

    Returns:
        ValueKind
    """
    # boolはintのサブクラスなので先に判定
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT16
    if isinstance(value, float):
        return ValueKind.FLOAT64
    raise UnsupportedTypeError(value)


def encode_value(value: Scalar, kind: Optional[ValueKind] = None) -> bytes:
    """
    値をバイト列にエンコード

    Args:
        value: エンコードする値
        kind: 値の型（省略時は kind_for(value)）

    Returns:
        エンコード済みバイト列
    """
    if kind is None:
        kind = kind_for(value)

    if kind is ValueKind.BOOL:
        if not isinstance(value, (bool, int)):
            raise UnsupportedTypeError(value)
        # ビットは True/False または 0/1 のみ
        if value not in (0, 1):
            raise CodecError(f"Value {value!r} is not a bit (expected True/False or 0/1)")
        return bytes([BIT_ON if value else BIT_OFF])

    if kind.is_float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise UnsupportedTypeError(value)
    elif isinstance(value, bool) or not isinstance(value, int):
        raise UnsupportedTypeError(value)

    try:
        return struct.pack(kind.fmt, value)
    except (struct.error, OverflowError) as e:
        raise CodecError(f"Value {value!r} does not fit in {kind.name}: {e}") from e


def decode_value(data: bytes, kind: ValueKind) -> Scalar:
    """
    バイト列を値にデコード

    Args:
        data: デコードするバイト列（先頭 kind.width バイトを使用）
        kind: 値の型

    Returns:
        デコード済み値
    """
    if not data:
        raise EmptyResponseError()
    if len(data) < kind.width:
        raise ProtocolError(
            f"Response too short for {kind.name}: expected {kind.width} bytes, got {len(data)}"
        )

    if kind is ValueKind.BOOL:
        return (data[0] & BIT_ON) != 0

    return struct.unpack(kind.fmt, bytes(data[:kind.width]))[0]
