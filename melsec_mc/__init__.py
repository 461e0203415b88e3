"""
MELSEC MC Protocol Client
=========================

三菱PLC MCプロトコル（A互換1E / QnA互換3E バイナリ）クライアントライブラリ

主要コンポーネント:
- MitsubishiClient: 型付き読み書きクライアント
- Type1E / Type3E: フレーム世代ごとのフレーム作成・応答解析
- MCSession: 接続保持と送受信の排他制御
- DeviceManager: デバイスアドレス解決
- ValueKind: 読み書き可能なスカラー型

Version: 1.0.0
"""

__version__ = '1.0.0'

from .client import MitsubishiClient
from .constants import DeviceConstants, MitsubishiVersion
from .core import MCSession
from .device_manager import DeviceAddress, DeviceManager, resolve_address
from .errors import (
    AddressResolutionError,
    CodecError,
    ConnectionError,
    EmptyResponseError,
    MCError,
    ProtocolError,
    UnsupportedTypeError,
)
from .protocol_1e import Type1E
from .protocol_3e import Type3E
from .protocol_base import ProtocolVariant
from .values import ValueKind, decode_value, encode_value, kind_for

__all__ = [
    'MitsubishiClient', 'MitsubishiVersion', 'MCSession',
    'DeviceConstants', 'DeviceAddress', 'DeviceManager', 'resolve_address',
    'ProtocolVariant', 'Type1E', 'Type3E',
    'ValueKind', 'encode_value', 'decode_value', 'kind_for',
    'MCError', 'ConnectionError', 'ProtocolError', 'EmptyResponseError',
    'AddressResolutionError', 'CodecError', 'UnsupportedTypeError',
]
