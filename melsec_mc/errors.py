"""
MC Protocol Error Handling
=========================

MCプロトコル通信のエラー定義
"""


class MCError(Exception):
    """MCプロトコルクライアント基本エラークラス"""


class ConnectionError(MCError):
    """PLC接続エラー（接続失敗・タイムアウト・未接続での送受信）"""

    def __init__(self, message: str):
        super().__init__(f"PLC connection error: {message}")


class ProtocolError(MCError):
    """プロトコルエラー（未知のプロトコル種別・応答長不足など）"""


class EmptyResponseError(ProtocolError):
    """値を期待した応答のペイロードが空"""

    def __init__(self, address: str = ""):
        self.address = address
        target = f" for '{address}'" if address else ""
        super().__init__(f"Empty response payload{target}")


class AddressResolutionError(MCError, ValueError):
    """デバイスアドレス解決エラー（存在しないデバイス種別）"""

    def __init__(self, version: str, address: str, reason: str = ""):
        self.version = version
        self.address = address
        message = f"Device '{address}' is not supported on {version} frame"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CodecError(MCError, ValueError):
    """値のエンコード／デコードエラー（範囲外の値など）"""


class UnsupportedTypeError(CodecError, TypeError):
    """書き込み値の型がサポート対象外"""

    def __init__(self, value: object):
        self.value_type = type(value).__name__
        super().__init__(
            f"Unsupported value type '{self.value_type}'. "
            "Use bool, int, float or pass an explicit ValueKind"
        )
