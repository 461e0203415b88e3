"""
PLC Operations
==============

PLC通信の共通ロジック
REST APIとランチャーで共有される処理
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from melsec_mc import DeviceConstants, DeviceManager, MitsubishiClient, MitsubishiVersion, ValueKind
from melsec_mc.errors import MCError

logger = logging.getLogger(__name__)

Scalar = Union[bool, int, float]


class DeviceReadResult(BaseModel):
    """デバイス読み取り結果"""
    device: str
    type: Optional[str] = None
    values: List[Any]
    success: bool
    error: Optional[str] = None


class PLCConnectionConfig:
    """PLC接続設定クラス"""

    def __init__(self, ip: str = None, port: int = None, timeout_sec: float = None,
                 protocol: str = None):
        self.ip = ip or os.getenv("PLC_IP", "127.0.0.1")
        self.port = port or int(os.getenv("PLC_PORT", "5511"))
        self.timeout_sec = timeout_sec or float(os.getenv("PLC_TIMEOUT_SEC", "3.0"))
        self.protocol = MitsubishiVersion.parse(protocol or os.getenv("PLC_PROTOCOL", "Qna-3E"))

    def __str__(self):
        return f"PLC({self.ip}:{self.port}, protocol={self.protocol.value}, timeout={self.timeout_sec}s)"


class PLCOperations:
    """PLC操作の共通ロジック"""

    def __init__(self, config: PLCConnectionConfig = None):
        self.config = config or PLCConnectionConfig()

    def _make_client(self, config: PLCConnectionConfig) -> MitsubishiClient:
        return MitsubishiClient(config.protocol, config.ip, config.port, timeout=config.timeout_sec)

    def parse_device_spec(self, device_spec: str,
                          config: PLCConnectionConfig = None) -> Tuple[str, ValueKind]:
        """
        デバイス指定文字列を解析

        Args:
            device_spec: "D100", "D200:int32", "M10" 等
            config: PLC接続設定（省略時はデフォルト設定を使用）

        Returns:
            tuple: (address, kind)  型省略時はビットデバイスならBOOL、それ以外はINT16
        """
        if ":" in device_spec:
            address, kind_str = device_spec.split(":", 1)
            return address.strip().upper(), ValueKind.parse(kind_str)

        address = device_spec.strip().upper()
        return address, self.default_kind(address, config)

    def default_kind(self, address: str, config: PLCConnectionConfig = None) -> ValueKind:
        """ビットデバイスならBOOL、ワードデバイスならINT16"""
        config = config or self.config
        if DeviceManager.is_bit_device(address, config.protocol):
            return ValueKind.BOOL
        return ValueKind.INT16

    def read_device(self, address: str, kind: Union[str, ValueKind],
                    config: PLCConnectionConfig = None) -> Scalar:
        """
        単一デバイスを読み取り

        Args:
            address: デバイス指定文字列
            kind: 値の型
            config: PLC接続設定（省略時はデフォルト設定を使用）

        Returns:
            読み取り値

        Raises:
            MCError: PLC通信・アドレス解決エラー
        """
        config = config or self.config
        with self._make_client(config) as plc:
            plc.connect()
            return plc.read_value(address, kind)

    def write_device(self, address: str, value: Scalar,
                     kind: Optional[Union[str, ValueKind]] = None,
                     config: PLCConnectionConfig = None) -> None:
        """
        単一デバイスに書き込み

        Args:
            address: デバイス指定文字列
            value: 書き込み値
            kind: 値の型（省略時は値の型から決定）
            config: PLC接続設定（省略時はデフォルト設定を使用）
        """
        config = config or self.config
        with self._make_client(config) as plc:
            plc.connect()
            plc.write_value(address, value, kind)
        logger.info(f"Write completed: {address} <- {value!r}")

    def batch_read_devices(self, device_specs: List[str],
                           config: PLCConnectionConfig = None) -> List[DeviceReadResult]:
        """
        複数デバイスを1接続で順に読み取り

        Args:
            device_specs: デバイス指定リスト ["D100", "M200", "D300:float32"]
            config: PLC接続設定（省略時はデフォルト設定を使用）

        Returns:
            List[DeviceReadResult]: 読み取り結果リスト
        """
        config = config or self.config
        if not device_specs:
            return []

        plc = self._make_client(config)
        try:
            plc.connect()
        except MCError as e:
            # PLC接続エラー時は全デバイスエラー扱い
            logger.error(f"PLC connection failed: {e}")
            return [
                DeviceReadResult(device=spec, values=[], success=False,
                                 error=f"PLC connection error: {e}")
                for spec in device_specs
            ]

        results = []
        try:
            for device_spec in device_specs:
                results.append(self._read_one(plc, device_spec, config))
        finally:
            plc.close()

        logger.info(f"Batch read completed: {len(device_specs)} devices")
        return results

    def _read_one(self, plc: MitsubishiClient, device_spec: str,
                  config: PLCConnectionConfig) -> DeviceReadResult:
        try:
            address, kind = self.parse_device_spec(device_spec, config)
            value = plc.read_value(address, kind)
            return DeviceReadResult(device=device_spec, type=kind.name.lower(),
                                    values=[value], success=True)
        except MCError as e:
            logger.error(f"Device read failed: {device_spec} -> {e}")
            return DeviceReadResult(device=device_spec, values=[], success=False, error=str(e))

    def get_supported_devices(self, config: PLCConnectionConfig = None) -> List[str]:
        """
        サポートされているデバイス種別を取得

        Returns:
            List[str]: サポートデバイスリスト
        """
        config = config or self.config
        return sorted(DeviceConstants.get_device_table(config.protocol))

    def test_connection(self, config: PLCConnectionConfig = None) -> Dict[str, Any]:
        """
        PLC接続テスト

        Args:
            config: PLC接続設定（省略時はデフォルト設定を使用）

        Returns:
            Dict[str, Any]: 接続テスト結果
        """
        config = config or self.config
        result = {
            "config": str(config),
            "connected": False,
            "error": None,
            "response_time_ms": None,
        }

        start_time = time.time()
        try:
            with self._make_client(config) as plc:
                plc.connect()
                # 簡単な読み取りテスト（D0を1つ読み取り）
                result["test_read_value"] = plc.read_int16("D0")
            result["connected"] = True
            result["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
        except MCError as e:
            result["error"] = str(e)

        return result
