# ------------------------------------------------------------
# gateway.py
# FastAPI Gateway ─ MC protocol typed device read / write
# ------------------------------------------------------------
import logging
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException, Path, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from melsec_mc import ValueKind, kind_for
from melsec_mc.errors import AddressResolutionError, CodecError, ConnectionError, MCError
from plc_operations import DeviceReadResult, PLCConnectionConfig, PLCOperations
from version import __version__

logger = logging.getLogger(__name__)

plc_ops = PLCOperations()

# ──────────────────── FastAPI ────────────────────
app = FastAPI(
    title="MELSEC MC Gateway API",
    description="三菱PLCとMCプロトコル（1E / 3E）で通信するためのGateway API。",
    version=__version__,
)

# ──────────────────── CORS設定 ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PLCTarget(BaseModel):
    plc_host: Optional[str] = None  # コンピューター名またはIPアドレス
    port:     Optional[int] = None
    protocol: Optional[str] = None  # "A-1E" or "Qna-3E"


class ReadRequest(PLCTarget):
    address: str
    type:    str = "int16"


class WriteRequest(PLCTarget):
    address: str
    value:   Union[bool, int, float]
    type:    Optional[str] = None


class BatchReadRequest(PLCTarget):
    devices: List[str]  # 例: ["D100", "D200:float32", "M10"]


class ReadResponse(BaseModel):
    """PLCデバイス読み取りレスポンス"""
    address: str
    type:    str
    value:   Union[bool, int, float]


class WriteResponse(BaseModel):
    address: str
    type:    str
    success: bool


class BatchReadResponse(BaseModel):
    results: List[DeviceReadResult]
    total_devices: int
    successful_devices: int


def _make_config(target: PLCTarget) -> PLCConnectionConfig:
    try:
        return PLCConnectionConfig(
            ip=target.plc_host or plc_ops.config.ip,
            port=target.port or plc_ops.config.port,
            timeout_sec=plc_ops.config.timeout_sec,
            protocol=target.protocol or plc_ops.config.protocol.value,
        )
    except MCError as ex:
        raise HTTPException(status_code=400, detail=str(ex))


def _http_error(ex: MCError) -> HTTPException:
    """MCプロトコル例外をHTTPエラーに変換"""
    if isinstance(ex, (AddressResolutionError, CodecError)):
        return HTTPException(status_code=400, detail=str(ex))
    if isinstance(ex, ConnectionError):
        return HTTPException(status_code=502, detail=str(ex))
    return HTTPException(status_code=500, detail=str(ex))


@app.post("/api/read", tags=["Device Read"],
          response_model=ReadResponse,
          operation_id="read_device",
          summary="単一デバイス読み取り",
          description="指定したPLCデバイスから型を指定して値を読み取ります")
def api_read(req: ReadRequest):
    config = _make_config(req)
    try:
        kind = ValueKind.parse(req.type)
        value = plc_ops.read_device(req.address, kind, config)
    except MCError as ex:
        logger.error(f"Read failed: {req.address} ({req.type}) -> {ex}")
        raise _http_error(ex)
    return ReadResponse(address=req.address.upper(), type=kind.name.lower(), value=value)


@app.get("/api/read/{address}", tags=["Device Read"],
         response_model=ReadResponse,
         operation_id="read_device_get",
         summary="単一デバイス読み取り (GET)",
         description="URLパスパラメータを使用してPLCデバイスから値を読み取ります")
def api_read_get(
    address: str = Path(..., description="デバイス指定（例: D100, M10, SN5）"),
    type: str = Query("int16", description="値の型（bool, int16, uint16, int32, uint32, int64, uint64, float32, float64）"),
    plc_host: Optional[str] = Query(None, description="PLCのコンピューター名またはIPアドレス（省略時は環境変数使用）"),
    port: Optional[int] = Query(None, description="PLCのポート番号（省略時は環境変数使用）"),
    protocol: Optional[str] = Query(None, description="フレーム世代 A-1E / Qna-3E（省略時は環境変数使用）"),
):
    return api_read(ReadRequest(address=address, type=type,
                                plc_host=plc_host, port=port, protocol=protocol))


@app.post("/api/write", tags=["Device Write"],
          response_model=WriteResponse,
          operation_id="write_device",
          summary="単一デバイス書き込み",
          description="指定したPLCデバイスに値を書き込みます。型省略時は bool → ビット、int → int16、float → float64")
def api_write(req: WriteRequest):
    config = _make_config(req)
    try:
        kind = ValueKind.parse(req.type) if req.type else kind_for(req.value)
        plc_ops.write_device(req.address, req.value, kind, config)
    except MCError as ex:
        logger.error(f"Write failed: {req.address} <- {req.value!r} -> {ex}")
        raise _http_error(ex)
    return WriteResponse(address=req.address.upper(), type=kind.name.lower(), success=True)


@app.post("/api/batch_read", response_model=BatchReadResponse,
          tags=["Batch Operations"],
          operation_id="batch_read_devices",
          summary="複数デバイス一括読み取り",
          description="複数のPLCデバイスを1接続で順に読み取ります")
def api_batch_read(req: BatchReadRequest):
    if not req.devices:
        return BatchReadResponse(results=[], total_devices=0, successful_devices=0)

    config = _make_config(req)
    results = plc_ops.batch_read_devices(req.devices, config)
    successful_count = sum(1 for r in results if r.success)

    return BatchReadResponse(
        results=results,
        total_devices=len(req.devices),
        successful_devices=successful_count,
    )


@app.get("/api/connection_test", tags=["System Status"],
         operation_id="test_connection",
         summary="PLC接続テスト",
         description="PLCに接続し D0 を1ワード読み取って応答時間を返します")
def api_connection_test(
    plc_host: Optional[str] = Query(None, description="PLCのコンピューター名またはIPアドレス（省略時は環境変数使用）"),
    port: Optional[int] = Query(None, description="PLCのポート番号（省略時は環境変数使用）"),
    protocol: Optional[str] = Query(None, description="フレーム世代 A-1E / Qna-3E（省略時は環境変数使用）"),
):
    config = _make_config(PLCTarget(plc_host=plc_host, port=port, protocol=protocol))
    return plc_ops.test_connection(config)


@app.get("/api/status", tags=["System Status"],
         summary="ゲートウェイの状態確認",
         description="対応デバイス・型と接続設定を取得します")
def api_status():
    return {
        "version": __version__,
        "plc": str(plc_ops.config),
        "supported_devices": plc_ops.get_supported_devices(),
        "supported_types": [kind.name.lower() for kind in ValueKind],
        "supported_protocols": ["A-1E", "Qna-3E"],
    }
