"""
MELSEC MC Gateway バージョン情報
================================

プロジェクト全体のバージョン情報を管理
"""

# バージョン情報
__version__ = "1.0.0"
__release_date__ = "2026-10-17"

# コンポーネントバージョン
COMPONENT_VERSIONS = {
    "rest_api": "1.0.0",
    "melsec_mc": "1.0.0",
}

# 機能リリース情報
FEATURES = {
    "1.0.0": [
        "A互換1E / QnA互換3E フレーム対応",
        "型付き読み書き（bool, int16-64, uint16-64, float32/64）",
        "REST API（読み取り・書き込み・一括読み取り）",
    ],
}


def get_version_info() -> dict:
    """
    詳細なバージョン情報を取得

    Returns:
        dict: バージョン情報の辞書
    """
    import platform
    import sys
    from importlib import metadata

    # 依存ライブラリのバージョンを取得
    lib_versions = {}
    for lib in ("fastapi", "pydantic", "uvicorn"):
        try:
            lib_versions[lib] = metadata.version(lib)
        except metadata.PackageNotFoundError:
            lib_versions[lib] = "未インストール"

    return {
        "gateway_version": __version__,
        "release_date": __release_date__,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "platform": platform.platform(),
        "components": COMPONENT_VERSIONS,
        "libraries": lib_versions,
        "latest_features": FEATURES.get(__version__, []),
    }


def format_version_string() -> str:
    """
    フォーマット済みのバージョン文字列を生成

    Returns:
        str: バージョン表示用文字列
    """
    info = get_version_info()

    lines = []
    lines.append(f"MELSEC MC Gateway v{info['gateway_version']} ({info['release_date']})")
    lines.append(f"Python {info['python_version']} on {info['platform']}")
    lines.append("")
    lines.append("コンポーネント:")
    for comp, ver in info['components'].items():
        lines.append(f"  - {comp}: v{ver}")
    lines.append("")
    lines.append("依存ライブラリ:")
    for lib, ver in info['libraries'].items():
        lines.append(f"  - {lib}: {ver}")

    return "\n".join(lines)


if __name__ == "__main__":
    # 直接実行時はバージョン情報を表示
    print(format_version_string())
