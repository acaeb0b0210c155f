"""网络工具 — URL 安全校验"""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urlparse

from mkbuild.core.exceptions import ValidationError

# 生成的 CMake 使用 TLS_VERIFY ON 下载，只接受 https
_ALLOWED_SCHEMES = frozenset(("https",))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 https，防止 http / file:// 等非预期协议

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 https: {url}"
        )


def url_basename(url: str) -> str:
    """返回 URL 路径的最后一段，作为下载后的文件名"""
    name = PurePosixPath(urlparse(url).path).name
    if not name:
        raise ValidationError(f"无法从 URL 解析文件名: {url}")
    return name
