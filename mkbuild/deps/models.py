"""依赖规则数据模型

数据类:
- RuleKind: 规则类别
- Download: 固定校验和的下载项
- LibraryCheck: 通过探测符号确认库存在
- SystemLibrary: 宿主机已安装的系统库
- PrebuiltPackage: Windows 预编译包
- DependencyRule: 依赖标识 → 规则记录

规则只是数据，输出逻辑全部在 deps.emit 中。
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from mkbuild.utils.net import url_basename, validate_url_scheme

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")


class RuleKind(str, enum.Enum):
    SINGLE_HEADER = "single-header"
    SINGLE_ASSET = "single-asset"
    SYSTEM_LIBRARY = "system-library"
    PLATFORM_PREBUILT = "platform-prebuilt"
    ARCHIVE_BUNDLE = "archive-bundle"


def _check_download(sha256: str, url: str) -> None:
    if not _SHA256_RE.match(sha256):
        raise ValueError(f"无效的 SHA256: {sha256!r}")
    validate_url_scheme(url, context="依赖下载")


@dataclass(frozen=True)
class Download:
    """固定 SHA256 的下载项，文件名取 URL 路径的最后一段"""

    sha256: str
    url: str

    def __post_init__(self) -> None:
        _check_download(self.sha256, self.url)

    @property
    def filename(self) -> str:
        return url_basename(self.url)


@dataclass(frozen=True)
class LibraryCheck:
    name: str    # 库名或库文件名
    symbol: str  # 链接探测用的函数名


@dataclass(frozen=True)
class SystemLibrary:
    headers: tuple[str, ...] = ()
    libraries: tuple[LibraryCheck, ...] = ()
    homebrew_prefix: str = ""  # macOS 上 Homebrew 安装的前缀，存在时加入搜索路径


@dataclass(frozen=True)
class PrebuiltPackage:
    """Windows 预编译包

    解压后的目录结构为 <prefix>/<x86|x64>/{include,lib}。
    """

    sha256: str
    url: str
    prefix: str
    header: str
    libraries: tuple[LibraryCheck, ...]
    definitions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_download(self.sha256, self.url)

    @property
    def filename(self) -> str:
        return url_basename(self.url)


@dataclass(frozen=True)
class DependencyRule:
    """依赖标识对应的规则记录"""

    identifier: str
    kind: RuleKind
    download: Download | None = None
    system: SystemLibrary | None = None      # SYSTEM_LIBRARY，或 PLATFORM_PREBUILT 的非 Windows 回退
    prebuilt: PrebuiltPackage | None = None
    deprecation: str = ""

    def __post_init__(self) -> None:
        required = {
            RuleKind.SINGLE_HEADER: ("download",),
            RuleKind.SINGLE_ASSET: ("download",),
            RuleKind.ARCHIVE_BUNDLE: ("download",),
            RuleKind.SYSTEM_LIBRARY: ("system",),
            RuleKind.PLATFORM_PREBUILT: ("prebuilt", "system"),
        }[self.kind]
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(
                f"{self.identifier}: {self.kind.value} 规则缺少 {', '.join(missing)}"
            )
