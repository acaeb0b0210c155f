"""内置依赖规则表

键是依赖标识（精确匹配），版本固定在 URL 与校验和中。
新增依赖只需在 RULES 中追加一条记录，输出逻辑不需要改动。
"""

from __future__ import annotations

from collections.abc import Iterable

from mkbuild.deps.models import (
    DependencyRule,
    Download,
    LibraryCheck,
    PrebuiltPackage,
    RuleKind,
    SystemLibrary,
)

_PREBUILT_BASE_URL = "https://github.com/measurement-kit/prebuilt/releases/download/testing"
_MK_RAW_BASE_URL = "https://raw.githubusercontent.com/measurement-kit"


def _single_header(identifier: str, sha256: str, url: str) -> DependencyRule:
    return DependencyRule(identifier, RuleKind.SINGLE_HEADER, download=Download(sha256, url))


def _mk_header(project: str, version: str, sha256: str) -> DependencyRule:
    """measurement-kit 系列的单头文件库"""
    return _single_header(
        f"github.com/measurement-kit/{project}",
        sha256,
        f"{_MK_RAW_BASE_URL}/{project}/{version}/{project}.hpp",
    )


_CURL_VERSION = "7.61.1-1"
_LIBMAXMINDDB_VERSION = "1.3.2-2"

_RULE_LIST: tuple[DependencyRule, ...] = (
    DependencyRule(
        "curl.haxx.se/ca",
        RuleKind.SINGLE_ASSET,
        download=Download(
            "c1fd9b235896b1094ee97bfb7e042f93530b5e300781f59b45edf84ee8c75000",
            "https://curl.haxx.se/ca/cacert.pem",
        ),
        deprecation="请改用 github.com/measurement-kit/generic-assets",
    ),
    _single_header(
        "github.com/adishavit/argh",
        "ddb7dfc18dcf90149735b76fb2cff101067453a1df1943a6911233cb7085980c",
        "https://raw.githubusercontent.com/adishavit/argh/v1.3.0/argh.h",
    ),
    DependencyRule(
        "github.com/c-ares/c-ares",
        RuleKind.SYSTEM_LIBRARY,
        system=SystemLibrary(
            headers=("ares.h",),
            libraries=(LibraryCheck("cares", "ares_process"),),
        ),
    ),
    _single_header(
        "github.com/catchorg/catch2",
        "5eb8532fd5ec0d28433eba8a749102fd1f98078c5ebf35ad607fb2455a000004",
        "https://github.com/catchorg/Catch2/releases/download/v2.3.0/catch.hpp",
    ),
    DependencyRule(
        "github.com/curl/curl",
        RuleKind.PLATFORM_PREBUILT,
        prebuilt=PrebuiltPackage(
            sha256="424d2f18f0f74dd6a0128f0f4e59860b7d2f00c80bbf24b2702e9cac661357cf",
            url=f"{_PREBUILT_BASE_URL}/windows-curl-{_CURL_VERSION}.tar.gz",
            prefix=f"MK_DIST/windows/curl/{_CURL_VERSION}",
            header="curl/curl.h",
            libraries=(LibraryCheck("libcurl.lib", "curl_easy_init"),),
            definitions=("-DCURL_STATICLIB",),
        ),
        system=SystemLibrary(
            headers=("curl/curl.h",),
            libraries=(LibraryCheck("curl", "curl_easy_init"),),
        ),
    ),
    _single_header(
        "github.com/howardhinnant/date",
        "07aa75752540023ccccab178ed193f536c9d032cbbda997159af9f339d331eda",
        "https://raw.githubusercontent.com/HowardHinnant/date/v2.4.1/include/date/date.h",
    ),
    DependencyRule(
        "github.com/maxmind/libmaxminddb",
        RuleKind.PLATFORM_PREBUILT,
        prebuilt=PrebuiltPackage(
            sha256="542933912814ac518037bd26083d0bba9daf68084f43c5cf2d7ec944d62b9ebb",
            url=f"{_PREBUILT_BASE_URL}/windows-libmaxminddb-{_LIBMAXMINDDB_VERSION}.tar.gz",
            prefix=f"MK_DIST/windows/libmaxminddb/{_LIBMAXMINDDB_VERSION}",
            header="maxminddb.h",
            libraries=(LibraryCheck("maxminddb.lib", "MMDB_open"),),
        ),
        system=SystemLibrary(
            headers=("maxminddb.h",),
            libraries=(LibraryCheck("maxminddb", "MMDB_open"),),
        ),
    ),
    DependencyRule(
        "github.com/measurement-kit/generic-assets",
        RuleKind.ARCHIVE_BUNDLE,
        download=Download(
            "e7826c2575bacbc1aeccf64f10bfdf128c7ab38e6f5d17876775937986499df7",
            "https://github.com/measurement-kit/generic-assets/releases/download/"
            "20190205/generic-assets-20190205.tar.gz",
        ),
    ),
    _mk_header(
        "mkbouncer", "v0.1.0",
        "b6d8cf8ce7c832b20997cbd2d2a33dbaf80a347eea4073173a7d8c1ef8f176ab",
    ),
    _mk_header(
        "mkcollector", "v0.3.0",
        "f6edaaf83c02255598827e566b54944bd8285b0387433bd2851fa97a5598deb7",
    ),
    _mk_header(
        "mkcurl", "v0.10.0",
        "2248b8a1e597bd7d1970138291ecd9a7d0c2070a50431c82e8499cc9529480f1",
    ),
    _mk_header(
        "mkdata", "v0.3.0",
        "96bb0384ecd7231a861111d8818a560b7d5ca83316cf7946a4f1a352db6ecfe3",
    ),
    _mk_header(
        "mkiplookup", "v0.2.0",
        "a815119250d09be5eff332289f90fd872910f3dc9f29bb4a5fe60e272b38174f",
    ),
    _mk_header(
        "mkmmdb", "v0.4.0",
        "c1cdcf2980c977a0d4abbdd447ddc19eefdfe6faa42b3be752d50f29930d4a87",
    ),
    _mk_header(
        "mkmock", "v0.2.0",
        "f07bc063a2e64484482f986501003e45ead653ea3f53fadbdb45c17a51d916d2",
    ),
    _single_header(
        "github.com/nlohmann/json",
        "8a6dbf3bf01156f438d0ca7e78c2971bca50eec4ca6f0cf59adf3464c43bb9d5",
        "https://raw.githubusercontent.com/nlohmann/json/v3.5.0/single_include/nlohmann/json.hpp",
    ),
    # TODO: Windows 上尚无 OpenSSL 预编译包，需要补一条 PLATFORM_PREBUILT 规则
    DependencyRule(
        "github.com/openssl/openssl",
        RuleKind.SYSTEM_LIBRARY,
        system=SystemLibrary(
            headers=("openssl/rsa.h", "openssl/ssl.h"),
            libraries=(
                LibraryCheck("crypto", "RSA_new"),
                LibraryCheck("ssl", "SSL_read"),
            ),
            homebrew_prefix="/usr/local/opt/openssl",
        ),
    ),
)


def build_table(rules: Iterable[DependencyRule]) -> dict[str, DependencyRule]:
    """按标识建立索引，重复标识视为规则表错误"""
    table: dict[str, DependencyRule] = {}
    for rule in rules:
        if rule.identifier in table:
            raise ValueError(f"重复的依赖标识: {rule.identifier}")
        table[rule.identifier] = rule
    return table


RULES: dict[str, DependencyRule] = build_table(_RULE_LIST)
