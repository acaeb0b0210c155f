"""生成服务单元测试"""

from __future__ import annotations

import logging

import pytest

from mkbuild.core.config import Config
from mkbuild.core.exceptions import DependencyError
from mkbuild.core.manifest import parse_manifest
from mkbuild.deps.rules import RULES
from mkbuild.services.generate_service import GenerateService

_ARGH_MANIFEST = {
    "name": "demo",
    "dependencies": ["github.com/adishavit/argh"],
    "targets": {"executables": {"demo": {"compile": ["main.cc"]}}},
    "tests": {},
}


def _section_titles(text: str) -> list[str]:
    lines = text.splitlines()
    return [
        lines[i][2:] for i in range(1, len(lines) - 1)
        if lines[i - 1] == "#" and lines[i + 1] == "#"
    ]


@pytest.fixture
def service() -> GenerateService:
    return GenerateService(config=Config())


class TestGenerate:
    def test_argh_scenario(self, service, tmp_path) -> None:
        out = service.generate(parse_manifest(_ARGH_MANIFEST), tmp_path / "CMakeLists.txt")
        text = out.read_text(encoding="utf-8")
        assert 'project("demo")' in text
        assert "argh.h" in text
        assert "SHA256=ddb7dfc18dcf90149735b76fb2cff101067453a1df1943a6911233cb7085980c" in text
        assert 'list(APPEND CMAKE_REQUIRED_INCLUDES "${CMAKE_BINARY_DIR}/.mkbuild/include")' in text
        assert 'CHECK_INCLUDE_FILE_CXX("argh.h" MK_HAVE_ARGH_H)' in text
        assert "add_executable(\n  demo\n  main.cc\n)" in text

    def test_unknown_dependency_writes_nothing(self, service, tmp_path) -> None:
        pkg = parse_manifest({**_ARGH_MANIFEST, "dependencies": [
            "github.com/adishavit/argh", "not.a.real/dep",
        ]})
        out = tmp_path / "CMakeLists.txt"
        with pytest.raises(DependencyError, match="not.a.real/dep") as exc:
            service.generate(pkg, out)
        assert exc.value.details == ["not.a.real/dep"]
        assert not out.exists()

    def test_unknown_dependency_keeps_previous_output(self, service, tmp_path) -> None:
        out = tmp_path / "CMakeLists.txt"
        out.write_text("previous\n", encoding="utf-8")
        pkg = parse_manifest({"name": "x", "dependencies": ["not.a.real/dep"]})
        with pytest.raises(DependencyError):
            service.generate(pkg, out)
        assert out.read_text(encoding="utf-8") == "previous\n"

    def test_warn_policy_skips_unknown(self, tmp_path, caplog) -> None:
        svc = GenerateService(config=Config(unknown_dependency_policy="warn"))
        pkg = parse_manifest({"name": "x", "dependencies": [
            "not.a.real/dep", "github.com/nlohmann/json",
        ]})
        with caplog.at_level(logging.WARNING):
            text = svc.generate(pkg, tmp_path / "CMakeLists.txt").read_text(encoding="utf-8")
        assert "not.a.real/dep" in caplog.text
        assert "not.a.real/dep" not in text
        assert "# github.com/nlohmann/json" in text

    def test_n_dependencies_n_sections_in_order(self, service) -> None:
        deps = [
            "github.com/openssl/openssl",
            "github.com/curl/curl",
            "github.com/adishavit/argh",
            "github.com/measurement-kit/generic-assets",
        ]
        text = service.render(parse_manifest({"name": "x", "dependencies": deps})).getvalue()
        titles = [t for t in _section_titles(text) if t in RULES]
        assert titles == deps

    def test_section_order(self, service) -> None:
        pkg = parse_manifest({
            "name": "x",
            "dependencies": ["github.com/adishavit/argh"],
            "function_checks": [{"name": "strtonum", "define": "HAVE_STRTONUM"}],
            "targets": {"executables": {"b": {"compile": ["b.cc"]}, "a": {"compile": ["a.cc"]}},
                        "libraries": {"lib": {"compile": ["l.cc"]}}},
            "tests": {"t2": ["./b"], "t1": ["./a"]},
        })
        titles = _section_titles(service.render(pkg).getvalue())
        assert titles == [
            "github.com/adishavit/argh",
            "Platform checks",
            "Set restrictive compiler flags",
            "Prepare for compiling targets",
            "library: lib",
            "executable: a",
            "executable: b",
            "test: t1",
            "test: t2",
        ]

    def test_idempotent(self, service, tmp_path) -> None:
        pkg = parse_manifest({**_ARGH_MANIFEST, "dependencies": sorted(RULES)})
        first = service.generate(pkg, tmp_path / "a.txt").read_bytes()
        second = service.generate(pkg, tmp_path / "b.txt").read_bytes()
        assert first == second

    def test_target_order_independent_of_input(self, service) -> None:
        a = parse_manifest({"name": "x", "tests": {"b": ["./b"], "a": ["./a"]}})
        b = parse_manifest({"name": "x", "tests": {"a": ["./a"], "b": ["./b"]}})
        assert service.render(a).getvalue() == service.render(b).getvalue()

    def test_whole_output_balanced(self, service) -> None:
        pkg = parse_manifest({"name": "x", "dependencies": sorted(RULES)})
        lines = [line.strip() for line in service.render(pkg).lines]
        assert sum(1 for x in lines if x.startswith("if(")) == lines.count("endif()")


class TestGenerateFromManifest:
    def test_defaults_from_config(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "MKBuild.yaml").write_text(
            "name: demo\ndependencies: [github.com/catchorg/catch2]\n", encoding="utf-8",
        )
        path = GenerateService(config=Config()).generate_from_manifest()
        assert path.name == "CMakeLists.txt"
        assert "catch.hpp" in (tmp_path / "CMakeLists.txt").read_text(encoding="utf-8")
