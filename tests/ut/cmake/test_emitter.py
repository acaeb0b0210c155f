"""CMakeEmitter 单元测试"""

from __future__ import annotations

import pytest

from mkbuild.cmake.emitter import CMakeEmitter
from mkbuild.core.exceptions import EmitterClosedError


class TestWriteLine:
    def test_indent_prefix(self) -> None:
        e = CMakeEmitter()
        e.write_line("a")
        with e.with_indent():
            e.write_line("b")
            with e.with_indent("    "):
                e.write_line("c")
        e.write_line("d")
        assert e.getvalue() == "a\n  b\n      c\nd\n"

    def test_blank_line_has_no_trailing_indent(self) -> None:
        e = CMakeEmitter()
        with e.with_indent():
            e.write_line("")
            e.write_empty_line()
            e.write_line()
        assert e.lines == ["", "", ""]

    def test_no_escaping(self) -> None:
        e = CMakeEmitter()
        e.write_line('set(X "${Y} \\"q\\"")')
        assert e.lines == ['set(X "${Y} \\"q\\"")']

    def test_section_comment(self) -> None:
        e = CMakeEmitter()
        e.write_section_comment("github.com/adishavit/argh")
        assert e.lines == ["", "#", "# github.com/adishavit/argh", "#", ""]


class TestWithIndent:
    def test_restored_after_exception(self) -> None:
        e = CMakeEmitter()
        with e.with_indent("\t"):
            with pytest.raises(ValueError):
                with e.with_indent():
                    e.write_line("x")
                    raise ValueError("boom")
            assert e.indent == "\t"
        assert e.indent == ""


class TestOpen:
    def test_preamble(self) -> None:
        text = CMakeEmitter.open("demo").getvalue()
        assert text.startswith("# Autogenerated file; DO NOT EDIT!\n")
        assert "cmake_minimum_required(VERSION 3.12.0)\n" in text
        assert 'project("demo")\n' in text
        for module in ("CheckIncludeFileCXX", "CheckLibraryExists", "CheckCXXCompilerFlag",
                       "CheckFunctionExists", "CheckCXXSymbolExists"):
            assert f"include({module})\n" in text
        assert "find_package(Threads REQUIRED)" in text
        assert "  list(APPEND CMAKE_REQUIRED_LIBRARIES ws2_32 crypt32)" in text
        assert text.endswith("enable_testing()\n")
        assert _balanced(text)


def _balanced(text: str) -> bool:
    lines = [line.strip() for line in text.splitlines()]
    return sum(1 for x in lines if x.startswith("if(")) == lines.count("endif()")


class TestClose:
    def test_writes_once_and_overwrites(self, tmp_path) -> None:
        out = tmp_path / "CMakeLists.txt"
        out.write_text("stale\n", encoding="utf-8")
        e = CMakeEmitter()
        e.write_line("project(x)")
        assert e.close(out) == out
        assert out.read_text(encoding="utf-8") == "project(x)\n"
        assert e.closed

    def test_closed_emitter_rejects_use(self, tmp_path) -> None:
        e = CMakeEmitter()
        e.close(tmp_path / "CMakeLists.txt")
        with pytest.raises(EmitterClosedError):
            e.write_line("x")
        with pytest.raises(EmitterClosedError):
            e.close(tmp_path / "again.txt")
        assert not (tmp_path / "again.txt").exists()

    def test_unwritable_target_raises_oserror(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        e = CMakeEmitter()
        e.write_line("x")
        with pytest.raises(OSError):
            e.close(blocker / "CMakeLists.txt")
        assert not e.closed
