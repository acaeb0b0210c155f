"""命令行端到端测试（click CliRunner）"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from mkbuild import __version__
from mkbuild.cli import main
from mkbuild.core import config as config_mod
from mkbuild.utils.logger import reset_logging
from mkbuild.utils.shell import CommandResult

_MANIFEST = """\
name: demo
dependencies:
  - github.com/adishavit/argh
targets:
  executables:
    demo:
      compile: [main.cc]
tests:
  smoke:
    command: ./demo --help
"""


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_mod, "_current", None)
    yield
    reset_logging()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestGenerateCommand:
    def test_generate(self, runner, tmp_path) -> None:
        (tmp_path / "MKBuild.yaml").write_text(_MANIFEST, encoding="utf-8")
        result = runner.invoke(main, ["generate"])
        assert result.exit_code == 0, result.output
        text = (tmp_path / "CMakeLists.txt").read_text(encoding="utf-8")
        assert "argh.h" in text
        assert "# test: smoke" in text

    def test_autogen_alias_and_paths(self, runner, tmp_path) -> None:
        (tmp_path / "pkg.yaml").write_text(_MANIFEST, encoding="utf-8")
        result = runner.invoke(main, ["autogen", "-m", "pkg.yaml", "-o", "out/CMakeLists.txt"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "CMakeLists.txt").is_file()

    def test_unknown_dependency(self, runner, tmp_path) -> None:
        (tmp_path / "MKBuild.yaml").write_text(
            "name: x\ndependencies: [not.a.real/dep]\n", encoding="utf-8",
        )
        result = runner.invoke(main, ["generate"])
        assert result.exit_code == 1
        assert "DEPENDENCY_ERROR" in result.output
        assert "not.a.real/dep" in result.output
        assert not (tmp_path / "CMakeLists.txt").exists()

    def test_unknown_deps_flag_overrides(self, runner, tmp_path) -> None:
        (tmp_path / "MKBuild.yaml").write_text(
            "name: x\ndependencies: [not.a.real/dep]\n", encoding="utf-8",
        )
        result = runner.invoke(main, ["generate", "--unknown-deps", "warn"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "CMakeLists.txt").is_file()

    def test_policy_from_config_file(self, runner, tmp_path) -> None:
        (tmp_path / "MKBuild.yaml").write_text(
            "name: x\ndependencies: [not.a.real/dep]\n", encoding="utf-8",
        )
        (tmp_path / "mk.yml").write_text("unknown_dependency_policy: warn\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", "mk.yml", "generate"])
        assert result.exit_code == 0, result.output

    def test_invalid_manifest(self, runner, tmp_path) -> None:
        (tmp_path / "MKBuild.yaml").write_text("name: ''\n", encoding="utf-8")
        result = runner.invoke(main, ["generate"])
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output
        assert "name" in result.output

    def test_missing_manifest(self, runner) -> None:
        result = runner.invoke(main, ["generate"])
        assert result.exit_code == 1
        assert "CONFIG_ERROR" in result.output

    def test_bad_config(self, runner, tmp_path) -> None:
        (tmp_path / "mk.yml").write_text("unknown_dependency_policy: maybe\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", "mk.yml", "generate"])
        assert result.exit_code == 1
        assert "CONFIG_ERROR" in result.output


class TestDockerCommand:
    def test_invalid_build_type_is_usage_error(self, runner) -> None:
        result = runner.invoke(main, ["docker", "msan"])
        assert result.exit_code == 2
        assert "msan" in result.output

    def test_missing_argument(self, runner) -> None:
        result = runner.invoke(main, ["docker"])
        assert result.exit_code == 2

    def test_runs_container(self, runner, tmp_path, monkeypatch) -> None:
        (tmp_path / "MKBuild.yaml").write_text(_MANIFEST, encoding="utf-8")
        calls: list[list[str]] = []

        def fake_execute(self, cmd, *, cwd=".", env=None, capture_output=True):
            calls.append(cmd)
            return CommandResult(returncode=0)

        monkeypatch.setattr("mkbuild.utils.shell.LocalExecutor.execute", fake_execute)
        result = runner.invoke(main, ["docker", "ubsan"])
        assert result.exit_code == 0, result.output
        assert calls[0][:3] == ["docker", "run", "--cap-add=NET_ADMIN"]
        assert (tmp_path / ".mkbuild" / "script" / "runner.sh").is_file()

    def test_container_failure(self, runner, tmp_path, monkeypatch) -> None:
        (tmp_path / "MKBuild.yaml").write_text(_MANIFEST, encoding="utf-8")
        monkeypatch.setattr(
            "mkbuild.utils.shell.LocalExecutor.execute",
            lambda self, cmd, **kw: CommandResult(returncode=1),
        )
        result = runner.invoke(main, ["docker", "vanilla"])
        assert result.exit_code == 1
        assert "EXECUTION_ERROR" in result.output


class TestMisc:
    def test_deps_lists_identifiers(self, runner) -> None:
        result = runner.invoke(main, ["deps"])
        assert result.exit_code == 0
        assert "github.com/adishavit/argh" in result.output
        assert "[platform-prebuilt]" in result.output
        assert "已弃用" in result.output

    def test_version(self, runner) -> None:
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_subcommand_shows_usage(self, runner) -> None:
        result = runner.invoke(main, [])
        assert "Usage" in result.output
