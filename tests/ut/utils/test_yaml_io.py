"""yaml_io 单元测试"""

from __future__ import annotations

import os
import stat

import pytest
import yaml

from mkbuild.utils import yaml_io
from mkbuild.utils.yaml_io import atomic_write, load_yaml


class TestAtomicWrite:
    def test_creates_parents_and_overwrites(self, tmp_path) -> None:
        target = tmp_path / "a" / "b" / "out.txt"
        atomic_write(target, "one\n")
        atomic_write(target, "two\n")
        assert target.read_text(encoding="utf-8") == "two\n"
        assert [p.name for p in target.parent.iterdir()] == ["out.txt"]

    def test_mode(self, tmp_path) -> None:
        target = tmp_path / "run.sh"
        atomic_write(target, "#!/bin/sh\n", mode=0o755)
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o755

    def test_failure_leaves_no_temp_and_keeps_target(self, tmp_path, monkeypatch) -> None:
        target = tmp_path / "out.txt"
        target.write_text("old\n", encoding="utf-8")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(yaml_io.os, "replace", boom)
        with pytest.raises(OSError, match="disk full"):
            atomic_write(target, "new\n")
        assert target.read_text(encoding="utf-8") == "old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


class TestLoadYaml:
    def test_missing_is_empty(self, tmp_path) -> None:
        assert load_yaml(tmp_path / "none.yml") == {}

    def test_non_mapping_is_empty(self, tmp_path) -> None:
        p = tmp_path / "list.yml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        assert load_yaml(p) == {}

    def test_invalid_yaml_raises(self, tmp_path) -> None:
        p = tmp_path / "bad.yml"
        p.write_text("a: [\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_yaml(p)

    def test_too_large(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(yaml_io, "MAX_YAML_SIZE", 4)
        p = tmp_path / "big.yml"
        p.write_text("name: demo\n", encoding="utf-8")
        with pytest.raises(ValueError, match="过大"):
            load_yaml(p)
