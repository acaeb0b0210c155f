"""配置管理单元测试"""

from __future__ import annotations

import pytest

from mkbuild.core import config as config_mod
from mkbuild.core.config import Config, get_config, init_config
from mkbuild.core.exceptions import ConfigError


class TestConfig:
    def test_defaults(self) -> None:
        c = Config()
        assert c.manifest == "MKBuild.yaml"
        assert c.output == "CMakeLists.txt"
        assert c.unknown_dependency_policy == "fatal"
        assert c.docker_image == "bassosimone/mk-debian"
        assert c.docker_mount == "/mk"

    def test_invalid_policy(self) -> None:
        with pytest.raises(ConfigError, match="unknown_dependency_policy"):
            Config(unknown_dependency_policy="ignore")

    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        assert Config.from_file(str(tmp_path / "none.yml")) == Config()

    def test_from_file_keeps_extra(self, tmp_path) -> None:
        p = tmp_path / "c.yml"
        p.write_text("output: build/CMakeLists.txt\nunknown_dependency_policy: warn\nfoo: 1\n",
                     encoding="utf-8")
        c = Config.from_file(str(p))
        assert c.output == "build/CMakeLists.txt"
        assert c.unknown_dependency_policy == "warn"
        assert c.extra == {"foo": 1}
        assert c.to_dict()["extra"] == {"foo": 1}

    def test_malformed_file(self, tmp_path) -> None:
        p = tmp_path / "c.yml"
        p.write_text("output: [\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.from_file(str(p))


class TestGlobalConfig:
    def test_init_replaces_current(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(config_mod, "_current", None)
        assert get_config() == Config()
        p = tmp_path / "c.yml"
        p.write_text("docker_image: other/image\n", encoding="utf-8")
        init_config(str(p))
        assert get_config().docker_image == "other/image"
