"""
Tests for kkpmerge configuration.
"""

from pathlib import Path

import pytest
from kkpmerge.config import ConfigError, MergeConfig


class TestDefaults:

    def test_defaults(self, no_config):
        config = MergeConfig()
        assert config.config_path is None
        assert config.output_path == Path("merged.kkp")
        assert config.symbol_matching == "strict"
        assert config.string_encoding == "utf-8"
        assert config.log_level == "INFO"
        assert config.report_path is None


class TestYamlFile:

    def test_explicit_file(self, tmp_path, no_config):
        path = tmp_path / "kkp.yaml"
        path.write_text("output_path: out/final.kkp\nsymbol_matching: PREFIX\nlog_level: debug\n")
        config = MergeConfig(path)
        assert config.config_path == path
        assert config.output_path == Path("out/final.kkp")
        assert config.symbol_matching == "prefix"
        assert config.log_level == "DEBUG"

    def test_search_path(self, tmp_path, monkeypatch, no_config):
        path = tmp_path / "found.yaml"
        path.write_text("report_path: r.json\n")
        monkeypatch.setattr("kkpmerge.config.CONFIG_SEARCH_PATHS", [tmp_path / "missing.yaml", path])
        config = MergeConfig()
        assert config.config_path == path
        assert config.report_path == Path("r.json")

    def test_empty_file(self, tmp_path, no_config):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert MergeConfig(path).output_path == Path("merged.kkp")

    def test_missing_explicit_file(self, tmp_path, no_config):
        with pytest.raises(ConfigError):
            MergeConfig(tmp_path / "absent.yaml")

    def test_not_a_mapping(self, tmp_path, no_config):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            MergeConfig(path)

    def test_broken_yaml(self, tmp_path, no_config):
        path = tmp_path / "broken.yaml"
        path.write_text("output_path: [unclosed\n")
        with pytest.raises(ConfigError):
            MergeConfig(path)


class TestOverrides:

    def test_environment(self, monkeypatch, no_config):
        monkeypatch.setenv("KKPMERGE_OUTPUT", "env.kkp")
        monkeypatch.setenv("KKPMERGE_SYMBOL_MATCHING", "prefix")
        config = MergeConfig()
        assert config.output_path == Path("env.kkp")
        assert config.symbol_matching == "prefix"

    def test_environment_disabled(self, monkeypatch, no_config):
        monkeypatch.setenv("KKPMERGE_OUTPUT", "env.kkp")
        assert MergeConfig(use_env=False).output_path == Path("merged.kkp")

    def test_update_skips_none(self, no_config):
        config = MergeConfig()
        config.update(output_path="cli.kkp", symbol_matching=None)
        assert config.output_path == Path("cli.kkp")
        assert config.symbol_matching == "strict"

    def test_invalid_matching(self, no_config):
        config = MergeConfig()
        config.update(symbol_matching="fuzzy")
        with pytest.raises(ConfigError):
            config.symbol_matching

    def test_unknown_encoding(self, no_config):
        config = MergeConfig()
        config.update(string_encoding="no-such-codec")
        with pytest.raises(ConfigError):
            config.string_encoding

    def test_encoding_alias_accepted(self, no_config):
        config = MergeConfig()
        config.update(string_encoding="latin-1")
        assert config.string_encoding == "latin-1"
