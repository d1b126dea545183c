"""
Unit tests for YAML configuration loading.
"""

import pytest

from hosthttp import ConfigurationError, HttpModuleConfig, ModuleConfig
from hosthttp.config import load_config, parse_config, substitute_env_vars


class TestSubstituteEnvVars:

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("HOSTHTTP_AGENT", "agent/2")
        assert substitute_env_vars("ua: ${HOSTHTTP_AGENT}") == "ua: agent/2"

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("HOSTHTTP_MISSING", raising=False)
        assert substitute_env_vars("n: ${HOSTHTTP_MISSING:8}") == "n: 8"

    def test_unset_without_default(self, monkeypatch):
        monkeypatch.delenv("HOSTHTTP_MISSING", raising=False)
        assert substitute_env_vars("v: '${HOSTHTTP_MISSING}'") == "v: ''"


class TestParseConfig:

    def test_empty_document_gives_defaults(self):
        assert parse_config(None) == ModuleConfig()

    def test_values(self):
        config = parse_config({
            "http": {"max_concurrent": 4, "default_headers": {"X-A": "1"}},
            "logging": {"min_level": "DEBUG"},
        })

        assert config.http.max_concurrent == 4
        assert config.http.default_headers == {"X-A": "1"}
        assert config.http.follow_redirects is True
        assert config.logging.min_level == "DEBUG"

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"http": {"max_concurrent": "many"}},
        {"http": {"max_concurrent": 0}},
        {"http": {"max_redirects": -1}},
        {"logging": {"min_level": "LOUD"}},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigurationError):
            parse_config(data)


class TestLoadConfig:

    def test_explicit_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOSTHTTP_TEST_UA", "tester/1.0")
        monkeypatch.delenv("HOSTHTTP_TEST_LIMIT", raising=False)
        path = tmp_path / "http.yaml"
        path.write_text(
            "http:\n"
            "  max_concurrent: ${HOSTHTTP_TEST_LIMIT:8}\n"
            "  user_agent: ${HOSTHTTP_TEST_UA}\n"
            "  expose_headers_all: true\n"
        )

        config = load_config(path)

        assert config.http == HttpModuleConfig(max_concurrent=8, user_agent="tester/1.0", expose_headers_all=True)

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("http: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_discovery_in_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "hosthttp.yaml").write_text("http:\n  max_redirects: 3\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().http.max_redirects == 3

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("hosthttp.config.candidate_paths", lambda: [tmp_path / "hosthttp.yaml"])

        assert load_config() == ModuleConfig()
