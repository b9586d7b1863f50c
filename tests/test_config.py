"""
Tests for configuration loading.
"""

import pytest
from config import DEFAULT_FILE_PREFIX, DEFAULT_LEDGER_PATH, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LOG_FILE_PREFIX", "LOG_FILE_ENCODING", "LEDGER_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Test YAML and environment handling."""

    def test_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"))

        assert config.source.file_prefix == DEFAULT_FILE_PREFIX
        assert config.source.encoding == "utf-8"
        assert config.ledger.path == DEFAULT_LEDGER_PATH
        assert config.log.level == "INFO"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "source:\n  file_prefix: blocked-\nledger:\n  path: /var/lib/ledger.csv\nlogging:\n  level: debug\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config.source.file_prefix == "blocked-"
        assert config.ledger.path == "/var/lib/ledger.csv"
        assert config.log.level == "DEBUG"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("ledger:\n  path: from-yaml.csv\n", encoding="utf-8")
        monkeypatch.setenv("LEDGER_PATH", "from-env.csv")

        assert load_config(str(path)).ledger.path == "from-env.csv"

    def test_invalid_yaml_falls_back(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("source: [unclosed\n", encoding="utf-8")

        assert load_config(str(path)).source.file_prefix == DEFAULT_FILE_PREFIX

    def test_empty_prefix_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FILE_PREFIX", "")

        with pytest.raises(ValueError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_unknown_level_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ValueError):
            load_config(str(tmp_path / "absent.yaml"))

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just text\n", "source: foo\n", "ledger: [a, b]\n"])
    def test_non_mapping_rejected(self, tmp_path, content):
        path = tmp_path / "config.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(str(path))

    def test_empty_section_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("source:\nledger:\n", encoding="utf-8")

        config = load_config(str(path))

        assert config.source.file_prefix == DEFAULT_FILE_PREFIX
        assert config.ledger.path == DEFAULT_LEDGER_PATH

    def test_unknown_encoding_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FILE_ENCODING", "bogus")

        with pytest.raises(ValueError, match="encoding"):
            load_config(str(tmp_path / "absent.yaml"))

    def test_encoding_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("source:\n  encoding: latin-1\n", encoding="utf-8")

        assert load_config(str(path)).source.encoding == "latin-1"
