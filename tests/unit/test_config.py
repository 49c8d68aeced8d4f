"""Unit tests for configuration system."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from tinhorn.config import (
    MarkdownConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_substitute_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env var in string."""
        monkeypatch.setenv("SITE_DIR", "public")

        assert substitute_env_vars("${SITE_DIR}/index.html") == "public/index.html"

    def test_substitute_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env vars inside dicts and lists."""
        monkeypatch.setenv("EXT", "tables")

        result = substitute_env_vars({"markdown": {"extensions": ["${EXT}", "toc"]}})

        assert result == {"markdown": {"extensions": ["tables", "toc"]}}

    def test_missing_env_var_raises(self) -> None:
        """Test that missing env var raises ValueError."""
        with pytest.raises(ValueError, match="Environment variable not set"):
            substitute_env_vars("${TINHORN_NONEXISTENT_VAR}")

    def test_passthrough_non_string(self) -> None:
        """Test that non-string values pass through unchanged."""
        assert substitute_env_vars(123) == 123
        assert substitute_env_vars(None) is None

    def test_fallback_used_when_unset(self) -> None:
        """Test the ${VAR:-fallback} form."""
        assert substitute_env_vars("${OUT_DIR:-build}/site", environ={}) == "build/site"

    def test_fallback_ignored_when_set(self) -> None:
        """Test that a set variable wins over its fallback, even when empty."""
        assert substitute_env_vars("${OUT_DIR:-build}", environ={"OUT_DIR": "dist"}) == "dist"
        assert substitute_env_vars("[${OUT_DIR:-build}]", environ={"OUT_DIR": ""}) == "[]"

    def test_non_reference_text_untouched(self) -> None:
        """Test that a lone dollar sign or braces are left alone."""
        assert substitute_env_vars("$5 {x}", environ={}) == "$5 {x}"


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_find_dir_config(self, tmp_path: Path) -> None:
        """Test finding .tinhorn/config.yaml."""
        config_dir = tmp_path / ".tinhorn"
        config_dir.mkdir()
        config_file = config_dir / "config.yaml"
        config_file.write_text("output:\n  encoding: utf-8")

        assert find_config_file(tmp_path) == config_file

    def test_prefer_dir_over_root(self, tmp_path: Path) -> None:
        """Test .tinhorn/config.yaml is preferred over tinhorn.yaml."""
        config_dir = tmp_path / ".tinhorn"
        config_dir.mkdir()
        preferred = config_dir / "config.yaml"
        preferred.write_text("# preferred")
        (tmp_path / "tinhorn.yaml").write_text("# fallback")

        assert find_config_file(tmp_path) == preferred

    def test_find_root_config(self, tmp_path: Path) -> None:
        """Test finding tinhorn.yaml at root."""
        config_file = tmp_path / "tinhorn.yaml"
        config_file.write_text("{}")

        assert find_config_file(tmp_path) == config_file

    def test_found_in_parent_directory(self, tmp_path: Path) -> None:
        """Test that discovery walks up from a nested directory."""
        config_file = tmp_path / "tinhorn.yaml"
        config_file.write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == config_file

    def test_nearest_config_wins(self, tmp_path: Path) -> None:
        """Test that a config closer to the start directory shadows outer ones."""
        (tmp_path / "tinhorn.yaml").write_text("{}")
        project = tmp_path / "project"
        project.mkdir()
        inner = project / "tinhorn.yaml"
        inner.write_text("{}")

        assert find_config_file(project) == inner

    def test_no_config_returns_none(self, tmp_path: Path) -> None:
        """Test returns None when no config found."""
        assert find_config_file(tmp_path) is None


class TestLoadConfigFromDict:
    """Tests for loading config from dictionary."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = load_config_from_dict({})

        assert config.output.path is None
        assert config.output.encoding == "utf-8"
        assert config.markdown.extensions == []

    def test_minimal(self, minimal_config: dict[str, Any]) -> None:
        """Test a config that only sets the encoding."""
        config = load_config_from_dict(minimal_config)

        assert config.output.encoding == "utf-8"
        assert config.output.path is None

    def test_full(self, full_config: dict[str, Any]) -> None:
        """Test a config with every option."""
        config = load_config_from_dict(full_config)

        assert config.output.path == "build/index.html"
        assert config.markdown.extensions == ["tables", "fenced_code"]

    def test_unknown_section_rejected(self) -> None:
        """Test that a misspelled section is reported."""
        with pytest.raises(ValueError, match=r"Unknown config section\(s\): markdwon"):
            load_config_from_dict({"markdwon": {"extensions": ["toc"]}})

    def test_section_must_be_mapping(self) -> None:
        """Test that a scalar section is rejected."""
        with pytest.raises(ValueError, match="'output' must be a mapping"):
            load_config_from_dict({"output": "build/index.html"})

    def test_empty_sections(self) -> None:
        """Test that empty YAML sections fall back to defaults."""
        config = load_config_from_dict({"output": None, "markdown": None})

        assert config.output.encoding == "utf-8"
        assert config.markdown.extensions == []


class TestMarkdownConfig:
    """Tests for markdown configuration validation."""

    def test_rejects_non_string_extensions(self) -> None:
        """Test that extension entries must be names."""
        with pytest.raises(ValueError, match="Markdown extensions must be names"):
            MarkdownConfig(extensions=["tables", 3])  # type: ignore[list-item]


class TestLoadConfig:
    """Tests for loading config files."""

    def test_explicit_missing_path(self, tmp_path: Path) -> None:
        """Test that an explicit missing path raises."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_records_path(self, tmp_path: Path) -> None:
        """Test that the loaded path is remembered."""
        config_file = tmp_path / "tinhorn.yaml"
        config_file.write_text("markdown:\n  extensions: [toc]\n")

        config = load_config(config_file)

        assert config.config_path == config_file
        assert config.markdown.extensions == ["toc"]

    def test_non_mapping_file_rejected(self, tmp_path: Path) -> None:
        """Test that a YAML file holding a list is rejected."""
        config_file = tmp_path / "tinhorn.yaml"
        config_file.write_text("- output\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(config_file)

    def test_no_discovery(self) -> None:
        """Test that disabling discovery yields defaults."""
        config = load_config(auto_discover=False)

        assert config.config_path is None

    def test_default_config_parses(self) -> None:
        """Test that the generated default config loads cleanly."""
        config = load_config_from_dict(yaml.safe_load(create_default_config()))

        assert config.output.encoding == "utf-8"
        assert config.markdown.extensions == []
