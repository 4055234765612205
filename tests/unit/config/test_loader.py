"""Unit tests for prism.config.loader module."""

import os
from pathlib import Path
import stat

import pytest
import yaml

from prism.config.loader import (
    config_exists,
    create_default_config,
    ensure_config_dir,
    load_config,
    load_credentials,
    load_env_files,
    resolve_credentials,
    save_config,
)
from prism.config.models import CredentialsConfig, PrismConfig, ProviderCredentials
from prism.core.errors import ConfigError
from prism.providers.base import BackendId


@pytest.fixture
def home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point Path.home() at a temporary directory."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    return tmp_path


def write_yaml(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


class TestCreateDefaultConfig:
    """Test create_default_config."""

    def test_creates_both_files(self, tmp_path: Path) -> None:
        config_path, credentials_path = create_default_config(tmp_path)

        assert config_path == tmp_path / "config.yaml"
        assert credentials_path.exists()
        assert stat.S_IMODE(credentials_path.stat().st_mode) == 0o600

    def test_created_files_load(self, tmp_path: Path) -> None:
        config_path, credentials_path = create_default_config(tmp_path)

        assert load_config(config_path) == PrismConfig()
        credentials = load_credentials(credentials_path)
        assert credentials.providers[BackendId.CLAUDE].api_key == "YOUR_ANTHROPIC_API_KEY"

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        create_default_config(tmp_path)

        with pytest.raises(ConfigError, match="already exists"):
            create_default_config(tmp_path)

    def test_overwrite(self, tmp_path: Path) -> None:
        config_path, _ = create_default_config(tmp_path)
        config_path.write_text("default_backend: claude\n", encoding="utf-8")

        create_default_config(tmp_path, overwrite=True)

        assert load_config(config_path).default_backend is BackendId.AUTO

    def test_default_location(self, home: Path) -> None:
        config_path, _ = create_default_config()

        assert config_path == home / ".prism" / "config.yaml"
        assert (home / ".prism" / "logs").is_dir()
        assert config_exists() is True


class TestLoadConfig:
    """Test load_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.yaml") == PrismConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == PrismConfig()

    def test_loads_values(self, tmp_path: Path) -> None:
        path = write_yaml(
            tmp_path / "config.yaml",
            {
                "default_backend": "deepseek",
                "routing": {"fallback_chains": {"gemini": ["openai"]}},
            },
        )

        config = load_config(path)

        assert config.default_backend is BackendId.DEEPSEEK
        assert config.routing.fallback_chains == {BackendId.GEMINI: [BackendId.OPENAI]}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("default_backend: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Failed to parse configuration"):
            load_config(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = write_yaml(tmp_path / "config.yaml", ["a", "b"])

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_validation_errors_listed(self, tmp_path: Path) -> None:
        path = write_yaml(
            tmp_path / "config.yaml",
            {"default_backend": "mistral", "resilience": {"backend_max_retries": 0}},
        )

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        failures = exc_info.value.details["validation_errors"]
        assert any(f.startswith("default_backend:") for f in failures)
        assert any(f.startswith("resilience.backend_max_retries:") for f in failures)
        assert exc_info.value.config_file == str(path)


class TestLoadCredentials:
    """Test load_credentials."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_credentials(tmp_path / "credentials.yaml") == CredentialsConfig()

    def test_loads_providers(self, tmp_path: Path) -> None:
        path = write_yaml(
            tmp_path / "credentials.yaml",
            {"providers": {"openai": {"api_key": "sk-x", "base_url": "https://p.example"}}},
        )
        os.chmod(path, 0o600)

        credentials = load_credentials(path)

        assert credentials.providers[BackendId.OPENAI].base_url == "https://p.example"

    def test_invalid_entry(self, tmp_path: Path) -> None:
        path = write_yaml(tmp_path / "credentials.yaml", {"providers": {"claude": {}}})

        with pytest.raises(ConfigError, match="Credentials validation failed"):
            load_credentials(path)

    def test_world_readable_still_loads(self, tmp_path: Path) -> None:
        path = write_yaml(
            tmp_path / "credentials.yaml", {"providers": {"gemini": {"api_key": "AIzaSy-x"}}}
        )
        os.chmod(path, 0o644)

        assert BackendId.GEMINI in load_credentials(path).providers


class TestResolveCredentials:
    """Test merging file credentials with the environment."""

    def test_env_fills_missing(self) -> None:
        resolved = resolve_credentials(
            CredentialsConfig(),
            environ={"GEMINI_API_KEY": "AIzaSy-env", "OPENAI_API_KEY": "  "},
        )

        assert resolved.providers[BackendId.GEMINI].api_key == "AIzaSy-env"
        assert BackendId.OPENAI not in resolved.providers

    def test_valid_file_entry_wins(self) -> None:
        file_credentials = CredentialsConfig(
            providers={BackendId.CLAUDE: ProviderCredentials(api_key="sk-ant-file")}
        )

        resolved = resolve_credentials(
            file_credentials, environ={"ANTHROPIC_API_KEY": "sk-ant-env"}
        )

        assert resolved.providers[BackendId.CLAUDE].api_key == "sk-ant-file"

    def test_placeholder_replaced_by_env_keeping_base_url(self) -> None:
        file_credentials = CredentialsConfig(
            providers={
                BackendId.DEEPSEEK: ProviderCredentials(
                    api_key="YOUR_DEEPSEEK_API_KEY", base_url="https://ds.example"
                )
            }
        )

        resolved = resolve_credentials(file_credentials, environ={"DEEPSEEK_API_KEY": "sk-env"})

        entry = resolved.providers[BackendId.DEEPSEEK]
        assert entry.api_key == "sk-env"
        assert entry.base_url == "https://ds.example"

    def test_placeholder_kept_without_env(self) -> None:
        file_credentials = CredentialsConfig(
            providers={BackendId.OPENAI: ProviderCredentials(api_key="YOUR_OPENAI_API_KEY")}
        )

        resolved = resolve_credentials(file_credentials, environ={})

        assert resolved.providers[BackendId.OPENAI].api_key == "YOUR_OPENAI_API_KEY"

    def test_reads_default_file(self, home: Path) -> None:
        write_yaml(
            home / ".prism" / "credentials.yaml",
            {"providers": {"gemini": {"api_key": "AIzaSy-home"}}},
        )

        resolved = resolve_credentials(environ={})

        assert resolved.api_keys()[BackendId.GEMINI] == "AIzaSy-home"


class TestSaveConfig:
    """Test save_config."""

    def test_round_trips_default_backend(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.yaml"
        config = PrismConfig(default_backend=BackendId.OPENAI)

        written = save_config(config, path)

        assert written == path
        assert load_config(path).default_backend is BackendId.OPENAI

    def test_default_location(self, home: Path) -> None:
        save_config(PrismConfig())

        assert (home / ".prism" / "config.yaml").exists()


class TestEnvironment:
    """Test directory and .env helpers."""

    def test_ensure_config_dir(self, home: Path) -> None:
        config_dir = ensure_config_dir()

        assert config_dir == home / ".prism"
        assert (config_dir / "logs").is_dir()

    def test_config_exists_false(self, home: Path) -> None:
        assert config_exists() is False

    def test_load_env_files(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (home / ".prism").mkdir()
        (home / ".prism" / ".env").write_text("PRISM_TEST_ENV_KEY=from-file\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("PRISM_TEST_ENV_KEY", raising=False)

        load_env_files()

        assert os.environ["PRISM_TEST_ENV_KEY"] == "from-file"
        monkeypatch.delenv("PRISM_TEST_ENV_KEY")
