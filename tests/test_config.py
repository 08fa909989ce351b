import json
from pathlib import Path

import pytest

from process_tracker.config import API_KEY_ENV, PASSWORD_ENV, TrackerConfig
from process_tracker.gate import PasswordGate
from process_tracker.persistence import ConfigurationError, JsonBinAdapter, LocalStorageAdapter


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    monkeypatch.delenv(PASSWORD_ENV, raising=False)


class TestTrackerConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        config = TrackerConfig.load(tmp_path / "missing.json")

        assert config.backend == "local"
        assert config.base_url == "https://api.jsonbin.io/v3"
        assert config.password == ""

    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg" / "config.json"
        TrackerConfig(backend="remote", bin_id="bin1", api_key="k").save(path)

        config = TrackerConfig.load(path)

        assert config.backend == "remote"
        assert config.bin_id == "bin1"
        assert config.api_key == "k"

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"backend": "local", "theme": "dark"}), encoding="utf-8")

        assert TrackerConfig.load(path).backend == "local"

    def test_env_overrides_secrets(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.json"
        TrackerConfig(api_key="from-file", password="file-pass").save(path)
        monkeypatch.setenv(API_KEY_ENV, "from-env")
        monkeypatch.setenv(PASSWORD_ENV, "env-pass")

        config = TrackerConfig.load(path)

        assert config.api_key == "from-env"
        assert config.password == "env-pass"

    def test_build_adapter(self, tmp_path: Path) -> None:
        local = TrackerConfig(storage_dir=str(tmp_path)).build_adapter()
        remote = TrackerConfig(backend="remote", bin_id="b", api_key="k", timeout=5).build_adapter()

        assert isinstance(local, LocalStorageAdapter)
        assert local.storage_dir == tmp_path
        assert isinstance(remote, JsonBinAdapter)
        assert remote.bin_url == "https://api.jsonbin.io/v3/b/b"
        assert remote.timeout == 5

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown backend"):
            TrackerConfig(backend="sqlite").build_adapter()


class TestPasswordGate:
    def test_disabled_gate_is_open(self) -> None:
        gate = PasswordGate("")

        assert not gate.enabled
        assert gate.is_unlocked

    def test_unlock_persists_for_session(self) -> None:
        gate = PasswordGate("secreto")

        assert not gate.is_unlocked
        assert gate.unlock("otro") is False
        assert not gate.is_unlocked
        assert gate.unlock("secreto") is True
        assert gate.is_unlocked
