from pathlib import Path
from unittest.mock import patch

import yaml
from keyring.errors import KeyringError

from unit_doctor.config import KEYRING_MARKER, ConfigManager, default_config_dir
from unit_doctor.connector.ssh import SSHConfig


def test_add_and_get_profile_with_keyring(tmp_path: Path):
    mgr = ConfigManager(tmp_path)
    with patch("unit_doctor.config.keyring") as mock_keyring:
        mock_keyring.get_password.return_value = "s3cret"
        mgr.add_profile("master1", SSHConfig(host="10.0.0.1", user="ops", password="s3cret"))
        cfg = mgr.get_profile("master1")

    mock_keyring.set_password.assert_called_once_with("unit-doctor", "master1", "s3cret")
    stored = yaml.safe_load((tmp_path / "profiles.yaml").read_text())
    assert stored["master1"]["password"] == KEYRING_MARKER
    assert cfg.host == "10.0.0.1"
    assert cfg.user == "ops"
    assert cfg.password == "s3cret"


def test_password_falls_back_to_file_without_keyring(tmp_path: Path):
    mgr = ConfigManager(tmp_path)
    with patch("unit_doctor.config.keyring") as mock_keyring:
        mock_keyring.set_password.side_effect = KeyringError("no backend")
        mgr.add_profile("node1", SSHConfig(host="node1", password="pw"))

    assert mgr.get_profile("node1").password == "pw"


def test_list_and_remove_profile(tmp_path: Path):
    mgr = ConfigManager(tmp_path)
    mgr.add_profile("node1", SSHConfig(host="node1", key_path="~/.ssh/id_ed25519"))

    assert list(mgr.list_profiles()) == ["node1"]
    assert mgr.remove_profile("node1") is True
    assert mgr.remove_profile("node1") is False
    assert mgr.get_profile("node1") is None


def test_config_dir_from_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("UNIT_DOCTOR_CONFIG", str(tmp_path))
    assert default_config_dir() == tmp_path.resolve()
    assert ConfigManager().profiles_file == tmp_path.resolve() / "profiles.yaml"
