import pytest

from person_sync.config import load_settings
from person_sync.errors import ConfigError

ENV = {"PIPEDRIVE_API_KEY": "k-123", "PIPEDRIVE_COMPANY_DOMAIN": "acme"}


def test_from_environ(tmp_path):
    s = load_settings(str(tmp_path / "absent.env"), environ=ENV)
    assert s.api_key == "k-123"
    assert s.company_domain == "acme"
    assert s.timeout == 30.0
    assert s.log_level == "INFO"
    assert s.to_client_config().base_url == "https://acme.pipedrive.com"


def test_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PIPEDRIVE_API_KEY=file-key\nPIPEDRIVE_COMPANY_DOMAIN=acme.pipedrive.com\nPIPEDRIVE_TIMEOUT=5\n")
    s = load_settings(str(env_file), environ={})
    assert s.api_key == "file-key"
    assert s.timeout == 5.0
    assert s.to_client_config().base_url == "https://acme.pipedrive.com"


def test_environ_overrides_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PIPEDRIVE_API_KEY=file-key\nPIPEDRIVE_COMPANY_DOMAIN=filecorp\n")
    s = load_settings(str(env_file), environ={"PIPEDRIVE_COMPANY_DOMAIN": "envcorp"})
    assert s.api_key == "file-key"
    assert s.company_domain == "envcorp"


def test_key_hidden_from_repr(tmp_path):
    s = load_settings(str(tmp_path / "absent.env"), environ=ENV)
    assert "k-123" not in repr(s)


@pytest.mark.parametrize("missing", ["PIPEDRIVE_API_KEY", "PIPEDRIVE_COMPANY_DOMAIN"])
def test_missing_required(tmp_path, missing):
    env = dict(ENV)
    del env[missing]
    with pytest.raises(ConfigError, match=missing):
        load_settings(str(tmp_path / "absent.env"), environ=env)


def test_blank_counts_as_missing(tmp_path):
    with pytest.raises(ConfigError, match="PIPEDRIVE_API_KEY"):
        load_settings(str(tmp_path / "absent.env"), environ=dict(ENV, PIPEDRIVE_API_KEY="   "))


@pytest.mark.parametrize("value", ["soon", "0", "-3", "nan", "inf"])
def test_bad_timeout(tmp_path, value):
    with pytest.raises(ConfigError, match="PIPEDRIVE_TIMEOUT"):
        load_settings(str(tmp_path / "absent.env"), environ=dict(ENV, PIPEDRIVE_TIMEOUT=value))


def test_log_level(tmp_path):
    s = load_settings(str(tmp_path / "absent.env"), environ=dict(ENV, LOG_LEVEL="debug"))
    assert s.log_level == "DEBUG"
    with pytest.raises(ConfigError, match="LOG_LEVEL"):
        load_settings(str(tmp_path / "absent.env"), environ=dict(ENV, LOG_LEVEL="loud"))
