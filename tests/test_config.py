import pytest

from pycampreservation.config import ClientConfig
from pycampreservation.exceptions import ConfigError


def test_defaults() -> None:
    config = ClientConfig()
    assert config.base_url is None
    assert config.timeout == 30.0
    assert config.retry_count == 0
    assert config.draft_namespace == "radsasfun"
    assert config.client_timeout.total == 30.0


def test_from_env() -> None:
    config = ClientConfig.from_env(
        {
            "CAMP_API_BASE_URL": " https://api.example.pl ",
            "CAMP_API_URI": "",
            "CAMP_API_TIMEOUT": "12.5",
            "CAMP_API_RETRY_COUNT": "2",
            "CAMP_DRAFT_PATH": "/tmp/drafts.json",
        }
    )
    assert config.base_url == "https://api.example.pl"
    assert config.api_uri is None
    assert config.timeout == 12.5
    assert config.retry_count == 2
    assert config.draft_namespace == "radsasfun"
    assert config.draft_path == "/tmp/drafts.json"


def test_from_env_rejects_bad_numbers() -> None:
    with pytest.raises(ConfigError):
        ClientConfig.from_env({"CAMP_API_TIMEOUT": "soon"})
    with pytest.raises(ConfigError):
        ClientConfig.from_env({"CAMP_API_RETRY_COUNT": "1.5"})


def test_invalid_values() -> None:
    with pytest.raises(ConfigError):
        ClientConfig(timeout=0)
    with pytest.raises(ConfigError):
        ClientConfig(retry_count=-1)
    with pytest.raises(ConfigError):
        ClientConfig(required_consents=("consent9",))
