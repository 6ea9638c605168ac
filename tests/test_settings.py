import pytest

from configdrill.settings import ConfigurationError, Settings


def test_from_env_defaults():
    settings = Settings.from_env({})
    assert settings.aws_region == "us-east-1"
    assert settings.tag_key == "simulation-mas"
    assert settings.tag_value == "true"
    assert settings.allowed_ip == "10.0.0.0/16"
    assert settings.subnet_ids == []
    assert settings.hold_seconds is None
    assert settings.poll_kwargs() == {"interval": 5.0, "max_attempts": 120}
    assert settings.keep_resources is False


def test_from_env_parses_lists_and_flags():
    settings = Settings.from_env(
        {
            "AWS_REGION": "eu-west-1",
            "SUBNET_IDS": "subnet-a, subnet-b,,",
            "KEEP_RESOURCES": "yes",
            "SAVE_CREDENTIALS": "1",
            "HOLD_SECONDS": "0",
            "ALLOWED_IP_RANGE": "192.0.2.0/24",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.aws_region == "eu-west-1"
    assert settings.subnet_ids == ["subnet-a", "subnet-b"]
    assert settings.keep_resources is True
    assert settings.save_credentials is True
    assert settings.hold_seconds == 0
    assert settings.allowed_ip == "192.0.2.0/24"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [
        {"POLL_MAX_ATTEMPTS": "0"},
        {"POLL_INTERVAL_SECONDS": "soon"},
        {"LOG_LEVEL": "LOUD"},
        {"HOLD_SECONDS": "-1"},
    ],
)
def test_from_env_rejects_invalid_values(env):
    with pytest.raises(ConfigurationError):
        Settings.from_env(env)


def test_require_lists_every_missing_variable():
    settings = Settings.from_env({"AWS_ACCOUNT_ID": "123456789012"})
    with pytest.raises(ConfigurationError) as excinfo:
        settings.require("AWS_ACCOUNT_ID", "DOMAIN_NAME", "SUBNET_IDS")
    message = str(excinfo.value)
    assert "DOMAIN_NAME" in message
    assert "SUBNET_IDS" in message
    assert "AWS_ACCOUNT_ID" not in message


def test_require_unknown_variable_is_a_programming_error():
    with pytest.raises(KeyError):
        Settings.from_env({}).require("NOT_A_SETTING")


def test_require_credentials_accepts_profile_or_static_keys():
    Settings.from_env({"AWS_PROFILE": "drill"}).require_credentials()
    Settings.from_env({"AWS_ACCESS_KEY_ID": "AKID", "AWS_SECRET_ACCESS_KEY": "secret"}).require_credentials()
    with pytest.raises(ConfigurationError) as excinfo:
        Settings.from_env({"AWS_ACCESS_KEY_ID": "AKID"}).require_credentials()
    assert "AWS_SECRET_ACCESS_KEY" in str(excinfo.value)


def test_poll_kwargs_scales_interval_only(settings):
    settings.poll_interval_seconds = 2
    assert settings.poll_kwargs(factor=3) == {"interval": 6, "max_attempts": 3}
