import os
from pathlib import Path

import pytest

from ssoconfig.settings import (
    AppConfig,
    AWSSettings,
    ConfigError,
    ConfigManager,
    SSOSettings,
    default_aws,
    default_config,
    default_sso,
    load,
    load_config_for_key,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in list(os.environ):
        if name.startswith("AWS_SSO_CONFIG"):
            monkeypatch.delenv(name)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_manager_custom_path():
    cm = ConfigManager("/tmp/custom-config")
    assert cm.config_file == "/tmp/custom-config"


def test_manager_default_path(clean_env):
    cm = ConfigManager("")
    assert cm.config_file.endswith(".awsssoconfig")
    assert cm.config_file == str(clean_env / ".awsssoconfig")


def test_load_missing_creates_defaults(tmp_path):
    config_file = tmp_path / "test-config"
    assert not config_file.exists()
    config = ConfigManager(config_file).load()
    assert config.sso.start_url == "https://your-sso-portal.awsapps.com/start"
    assert config.sso.region == "us-east-1"
    assert config.sso.role == "AdministratorAccess"
    assert config.aws.default_region == "us-east-1"
    assert ".aws/config" in config.aws.config_file
    assert config_file.is_file()
    assert "[sso]" in config_file.read_text()


def test_load_existing(tmp_path):
    config_file = write(tmp_path / "test-config", """[sso]
start_url = "https://test.awsapps.com/start"
region = "us-west-2"
role = "TestRole"

[aws]
default_region = "eu-central-1"
config_file = "/custom/aws/config"
""")
    config = ConfigManager(config_file).load()
    assert config.sso.start_url == "https://test.awsapps.com/start"
    assert config.sso.region == "us-west-2"
    assert config.sso.role == "TestRole"
    assert config.aws.default_region == "eu-central-1"
    assert config.aws.config_file == "/custom/aws/config"


def test_load_missing_sections(tmp_path):
    config_file = write(tmp_path / "test-config", """[sso]
start_url = "https://test.awsapps.com/start"
region = "us-west-2"
""")
    config = ConfigManager(config_file).load()
    assert config.sso.start_url == "https://test.awsapps.com/start"
    assert config.sso.region == "us-west-2"
    assert config.sso.role == "AdministratorAccess"
    assert config.aws.default_region == "us-east-1"
    assert ".aws/config" in config.aws.config_file


def test_load_env_override(tmp_path, monkeypatch):
    config_file = write(tmp_path / "test-config", '[sso]\nregion = "us-west-2"\n')
    monkeypatch.setenv("AWS_SSO_CONFIG_SSO_REGION", "eu-north-1")
    config = ConfigManager(config_file).load()
    assert config.sso.region == "eu-north-1"


def test_load_malformed_raises(tmp_path):
    config_file = write(tmp_path / "bad", "[sso\nstart_url = ")
    with pytest.raises(ConfigError, match="error reading config file"):
        ConfigManager(config_file).load()


def test_save_sso(tmp_path):
    config_file = tmp_path / "test-config"
    cm = ConfigManager(config_file)
    cm.save_provider_config("sso", SSOSettings("https://example.awsapps.com/start", "eu-west-1", "MyRole"))
    assert config_file.is_file()
    config = cm.load()
    assert config.sso.start_url == "https://example.awsapps.com/start"
    assert config.sso.region == "eu-west-1"
    assert config.sso.role == "MyRole"


def test_save_aws(tmp_path):
    cm = ConfigManager(tmp_path / "test-config")
    cm.save_provider_config("aws", AWSSettings("ap-southeast-1", "/custom/aws/config"))
    config = cm.load()
    assert config.aws.default_region == "ap-southeast-1"
    assert config.aws.config_file == "/custom/aws/config"


def test_save_preserves_other_sections(tmp_path):
    cm = ConfigManager(tmp_path / "test-config")
    cm.save_provider_config("sso", SSOSettings("https://example.awsapps.com/start", "us-east-1", "SSORole"))
    cm.save_provider_config("aws", AWSSettings("us-west-2", "/custom/config"))
    config = cm.load()
    assert config.sso.start_url == "https://example.awsapps.com/start"
    assert config.sso.region == "us-east-1"
    assert config.sso.role == "SSORole"
    assert config.aws.default_region == "us-west-2"
    assert config.aws.config_file == "/custom/config"


def test_save_skips_empty_fields(tmp_path):
    config_file = write(tmp_path / "test-config", '[sso]\nregion = "eu-west-3"\n')
    cm = ConfigManager(config_file)
    cm.save_provider_config("sso", SSOSettings(start_url="https://new.awsapps.com/start"))
    config = cm.load()
    assert config.sso.region == "eu-west-3"
    assert config.sso.start_url == "https://new.awsapps.com/start"


def test_save_invalid_provider(tmp_path):
    cm = ConfigManager(tmp_path / "test-config")
    with pytest.raises(ConfigError, match="unknown provider: invalid"):
        cm.save_provider_config("invalid", "some data")


def test_load_config_for_sso_key(tmp_path):
    config_file = write(tmp_path / "test-config", """[sso]
start_url = "https://test.awsapps.com/start"
region = "us-west-2"
role = "TestRole"
""")
    config = load_config_for_key(config_file, "sso.start_url")
    assert config.sso.start_url == "https://test.awsapps.com/start"


def test_load_config_for_aws_key(tmp_path):
    config_file = write(tmp_path / "test-config", """[aws]
default_region = "eu-central-1"
config_file = "/custom/aws/config"
""")
    config = load_config_for_key(config_file, "aws.default_region")
    assert config.aws.default_region == "eu-central-1"


def test_load_config_for_key_unreadable_returns_defaults(tmp_path):
    blocker = write(tmp_path / "blocker", "x")
    config = load_config_for_key(blocker / "config", "sso.start_url")
    assert config.sso.start_url == "https://your-sso-portal.awsapps.com/start"
    assert config.aws.default_region == ""


def test_load_config_for_key_invalid_prefix(tmp_path):
    blocker = write(tmp_path / "blocker", "x")
    with pytest.raises(ConfigError, match="unknown key prefix for key: invalid.key"):
        load_config_for_key(blocker / "config", "invalid.key")


def test_load_custom_path(tmp_path):
    config_file = write(tmp_path / "test-config", """[sso]
start_url = "https://test.awsapps.com/start"
region = "us-west-2"
""")
    config = load(config_file)
    assert config.sso.start_url == "https://test.awsapps.com/start"
    assert config.sso.region == "us-west-2"


def test_load_default_location(clean_env):
    config = load("")
    assert config.sso.start_url == "https://your-sso-portal.awsapps.com/start"
    assert (clean_env / ".awsssoconfig").is_file()


def _full(**overrides):
    sso = SSOSettings(start_url="https://test.awsapps.com/start", region="us-east-1")
    aws = AWSSettings(default_region="us-east-1", config_file="/home/user/.aws/config")
    for name, value in overrides.items():
        section, attr = name.split("__")
        setattr(sso if section == "sso" else aws, attr, value)
    return AppConfig(sso=sso, aws=aws)


def test_valid_config_passes():
    config = _full()
    config.validate()
    assert config.sso.region == "us-east-1"


@pytest.mark.parametrize("override, message", [
    ({"sso__start_url": ""}, "SSO start URL is required"),
    ({"sso__region": ""}, "SSO region is required"),
    ({"aws__default_region": ""}, "AWS default region is required"),
    ({"aws__config_file": ""}, "AWS config file path is required"),
])
def test_config_validation_errors(override, message):
    with pytest.raises(ConfigError, match=message):
        _full(**override).validate()


def test_default_config():
    config = default_config()
    assert config.sso.start_url == "https://your-sso-portal.awsapps.com/start"
    assert config.sso.region == "us-east-1"
    assert config.sso.role == "AdministratorAccess"
    assert config.aws.default_region == "us-east-1"
    assert ".aws/config" in config.aws.config_file


def test_default_sso():
    sso = default_sso()
    assert (sso.start_url, sso.region, sso.role) == (
        "https://your-sso-portal.awsapps.com/start", "us-east-1", "AdministratorAccess")


def test_sso_validate_ok():
    sso = SSOSettings("https://test.awsapps.com/start", "us-west-2", "TestRole")
    sso.validate()
    assert sso.role == "TestRole"


def test_sso_validate_missing_start_url():
    with pytest.raises(ConfigError, match="SSO start URL is required"):
        SSOSettings(region="us-west-2", role="TestRole").validate()


def test_sso_validate_missing_region():
    with pytest.raises(ConfigError, match="SSO region is required"):
        SSOSettings(start_url="https://test.awsapps.com/start", role="TestRole").validate()


def test_sso_set_defaults():
    sso = SSOSettings()
    sso.set_defaults()
    assert sso == default_sso()


def test_sso_set_defaults_preserves():
    sso = SSOSettings(start_url="https://custom.awsapps.com/start", region="eu-west-1")
    sso.set_defaults()
    assert sso.start_url == "https://custom.awsapps.com/start"
    assert sso.region == "eu-west-1"
    assert sso.role == "AdministratorAccess"


def test_sso_section_and_content():
    sso = SSOSettings()
    assert sso.section_name() == "sso"
    content = sso.default_content()
    assert "[sso]" in content
    assert 'start_url = "https://your-sso-portal.awsapps.com/start"' in content
    assert 'region = "us-east-1"' in content
    assert 'role = "AdministratorAccess"' in content


def test_default_aws():
    aws = default_aws()
    assert aws.default_region == "us-east-1"
    assert ".aws/config" in aws.config_file


def test_aws_validate_ok():
    aws = AWSSettings("us-west-2", "/home/user/.aws/config")
    aws.validate()
    assert aws.default_region == "us-west-2"


def test_aws_validate_missing_region():
    with pytest.raises(ConfigError, match="AWS default region is required"):
        AWSSettings(config_file="/home/user/.aws/config").validate()


def test_aws_validate_missing_file():
    with pytest.raises(ConfigError, match="AWS config file path is required"):
        AWSSettings(default_region="us-west-2").validate()


def test_aws_set_defaults():
    aws = AWSSettings()
    aws.set_defaults()
    assert aws.default_region == "us-east-1"
    assert ".aws/config" in aws.config_file


def test_aws_set_defaults_preserves():
    aws = AWSSettings(default_region="eu-central-1")
    aws.set_defaults()
    assert aws.default_region == "eu-central-1"
    assert ".aws/config" in aws.config_file


def test_aws_section_and_content():
    aws = AWSSettings()
    assert aws.section_name() == "aws"
    content = aws.default_content()
    assert "[aws]" in content
    assert 'default_region = "us-east-1"' in content
    assert 'config_file = "~/.aws/config"' in content