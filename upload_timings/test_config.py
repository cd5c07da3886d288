import os
import pytest

from upload_timings.config import load_config
from upload_timings.exceptions import ConfigurationError

ENVIRON = {
    "INSTANCE_URL": "https://instance.example.test/",
    "SYS_ADMIN_USERNAME": "sysadmin",
    "PASSWORD": "secret",
    "CONTENT_RECORD_PATH": "/Content/12/34",
}


def test_load_config_defaults(tmp_path):
    config = load_config(base_dir=tmp_path, environ=ENVIRON)

    assert config.instance_url == "https://instance.example.test"
    assert config.username == "sysadmin"
    assert config.password == "secret"
    assert config.num_of_timings == 1
    assert config.timeout is None
    assert config.headless is True
    assert config.log_level == "INFO"
    assert config.log_file is None


def test_load_config_derived_paths(tmp_path):
    config = load_config(base_dir=tmp_path, environ={**ENVIRON, "CONTENT_RECORD_PATH": "/Content/12/34/"})

    assert config.record_path == "/Content/12/34/Edit"
    assert config.save_attachments_path == "/Content/12/34/SaveAttachments"
    assert config.auth_path == tmp_path / ".auth" / "sysAdmin.json"
    assert config.test_files_path == tmp_path / "testFiles"
    assert config.results_path == tmp_path / "results"


def test_load_config_optional_values(tmp_path):
    environ = {
        **ENVIRON,
        "NUM_OF_TIMINGS": "3",
        "TIMEOUT_MS": "2500",
        "HEADLESS": "false",
        "LOG_LEVEL": "DEBUG",
        "LOG_FILE": "logs/run.log",
    }

    config = load_config(base_dir=tmp_path, environ=environ)

    assert config.num_of_timings == 3
    assert config.timeout == 2500
    assert config.headless is False
    assert config.log_level == "DEBUG"
    assert config.log_file == "logs/run.log"


def test_load_config_lists_every_missing_variable(tmp_path):
    environ = {"INSTANCE_URL": "https://instance.example.test", "PASSWORD": ""}

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(base_dir=tmp_path, environ=environ)

    message = str(exc_info.value)
    assert "SYS_ADMIN_USERNAME" in message
    assert "PASSWORD" in message
    assert "CONTENT_RECORD_PATH" in message
    assert "INSTANCE_URL" not in message


@pytest.mark.parametrize("name,value", [
    ("NUM_OF_TIMINGS", "0"),
    ("NUM_OF_TIMINGS", "two"),
    ("TIMEOUT_MS", "-1"),
    ("TIMEOUT_MS", "soon"),
    ("HEADLESS", "maybe"),
])
def test_load_config_rejects_invalid_values(tmp_path, name, value):
    with pytest.raises(ConfigurationError, match=name):
        load_config(base_dir=tmp_path, environ={**ENVIRON, name: value})


def test_load_config_reads_dotenv_file(tmp_path, monkeypatch):
    monkeypatch.setattr(os, "environ", {"PASSWORD": "from-environment"})
    (tmp_path / ".env").write_text(
        "INSTANCE_URL=https://dotenv.example.test\n"
        "SYS_ADMIN_USERNAME=dotenv-admin\n"
        "PASSWORD=from-dotenv\n"
        "CONTENT_RECORD_PATH=/Content/7\n"
    )

    config = load_config(base_dir=tmp_path)

    assert config.instance_url == "https://dotenv.example.test"
    assert config.username == "dotenv-admin"
    # Variables already in the environment win over the .env file
    assert config.password == "from-environment"
    assert config.base_dir == tmp_path
