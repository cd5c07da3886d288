import pytest

from upload_timings.config import Config
from upload_timings.fake_instance import CONTENT_RECORD_PATH, FakeInstance


@pytest.fixture
def fake_instance():
    """
    Starts a fake target instance on a free local port.
    Stopped again after the test.
    """
    with FakeInstance(CONTENT_RECORD_PATH) as instance:
        yield instance


@pytest.fixture
def test_files(tmp_path):
    """
    Creates the testFiles/ directory with two small files to upload.

    Returns:
        List of the created file paths, in upload order.
    """
    directory = tmp_path / "testFiles"
    directory.mkdir()
    files = []
    for name, content in [("a_notes.txt", "first file"), ("b_report.csv", "id,value\n1,2\n")]:
        path = directory / name
        path.write_text(content)
        files.append(path)
    return files


@pytest.fixture
def app_config(tmp_path, fake_instance):
    """
    Builds a Config that points at the fake instance and uses tmp_path as base directory.
    Fails fast if elements are missing (2000ms).
    """
    return Config(
        instance_url=fake_instance.url,
        username="sysadmin",
        password="secret",
        content_record_path=CONTENT_RECORD_PATH,
        timeout=2000,
        base_dir=tmp_path,
    )
