import pytest
from unittest.mock import MagicMock

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from upload_timings.attach import SAVE_ATTACHMENTS_URL, attach_files, list_test_files
from upload_timings.config import Config
from upload_timings.exceptions import ConfigurationError


def test_list_test_files_sorted_by_name(tmp_path):
    for name in ["c.txt", "a.pdf", "B.png"]:
        (tmp_path / name).write_text(name)
    (tmp_path / "nested").mkdir()

    files = list_test_files(tmp_path)

    assert [f.name for f in files] == ["B.png", "a.pdf", "c.txt"]


def test_list_test_files_missing_directory(tmp_path):
    with pytest.raises(ConfigurationError, match="testFiles"):
        list_test_files(tmp_path / "testFiles")


@pytest.mark.parametrize("url,matches", [
    ("https://instance.example.test/Content/34/SaveAttachments", True),
    ("https://instance.example.test/Content/12/34/SaveAttachments", True),
    ("https://instance.example.test/Content/12/34/Edit", False),
    ("https://instance.example.test/Content/abc/SaveAttachments", False),
])
def test_save_attachments_url_pattern(url, matches):
    assert bool(SAVE_ATTACHMENTS_URL.search(url)) is matches


def test_attach_files_closes_context_when_a_step_fails(tmp_path, test_files):
    config = Config(
        instance_url="https://instance.example.test",
        username="sysadmin",
        password="secret",
        content_record_path="/Content/12/34",
        base_dir=tmp_path,
    )
    browser = MagicMock()
    context = browser.new_context.return_value
    page = context.new_page.return_value
    # Let exceptions leave the mocked expect_* blocks
    page.expect_response.return_value.__exit__.return_value = False
    page.expect_file_chooser.return_value.__exit__.return_value = False
    page.get_by_text.return_value.click.side_effect = PlaywrightTimeoutError(
        "Timeout 2000ms exceeded waiting for get_by_text(\"Add Attachment\")"
    )

    with pytest.raises(PlaywrightTimeoutError):
        attach_files(browser, config)

    page.get_by_text.assert_called_once_with("Add Attachment")
    context.close.assert_called_once()
    assert not config.results_path.exists()
