import logging
import re
from pathlib import Path

from playwright.sync_api import Browser, Page

from upload_timings.config import Config
from upload_timings.exceptions import ConfigurationError
from upload_timings.timings import Timing, TimingObserver

logger = logging.getLogger(__name__)

SAVE_ATTACHMENTS_URL = re.compile(r"/Content/(\d+/)?\d+/SaveAttachments")

# Upper bound for the observer to catch up once the last record is saved
SETTLE_TIMEOUT_MS = 5000


def list_test_files(directory: Path) -> list[Path]:
    """
    Lists the files to upload, sorted by name.
    Subdirectories are skipped.

    Raises:
        ConfigurationError: If the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Test files directory not found: {directory}")
    return sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name)


def upload_file(page: Page, config: Config, file_path: Path):
    """
    Attaches one file to the open record and saves the record.

    Args:
        page: Page showing the record edit view.
        config: The run configuration.
        file_path: File to attach.
    """
    logger.debug(f"Attaching {file_path.name}")
    with page.expect_response(SAVE_ATTACHMENTS_URL):
        with page.expect_file_chooser() as fc_info:
            page.get_by_text("Add Attachment").click()
        fc_info.value.set_files(file_path.resolve())

    logger.debug(f"Saving record after attaching {file_path.name}")
    with page.expect_response(
        lambda r: config.record_path in r.url and r.request.method == "POST"
    ):
        page.get_by_text("Save Record").click()


def attach_files(browser: Browser, config: Config, num_of_timings: int | None = None) -> list[Timing]:
    """
    Attaches every test file to the record and returns the upload timings.

    Each file is attached and saved num_of_timings times, one after
    another. Any failed step raises and ends the run.

    Args:
        browser: A launched Playwright browser.
        config: The run configuration. The saved session state must exist.
        num_of_timings: Uploads per file. Defaults to config.num_of_timings.

    Returns:
        Timings in the order the upload responses finished.
    """
    if num_of_timings is None:
        num_of_timings = config.num_of_timings

    files = list_test_files(config.test_files_path)
    logger.info(f"Uploading {len(files)} files, {num_of_timings} time(s) each")

    context = browser.new_context(
        storage_state=config.auth_path,
        base_url=config.instance_url,
    )
    try:
        if config.timeout is not None:
            context.set_default_timeout(config.timeout)
            context.set_default_navigation_timeout(config.timeout)

        page = context.new_page()
        observer = TimingObserver(page, config)
        observer.attach()

        page.goto(config.record_path)

        for file_path in files:
            for _ in range(num_of_timings):
                upload_file(page, config, file_path)

        observer.wait_until_settled(len(files) * num_of_timings, timeout_ms=SETTLE_TIMEOUT_MS)
        observer.detach()
    finally:
        context.close()

    if observer.failures:
        logger.warning(f"{len(observer.failures)} uploads finished without a timing")

    return observer.timings
