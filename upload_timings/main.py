import logging
import sys
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from upload_timings.attach import attach_files
from upload_timings.config import Config, load_config
from upload_timings.exceptions import ConfigurationError
from upload_timings.logger import configure_logging
from upload_timings.report import write_csv
from upload_timings.session import login

logger = logging.getLogger(__name__)


def run(config: Config) -> Path:
    """
    Logs in, uploads every test file and writes the timing report.

    The report is only written once both phases have finished.

    Returns:
        Path of the CSV report.
    """
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=config.headless)
        try:
            login(browser, config)
            timings = attach_files(browser, config)
        finally:
            browser.close()

    return write_csv(timings, config.results_path)


def main() -> int:
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level, config.log_file)

    try:
        csv_path = run(config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except PlaywrightError:
        logger.exception("Browser run failed")
        return 2

    logger.info(f"Report written to {csv_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
