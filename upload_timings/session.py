import logging
import re
from pathlib import Path

from playwright.sync_api import Browser

from upload_timings.config import Config

logger = logging.getLogger(__name__)

LOGIN_PATH = "/Public/Login"
DASHBOARD_URL = re.compile(r"/Dashboard")


def login(browser: Browser, config: Config) -> Path:
    """
    Logs into the instance and saves the authenticated session state.

    Any element that cannot be found, or a dashboard that is never reached,
    raises Playwright's TimeoutError.

    Args:
        browser: A launched Playwright browser.
        config: The run configuration.

    Returns:
        Path of the saved storage state.
    """
    logger.info(f"Logging into {config.instance_url} as {config.username}")
    context = browser.new_context(base_url=config.instance_url)
    try:
        if config.timeout is not None:
            context.set_default_timeout(config.timeout)
            context.set_default_navigation_timeout(config.timeout)

        page = context.new_page()
        page.goto(LOGIN_PATH)

        page.get_by_placeholder("Username").fill(config.username)
        page.get_by_placeholder("Password").fill(config.password)
        page.get_by_text("Login").click()

        page.wait_for_url(DASHBOARD_URL)

        config.auth_path.parent.mkdir(parents=True, exist_ok=True)
        context.storage_state(path=config.auth_path)
    finally:
        context.close()

    logger.info(f"Saved session state to {config.auth_path}")
    return config.auth_path
