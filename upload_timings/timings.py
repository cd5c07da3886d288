import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, Request

from upload_timings.config import Config
from upload_timings.exceptions import ExtractionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Timing:
    """
    One measured upload.

    Attributes:
        timestamp: ISO-8601 UTC time the request started.
        instance: Base URL of the instance the file was uploaded to.
        file_name: File name reported back by the instance.
        request_time_in_seconds: Time from request start to response end.
    """
    timestamp: str
    instance: str
    file_name: str
    request_time_in_seconds: float


def to_iso_timestamp(epoch_ms: float) -> str:
    """Formats epoch milliseconds the way JavaScript's toISOString does."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extract_timing(body: Any, timing: dict, instance: str, url: str = "") -> Timing:
    """
    Builds a Timing from an upload response body and its request timing.

    Args:
        body: Parsed JSON body of the SaveAttachments response.
        timing: Playwright request timing (startTime in epoch ms, the rest
            in ms relative to startTime).
        instance: Base URL of the instance.
        url: Request URL, used in error messages only.

    Returns:
        The extracted Timing.

    Raises:
        ExtractionError: If the body or the timing does not have the
            expected shape.
    """
    try:
        file_name = body["data"][0]["fileName"]["segments"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise ExtractionError(url, f"unexpected response body ({e!r})")

    try:
        start_time = timing["startTime"]
        request_start = timing["requestStart"]
        response_end = timing["responseEnd"]
        # Playwright reports -1 for phases it could not measure
        unavailable = request_start < 0 or response_end < 0
    except (KeyError, TypeError) as e:
        raise ExtractionError(url, f"incomplete request timing ({e!r})")

    if unavailable:
        raise ExtractionError(url, "request timing not available")

    return Timing(
        timestamp=to_iso_timestamp(start_time),
        instance=instance,
        file_name=str(file_name),
        request_time_in_seconds=(response_end - request_start) / 1000,
    )


class TimingObserver:
    """
    Records a Timing for every finished SaveAttachments request on a page.

    The handler runs on Playwright's event dispatch, independently of the
    code driving the page. Extraction failures are kept in `failures`
    instead of being raised.
    """

    def __init__(self, page: Page, config: Config):
        self.page = page
        self.config = config
        self.timings: list[Timing] = []
        self.failures: list[ExtractionError] = []

    @property
    def observed(self) -> int:
        return len(self.timings) + len(self.failures)

    def matches(self, url: str) -> bool:
        return self.config.save_attachments_path in url

    def attach(self):
        self.page.on("requestfinished", self._on_request_finished)

    def detach(self):
        self.page.remove_listener("requestfinished", self._on_request_finished)

    def _on_request_finished(self, request: Request):
        if not self.matches(request.url):
            return

        try:
            timing = self._capture(request)
        except ExtractionError as e:
            logger.warning(str(e))
            self.failures.append(e)
            return

        logger.info(f"{timing.file_name} took {timing.request_time_in_seconds:.4f} seconds to upload")
        self.timings.append(timing)

    def _capture(self, request: Request) -> Timing:
        try:
            response = request.response()
            if response is None:
                raise ExtractionError(request.url, "request has no response")
            body = response.json()
        except (PlaywrightError, ValueError) as e:
            raise ExtractionError(request.url, f"could not read response body ({e})")

        return extract_timing(body, request.timing, self.config.instance_url, url=request.url)

    def wait_until_settled(self, expected: int, timeout_ms: float = 5000) -> bool:
        """
        Waits until the observer has handled `expected` upload requests.

        Keeps the page's event loop running while waiting so pending
        handlers can finish.

        Args:
            expected: Number of upload requests that should have been seen.
            timeout_ms: Upper bound on the wait.

        Returns:
            True if every expected request was handled, False on timeout.
        """
        deadline = time.monotonic() + timeout_ms / 1000
        while self.observed < expected:
            if time.monotonic() >= deadline:
                logger.warning(
                    f"Observed {self.observed} of {expected} uploads "
                    f"({len(self.timings)} timed, {len(self.failures)} failed)"
                )
                return False
            self.page.wait_for_timeout(50)
        return True
