"""HTTP page fetcher used by the CLI to download pages for analysis."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

import requests

from structdata.config import settings
from structdata.exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass
class FetchedPage:
    """A downloaded page: final URL after redirects and decoded HTML."""

    url: str
    html: str
    status_code: int
    load_time: float


class PageFetcher:
    """Fetch HTML pages with retries and exponential backoff."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        """Initialize the fetcher.

        Args:
            user_agent: User-Agent header (defaults to settings.USER_AGENT)
            timeout: Request timeout in seconds (defaults to settings.TIMEOUT)
            max_retries: Attempts before giving up (defaults to settings.MAX_RETRIES)
        """
        self.user_agent = user_agent or settings.USER_AGENT
        self.timeout = timeout or settings.TIMEOUT
        self.max_retries = max(1, max_retries or settings.MAX_RETRIES)

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def fetch(self, url: str) -> FetchedPage:
        """Download a page.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedPage with the final URL and HTML text

        Raises:
            FetchError: If every attempt failed
        """
        last_error = None

        for attempt in range(self.max_retries):
            try:
                if attempt > 0:
                    delay = (2 ** attempt) + random.uniform(0, 1)  # Exponential backoff
                    logger.debug(f"Retrying {url} in {delay:.1f}s (attempt {attempt + 1})")
                    time.sleep(delay)

                start_time = time.time()
                response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
                load_time = time.time() - start_time

                response.raise_for_status()

                logger.info(f"Fetched {response.url} ({response.status_code}) in {load_time:.2f}s")
                return FetchedPage(
                    url=response.url or url,
                    html=response.text,
                    status_code=response.status_code,
                    load_time=load_time,
                )

            except requests.exceptions.HTTPError as e:
                last_error = str(e)
                status = e.response.status_code if e.response is not None else None
                # Client errors other than rate limiting will not succeed on retry
                if status is not None and 400 <= status < 500 and status != 429:
                    break

            except requests.exceptions.Timeout:
                last_error = f"Request timeout after {self.timeout}s"

            except requests.exceptions.ConnectionError as e:
                last_error = f"Connection error: {str(e)}"

            logger.warning(f"Fetching {url} failed: {last_error}")

        raise FetchError(url, f"failed after {attempt + 1} attempt(s): {last_error}")
