"""HTTP fetcher built on requests with retries and URL safety checks."""

import logging
import time

import requests

from gleaner.core.fetcher.base import ContentAnalyzer, HTMLFetcher
from gleaner.core.fetcher.security import validate_url
from gleaner.exceptions import FetchError
from gleaner.models.descriptors import FetchSettings
from gleaner.models.results import FetchResult
from gleaner.retry import get_retryer, log_retry
from gleaner.utils.headers import HeaderGenerator, UserAgentRotator


class SimpleFetcher(HTMLFetcher):
    """Fetches pages over HTTP(S) with a pooled requests session.

    Transport errors and non-2xx responses are retried with exponential
    backoff up to ``settings.max_retries`` extra attempts.

    Attributes:
        settings: Timeout, headers, proxy and retry settings
        retry_wait_min: Minimum backoff between attempts in seconds
        retry_wait_max: Maximum backoff between attempts in seconds
        session: Requests session shared by all fetches

    """

    def __init__(
        self,
        settings: FetchSettings | None = None,
        retry_wait_min: float = 1.0,
        retry_wait_max: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the fetcher.

        Args:
            settings: Transport settings, defaults to FetchSettings()
            retry_wait_min: Minimum backoff between attempts in seconds
            retry_wait_max: Maximum backoff between attempts in seconds
            session: Session to reuse, a new one is created otherwise

        """
        self.settings = settings or FetchSettings()
        self.retry_wait_min = retry_wait_min
        self.retry_wait_max = retry_wait_max
        self.session = session or requests.Session()
        if self.settings.proxy:
            self.session.proxies.update({'http': self.settings.proxy, 'https': self.settings.proxy})
        self.logger = logging.getLogger(__name__)

    def _get_headers(self) -> dict[str, str]:
        if self.settings.random_user_agent:
            user_agent = UserAgentRotator.get_random()
        else:
            user_agent = self.settings.user_agent
        return HeaderGenerator.generate_headers(user_agent, self.settings.headers)

    def _request(self, url: str) -> requests.Response:
        response = self.session.get(
            url,
            headers=self._get_headers(),
            timeout=self.settings.timeout,
            allow_redirects=True,
        )
        if not 200 <= response.status_code < 300:
            raise FetchError(url, f'HTTP {response.status_code}', response.status_code)
        return response

    def fetch(self, url: str) -> FetchResult:
        """Fetch a URL.

        Args:
            url: The URL being fetched

        Returns:
            FetchResult with the body, or with ``error`` set on failure

        """
        start_time = time.time()

        try:
            validate_url(url, allow_private_ips=self.settings.allow_private_ips)
        except FetchError as e:
            self.logger.warning(f'Refusing to fetch {url}: {e.reason}')
            return FetchResult(url=url, error=e.reason, fetch_time=time.time() - start_time)

        retryer = get_retryer(
            max_attempts=self.settings.max_retries + 1,
            wait_min=self.retry_wait_min,
            wait_max=self.retry_wait_max,
            exceptions=(requests.RequestException, FetchError),
            log_callback=log_retry,
        )

        try:
            for attempt in retryer:
                with attempt:
                    response = self._request(url)
        except FetchError as e:
            self.logger.warning(f'Fetch failed for {url}: {e.reason}')
            return FetchResult(
                url=url, status_code=e.status_code, error=e.reason, fetch_time=time.time() - start_time
            )
        except requests.RequestException as e:
            self.logger.warning(f'Fetch failed for {url}: {e}')
            return FetchResult(url=url, error=str(e), fetch_time=time.time() - start_time)

        body = response.text
        return FetchResult(
            url=url,
            html=body,
            status_code=response.status_code,
            fetch_time=time.time() - start_time,
            metadata=ContentAnalyzer.analyze(body),
        )

    def close(self) -> None:
        """Close the session."""
        self.session.close()
