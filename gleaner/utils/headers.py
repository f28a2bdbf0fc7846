"""User agents and default request headers for the HTTP fetcher."""

import random


class UserAgentRotator:
    """Pool of realistic browser user agents.

    Attributes:
        USER_AGENTS: Mapping of browser family to user agent strings

    """

    USER_AGENTS = {
        'chrome': [
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36',
            'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36',
            'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36',
        ],
        'firefox': [
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0',
            'Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:125.0) Gecko/20100101 Firefox/125.0',
        ],
        'safari': [
            'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15',
        ],
        'edge': [
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.0.0',
        ],
    }

    @classmethod
    def browsers(cls) -> list[str]:
        return sorted(cls.USER_AGENTS)

    @classmethod
    def get_random(cls, browsers: list[str] | None = None) -> str:
        """Get a random user agent, optionally limited to some browser families.

        Args:
            browsers: Browser families to choose from; unknown names are ignored

        Returns:
            A user agent string

        """
        families = [name.lower() for name in browsers] if browsers else cls.browsers()
        pool = [agent for name in families for agent in cls.USER_AGENTS.get(name, [])]
        if not pool:
            pool = [agent for agents in cls.USER_AGENTS.values() for agent in agents]
        return random.choice(pool)


class HeaderGenerator:
    """Builds request headers."""

    DEFAULT_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'

    @staticmethod
    def generate_headers(user_agent: str, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Generate browser-like headers.

        Args:
            user_agent: User-Agent header value
            extra: Caller headers, which override the defaults

        Returns:
            Header mapping for the request

        """
        headers = {
            'User-Agent': user_agent,
            'Accept': HeaderGenerator.DEFAULT_ACCEPT,
            'Accept-Language': 'en-US,en;q=0.9',
        }
        if extra:
            headers.update(extra)
        return headers
