"""URL checks applied before any request is made."""

import ipaddress
import logging
import socket
from urllib.parse import urlsplit

from gleaner.exceptions import FetchError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ('http', 'https')
BLOCKED_HOSTNAMES = ('localhost', 'localhost.localdomain')


def is_private_ip(address: str) -> bool:
    """Whether an address is private, loopback, link-local or otherwise internal."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified or ip.is_reserved


def resolve_host(host: str) -> list[str]:
    """Resolve a hostname to its addresses; an empty list if resolution fails."""
    try:
        infos = socket.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError, OSError) as e:
        logger.debug(f'DNS lookup failed for {host}: {e}')
        return []
    return sorted({info[4][0] for info in infos})


def validate_url(url: str, allow_private_ips: bool = False) -> None:
    """Reject URLs the fetcher must not request.

    Only http and https with a host are allowed. Unless private addresses
    are allowed, localhost and hosts resolving to private, loopback or
    link-local addresses are blocked. A failed DNS lookup does not block;
    the request itself will fail instead.

    Args:
        url: URL about to be fetched
        allow_private_ips: Skip the private address checks

    Raises:
        FetchError: If the URL is not allowed

    """
    if not url or not url.strip():
        raise FetchError(url, 'URL is empty')

    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError as e:
        raise FetchError(url, f'invalid URL: {e}') from e

    if parts.scheme not in ALLOWED_SCHEMES:
        raise FetchError(url, f"scheme '{parts.scheme}' not allowed, use http or https")
    if not host:
        raise FetchError(url, 'URL has no host')
    if parts.scheme == 'http':
        logger.warning(f'Fetching over plain http: {url}')

    if allow_private_ips:
        return

    if host.lower() in BLOCKED_HOSTNAMES:
        raise FetchError(url, f'host {host} is not allowed')
    if is_private_ip(host):
        raise FetchError(url, f'address {host} is private')
    for address in resolve_host(host):
        if is_private_ip(address):
            raise FetchError(url, f'host {host} resolves to private address {address}')
