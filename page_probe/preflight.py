"""Reachability check for the application under test."""

import logging

import aiohttp

from page_probe.errors import TargetUnreachableError

log = logging.getLogger(__name__)


async def check_reachable(base_url: str, timeout: float = 10) -> int:
    """Issue a GET against ``base_url`` before any browser is launched.

    Args:
        base_url: URL of the application under test
        timeout: Total request timeout in seconds

    Returns:
        The HTTP status of the response

    Raises:
        TargetUnreachableError: On connection failures and HTTP error statuses

    """
    log.info("Checking that %s is reachable", base_url)
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        async with (
            aiohttp.ClientSession(timeout=client_timeout) as session,
            session.get(base_url) as response,
        ):
            status = response.status
    except (aiohttp.ClientError, TimeoutError) as exc:
        raise TargetUnreachableError(f"Cannot reach {base_url}: {exc}") from exc

    if status >= 400:
        raise TargetUnreachableError(f"{base_url} answered with HTTP {status}")

    log.info("%s answered with HTTP %d", base_url, status)
    return status
