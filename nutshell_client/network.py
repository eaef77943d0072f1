"""Network reachability probe used between retry attempts."""

import asyncio
import logging
import socket
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 3.0


async def is_host_resolvable(hostname: str, port: int = 443, timeout: float = PROBE_TIMEOUT) -> bool:
    """Return True if ``hostname`` resolves to at least one address.

    A failed lookup is treated as "no network": the probe answers only
    whether it is worth trying again, not whether the service is healthy.
    """
    try:
        loop = asyncio.get_running_loop()
        addrinfo = await asyncio.wait_for(
            loop.getaddrinfo(hostname, port, proto=socket.IPPROTO_TCP),
            timeout=timeout,
        )
        return bool(addrinfo)
    except (socket.gaierror, socket.herror, OSError, asyncio.TimeoutError) as e:
        logger.debug("Reachability probe for %s failed: %s", hostname, e)
        return False


def network_probe_for(url: str) -> Callable[[], Awaitable[bool]]:
    """Build a zero-arg reachability probe for the host of ``url``."""
    parsed = urlparse(url)
    host = parsed.hostname or ""
    port = parsed.port or (443 if parsed.scheme == "https" else 80)

    async def probe() -> bool:
        if not host:
            return False
        return await is_host_resolvable(host, port)

    return probe
