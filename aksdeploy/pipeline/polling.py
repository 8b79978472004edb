"""External IP discovery."""
import logging
import time
from typing import Callable, Optional

from ..console import console
from ..errors import ExternalIpTimeout

logger = logging.getLogger(__name__)


def wait_for_external_ip(
    query: Callable[[], str],
    service: str,
    interval: float = 10,
    initial_delay: float = 10,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> str:
    """Poll until a LoadBalancer IP is assigned to ``service``.

    Args:
        query: Returns the current ingress IP, "" while none is assigned.
        service: Service name, used in messages.
        interval: Seconds between polls.
        initial_delay: Seconds to wait before the first poll.
        timeout: Give up after this many seconds; None polls until interrupted.
        sleep: Sleep function.
        clock: Monotonic clock.

    Returns:
        str: The first non-empty IP observed.

    Raises:
        ExternalIpTimeout: If ``timeout`` elapses without an IP.
    """
    start = clock()
    if initial_delay:
        sleep(initial_delay)

    while True:
        ip = query().strip()
        if ip:
            logger.debug("Service %s got external IP %s", service, ip)
            return ip

        if timeout is not None and clock() - start + interval > timeout:
            raise ExternalIpTimeout(service, timeout)

        console.print("⏳ Waiting for external IP...")
        sleep(interval)
