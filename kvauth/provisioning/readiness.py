"""Waiting for a freshly created vault to become reachable.

A new vault's DNS record appears some seconds after the create call
returns. Rather than sleeping a fixed time, poll the data plane with
backoff until it answers or the timeout expires.
"""
import logging
import time
from typing import Callable

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from ..exceptions import AuthenticationFailure, ProvisioningFailure

logger = logging.getLogger(__name__)

# Floor for the wait between checks
MIN_DELAY = 0.5


def is_transient(error: Exception) -> bool:
    """True for failures expected while the vault is still propagating.

    403 is included: the access policy can lag behind the vault itself.
    """
    if isinstance(error, ClientAuthenticationError):
        return False
    if isinstance(error, (ServiceRequestError, ResourceNotFoundError)):
        return True
    if isinstance(error, HttpResponseError):
        status = error.status_code or 0
        return status in (403, 404) or status >= 500
    return False


def wait_until_ready(
    check: Callable[[], object],
    timeout: float = 120.0,
    initial_delay: float = 5.0,
    max_delay: float = 20.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Call `check` until it succeeds.

    Args:
        check: Low-cost call against the new resource
        timeout: Give up after this many seconds; 0 means sleep `initial_delay` once and return
        initial_delay: First wait, doubled after each failed check
        max_delay: Upper bound for a single wait
        sleep: Injected for tests
        clock: Injected for tests

    Returns:
        Number of checks made

    Raises:
        ProvisioningFailure: the resource did not become usable in time, or
            the check failed with a non-transient Azure error
        AuthenticationFailure: the check was rejected for its credential
    """
    if timeout <= 0:
        logger.info(f"Waiting {initial_delay:g}s for the vault DNS record to propagate")
        sleep(initial_delay)
        return 0

    deadline = clock() + timeout
    delay = max(initial_delay, MIN_DELAY)
    attempts = 0

    while True:
        attempts += 1
        try:
            check()
            logger.info(f"Vault is reachable after {attempts} check(s)")
            return attempts
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Key Vault rejected the token: {e}") from e
        except AzureError as e:
            if not is_transient(e):
                raise ProvisioningFailure(f"Vault is not usable: {e}") from e
            remaining = deadline - clock()
            if remaining <= 0:
                raise ProvisioningFailure(f"Vault was not reachable within {timeout:g}s: {e}") from e
            wait = min(delay, max_delay, remaining)
            logger.info(f"Vault not reachable yet ({type(e).__name__}), retrying in {wait:g}s")
            sleep(wait)
            delay = min(delay * 2, max_delay)
