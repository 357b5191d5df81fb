"""Bounded reads from the review store.

Repository calls are blocking, so they run on a worker thread and are
abandoned once `timeout` seconds pass. A read that does not answer in time
surfaces as ReviewStoreUnavailable, which the API reports as 503.
"""

import asyncio

from reviews.domain import reviews


class ReviewStoreUnavailable(LookupError):
    """The review store did not answer within the configured timeout."""


def _within_domain(fn, *args):
    # Worker threads do not inherit the caller's domain context
    with reviews.domain_context():
        return fn(*args)


async def read_from_store(fn, *args, timeout: float):
    try:
        return await asyncio.wait_for(asyncio.to_thread(_within_domain, fn, *args), timeout=timeout)
    except TimeoutError as exc:
        raise ReviewStoreUnavailable(f"Review store did not answer within {timeout}s") from exc
