"""
Verification engine.

verify_one() decides a single link: cache first, then each verifier in
order until one gives a decisive answer. verify() runs verify_one() over
any iterable of (Location, Link) pairs on a pool of worker threads.

Each worker pulls pairs from a shared bounded queue, so a free worker
always takes the next link and one slow link never holds up the batch.
Workers fold their results into a private Outcome; the partial Outcomes
are merged once all workers finish. Because Outcome merging is
associative and commutative, and the final Outcome is normalized, the
result does not depend on thread count or scheduling.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import Iterable, Optional, Sequence

from ..verifiers.base import Verifier, VerifierLike, as_verifier, verifier_name
from .cache import Cache, NullCache
from .config import DEFAULT_WORKERS
from .exceptions import InvalidLink
from .logging import get_logger
from .models import Link, Location, Outcome, ValidationResult

logger = get_logger(__name__)

# Queued pairs allowed per worker before the producer blocks
QUEUE_DEPTH_PER_WORKER = 4

_DONE = object()


def _cache_hit(link: Link, cache: Cache) -> bool:
    try:
        return cache.is_valid(link.href) is True
    except Exception as e:
        # A broken cache only costs us the shortcut
        logger.debug(f"Cache lookup failed for {link.href}: {e}")
        return False


def verify_one(
    link: Link,
    verifiers: Sequence[VerifierLike],
    cache: Cache,
) -> ValidationResult:
    """Classify a single link.

    Args:
        link: The link to check
        verifiers: Verifiers in priority order
        cache: Shared cache, consulted before any verifier

    Returns:
        VALID on a cache hit; otherwise the first result other than
        UNSUPPORTED from the chain, or UNSUPPORTED if none recognize it

    Raises:
        InvalidLink: A verifier recognized the link and found it broken
    """
    if _cache_hit(link, cache):
        logger.trace(f"Cache hit: {link.href}")
        return ValidationResult.VALID

    for verifier in verifiers:
        verifier = as_verifier(verifier)
        result = verifier.verify(link, cache)
        logger.trace(f"{verifier_name(verifier)}: {link.href} -> {result}")
        if result is ValidationResult.UNSUPPORTED:
            continue
        if not isinstance(result, ValidationResult):
            raise TypeError(
                f"{verifier_name(verifier)} returned {result!r}, expected a ValidationResult"
            )
        return result

    return ValidationResult.UNSUPPORTED


def _describe(exc: BaseException) -> str:
    """Render an exception as "Type: message", even if str() fails."""
    name = type(exc).__name__
    try:
        message = str(exc)
    except Exception:
        return name
    return f"{name}: {message}" if message else name


def _check(
    outcome: Outcome,
    location: Location,
    link: Link,
    verifiers: Sequence[Verifier],
    cache: Cache,
) -> Outcome:
    """Classify one link and fold it into a worker's outcome."""
    try:
        result = verify_one(link, verifiers, cache)
    except InvalidLink as e:
        logger.debug(f"{location}: {link.href} is broken ({e.reason})")
        return outcome.with_broken(location, link, e.reason)
    except Exception as e:
        reason = _describe(e)
        logger.error(
            f"{location}: checking {link.href} failed: {reason}",
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        return outcome.with_broken(location, link, reason)

    logger.debug(f"{location}: {link.href} is {result.value}")
    return outcome.with_result(location, link, result)


def verify(
    links: Iterable[tuple[Location, Link]],
    verifiers: Sequence[VerifierLike],
    cache: Optional[Cache] = None,
    workers: Optional[int] = None,
) -> Outcome:
    """Check every (location, link) pair in parallel.

    The iterable is consumed lazily; production runs at most a few items
    per worker ahead of verification. Blocks until every link is done.

    Args:
        links: Pairs to check; may be a generator
        verifiers: Verifiers or plain functions, in priority order
        cache: Shared cache (default: a cache that knows nothing)
        workers: Number of worker threads (default: DEFAULT_WORKERS)

    Returns:
        Normalized Outcome holding every pair exactly once

    Raises:
        ValueError: If workers is less than 1
        Exception: Whatever the links iterable raises while being consumed
        BaseException: A SystemExit or KeyboardInterrupt raised inside a
            worker; the run stops and remaining links are skipped
    """
    chain = tuple(as_verifier(v) for v in verifiers)
    cache = cache if cache is not None else NullCache()
    workers = DEFAULT_WORKERS if workers is None else workers
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    pending: queue.Queue = queue.Queue(maxsize=workers * QUEUE_DEPTH_PER_WORKER)
    aborted = threading.Event()

    def work() -> Outcome:
        outcome = Outcome()
        failure: Optional[BaseException] = None
        while True:
            item = pending.get()
            if item is _DONE:
                break
            if aborted.is_set():
                continue
            location, link = item
            try:
                outcome = _check(outcome, location, link, chain, cache)
            except BaseException as e:
                # Keep draining until _DONE so the producer never blocks
                failure = e
                aborted.set()
        if failure is not None:
            raise failure
        return outcome

    logger.info(
        f"Verifying links with {workers} worker(s) and "
        f"{len(chain)} verifier(s): {', '.join(verifier_name(v) for v in chain) or 'none'}"
    )

    submitted = 0
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="linkverify") as pool:
        futures = [pool.submit(work) for _ in range(workers)]
        try:
            for location, link in links:
                if aborted.is_set():
                    break
                pending.put((location, link))
                submitted += 1
        except BaseException:
            aborted.set()
            raise
        finally:
            for _ in futures:
                pending.put(_DONE)
        partials = [future.result() for future in futures]

    outcome = reduce(Outcome.merge, partials, Outcome()).normalized()
    logger.info(f"Verified {submitted} link(s): {outcome.summary}")
    return outcome
