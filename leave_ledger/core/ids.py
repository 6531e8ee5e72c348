import itertools
import logging
import random
import string
import time
import uuid

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "id-"
_ALPHABET = string.digits + string.ascii_lowercase
_counter = itertools.count()


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def fallback_id() -> str:
    """
    Clock-derived identifier for hosts without an OS random source.

    Shape: ``id-<ms clock>-<process counter>-<6 random chars>``, all base36.
    The counter makes two calls in one process distinct even within the same millisecond.
    """
    clock = _base36(time.time_ns() // 1_000_000)
    seq = _base36(next(_counter))
    suffix = "".join(random.choices(_ALPHABET, k=6))
    return f"{FALLBACK_PREFIX}{clock}-{seq}-{suffix}"


def new_id() -> str:
    """Random UUID4 string; falls back to :func:`fallback_id` when os.urandom is unavailable."""
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.warning("Secure random source unavailable, using clock-derived identifiers")
        return fallback_id()
