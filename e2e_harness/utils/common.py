"""
Random test data helpers.
"""

import random
import string
from typing import Sequence, TypeVar

from ..core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ALPHANUMERIC = string.ascii_letters + string.digits


def generate_random_string(length: int) -> str:
    """Random alphanumeric string of ``length`` characters."""
    result = "".join(random.choice(ALPHANUMERIC) for _ in range(max(length, 0)))
    logger.debug(f"Generated random string: {result}")
    return result


def generate_random_number(count: int) -> str:
    """
    Random digit string of ``count`` digits whose first digit is never zero.

    Returns an empty string when ``count`` is not positive.
    """
    if count <= 0:
        logger.warning("Count must be greater than 0")
        return ""
    result = str(random.randint(1, 9)) + "".join(
        random.choice(string.digits) for _ in range(count - 1)
    )
    logger.debug(f"Generated random number: {result}")
    return result


def generate_random_numeric(length: int) -> str:
    """Random digit string of ``length`` digits, leading zeros allowed."""
    if length <= 0:
        logger.warning("Length must be greater than 0")
        return ""
    return "".join(random.choice(string.digits) for _ in range(length))


def get_random_value_from_list(values: Sequence[T]) -> T:
    if not values:
        logger.error("List is empty or invalid")
        raise ValueError("List is empty or invalid")
    selected = random.choice(values)
    logger.debug(f"Selected random value: {selected}")
    return selected


def random_number(minimum: int, maximum: int) -> int:
    """Random integer between ``minimum`` and ``maximum`` inclusive."""
    if minimum > maximum:
        raise ValueError(f"minimum ({minimum}) must not exceed maximum ({maximum})")
    return random.randint(minimum, maximum)
