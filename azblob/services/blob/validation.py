"""
Request validation and blob naming.

Author: azblob-plugin contributors
Date: 2026
"""

import logging
import math
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from .exceptions import MissingOrInvalidTtl


logger = logging.getLogger(__name__)

# Plain ASCII decimal or exponent notation
TTL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_ttl(raw: Optional[str], max_ttl_minutes: Optional[float] = None) -> float:
    """
    Parse the caller's requested SAS lifetime.

    Fractional minutes are accepted, and there is no upper bound unless
    ``max_ttl_minutes`` is given.

    Args:
        raw: Raw value of the TTL query parameter, or None when absent
        max_ttl_minutes: Optional operator-configured ceiling

    Returns:
        Positive, finite number of minutes

    Raises:
        MissingOrInvalidTtl: If the value is absent, empty, non-numeric,
            not positive, above the ceiling, or too large to express as an
            expiry timestamp
    """
    if raw is None or not raw.strip():
        logger.info("Missing TTL, aborting")
        raise MissingOrInvalidTtl(raw, reason="missing")

    if not TTL_PATTERN.fullmatch(raw.strip()):
        logger.info(f"Non-numeric TTL '{raw}', aborting")
        raise MissingOrInvalidTtl(raw, reason="not_numeric")

    ttl = float(raw)

    if not math.isfinite(ttl):
        logger.info(f"Non-finite TTL '{raw}', aborting")
        raise MissingOrInvalidTtl(raw, reason="not_numeric")

    if ttl <= 0:
        logger.info(f"Non-positive TTL '{raw}', aborting")
        raise MissingOrInvalidTtl(raw, reason="not_positive")

    if max_ttl_minutes is not None and ttl > max_ttl_minutes:
        logger.info(f"TTL {ttl} exceeds the configured maximum of {max_ttl_minutes}, aborting")
        raise MissingOrInvalidTtl(raw, reason="exceeds_maximum")

    try:
        datetime.now(timezone.utc) + timedelta(minutes=ttl, seconds=1)
    except OverflowError:
        logger.info(f"TTL {ttl} puts the expiry beyond the representable range, aborting")
        raise MissingOrInvalidTtl(raw, reason="out_of_range") from None

    return ttl


def normalize_extension(extension: Optional[str]) -> Optional[str]:
    """Strip exactly one leading dot; empty results count as no extension."""
    if not extension:
        return None
    if extension.startswith("."):
        extension = extension[1:]
    return extension or None


def generate_blob_name(extension: Optional[str] = None) -> str:
    """
    Generate a unique blob name from a random UUID.

    Examples:
        generate_blob_name()          -> '3f2b...-...-9c1e'
        generate_blob_name(".log")    -> '3f2b...-...-9c1e.log'
        generate_blob_name("tar.gz")  -> '3f2b...-...-9c1e.tar.gz'
    """
    name = str(uuid.uuid4())
    normalized = normalize_extension(extension)
    if normalized is None:
        return name
    return f"{name}.{normalized}"
