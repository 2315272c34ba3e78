"""
Response Parser - turns a free-text model reply into a (likelihood, reason) pair.

The model is not asked for structured output, so this is string scraping:
the first number anywhere in the reply is the likelihood.
"""
import logging
import random
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_NUMBER_WITH_PERCENT = re.compile(r"\d+(?:\.\d+)?%?")

NO_REASON = "No specific reason provided"


class UnparseableResponseError(ValueError):
    """The model reply carried no usable likelihood."""
    pass


@dataclass(frozen=True)
class ParsedInterest:
    likelihood: float
    reason: str
    # True when no number was found and the likelihood was drawn at random
    fallback: bool = False


def clamp_likelihood(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def parse_interest_response(text: Optional[str], rng: Optional[random.Random] = None) -> ParsedInterest:
    """
    Parse a raw completion. Never raises.

    If no number is present, a uniform random likelihood in [0, 100) is
    substituted and ``fallback`` is set so callers can refuse it.
    """
    text = text or ""
    match = _NUMBER.search(text)
    if match:
        likelihood = clamp_likelihood(float(match.group(0)))
        fallback = False
    else:
        likelihood = (rng or random).random() * 100
        fallback = True
        logger.warning(f"No likelihood found in model reply ({len(text)} chars); using random fallback")

    reason = _NUMBER_WITH_PERCENT.sub("", text, count=1).strip()
    return ParsedInterest(likelihood=likelihood, reason=reason or NO_REASON, fallback=fallback)
