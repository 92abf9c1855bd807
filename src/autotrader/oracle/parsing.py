"""Extract a confidence score from free-text LLM output.

Order of precedence: the first ``<score>NUM</score>`` tag, then a sentence
of the form ``confidence score of **NUM**``, then zero.
"""

import re
from dataclasses import dataclass

from autotrader.logging import get_logger

logger = get_logger(__name__)

SCORE_TAG = re.compile(r"<score>([0-9.]+)</score>")
SCORE_SENTENCE = re.compile(r"confidence score of \*\*([0-9.]+)\*\*")


@dataclass(frozen=True)
class ConfidenceResult:
    """Parsed oracle verdict. Zero means "do not trade"."""

    confidence: float
    reason: str = ""


def _to_float(raw: str) -> float | None:
    try:
        return float(raw)
    except ValueError:
        return None


def parse_confidence(text: str) -> ConfidenceResult:
    """Parse a confidence score out of ``text``.

    Values outside [0, 1] are returned as-is.

    Returns:
        ConfidenceResult with the score and the text minus the first score
        tag, stripped.
    """
    reason = SCORE_TAG.sub("", text, count=1).strip()

    match = SCORE_TAG.search(text)
    value = _to_float(match.group(1)) if match else None
    if value is None:
        fallback = SCORE_SENTENCE.search(text)
        value = _to_float(fallback.group(1)) if fallback else None

    if value is None:
        logger.warning("confidence_parse_failed", response=text[:200])
        return ConfidenceResult(confidence=0.0, reason=reason)
    return ConfidenceResult(confidence=value, reason=reason)
