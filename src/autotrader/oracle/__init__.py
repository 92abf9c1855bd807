"""Confidence oracle: LLM prompt building, scoring and response parsing."""

from autotrader.oracle.confidence import ConfidenceOracle
from autotrader.oracle.parsing import ConfidenceResult, parse_confidence
from autotrader.oracle.prompts import build_prompt

__all__ = ["ConfidenceOracle", "ConfidenceResult", "build_prompt", "parse_confidence"]
