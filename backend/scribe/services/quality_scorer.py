"""
Quality scoring for generated summaries.

Backends may report per-dimension signals (coherence, coverage, style,
length). The scorer clamps them into [0, 1] and derives the overall
score; when a backend reports nothing, every dimension gets the
"unscored, assume acceptable" default instead of 0 or null.
"""
import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

from scribe.config import settings

DIMENSIONS = ("coherence", "coverage", "style", "length")

DEFAULT_QUALITY_SCORE = settings.default_quality_score

TRANSITION_WORDS = ("however", "therefore", "furthermore", "additionally", "meanwhile")


@dataclass(frozen=True)
class QualityScores:
    coherence: Optional[float]
    coverage: Optional[float]
    style: Optional[float]
    length: Optional[float]
    overall: float

    def as_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _coerce_signal(value: Any) -> Optional[float]:
    """A usable signal as float, or None for missing/non-numeric/NaN values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return _clamp(number)


class QualityScorer:
    """Turns backend quality signals into bounded QualityScores."""

    def __init__(self, default_score: float = DEFAULT_QUALITY_SCORE):
        self.default_score = _clamp(default_score)

    def score(self, result, request=None) -> QualityScores:
        """
        Score an invocation result.

        Only result.quality_signals is read; request is accepted so that
        scoring policies can take the original input into account.
        """
        signals: Mapping[str, Any] = getattr(result, "quality_signals", None) or {}
        return self.score_signals(signals)

    def score_signals(self, signals: Mapping[str, Any]) -> QualityScores:
        values = {name: _coerce_signal(signals.get(name)) for name in DIMENSIONS}
        present = [value for value in values.values() if value is not None]

        if not present:
            return QualityScores(
                coherence=self.default_score,
                coverage=self.default_score,
                style=self.default_score,
                length=self.default_score,
                overall=self.default_score,
            )

        overall = _clamp(sum(present) / len(present))
        return QualityScores(overall=overall, **values)


def estimate_quality_signals(original: str, summary: str) -> Dict[str, float]:
    """
    Heuristic signals for backends that do not grade their own output.

    - length: a summary at 10-30% of the original scores 1.0, falling off linearly around 20%
    - coverage: share of the original's distinct words that survive in the summary
    - style: 1.0 for an average sentence of 50-150 characters, else 0.7
    - coherence: 0.9 when transition words are present, else 0.7
    """
    if not original or not summary:
        return {}

    compression_ratio = len(summary) / len(original)
    if 0.1 <= compression_ratio <= 0.3:
        length_score = 1.0
    else:
        length_score = max(0.0, 1 - abs(compression_ratio - 0.2) * 5)

    original_words = set(original.lower().split())
    summary_words = set(summary.lower().split())
    coverage_score = len(original_words & summary_words) / len(original_words) if original_words else 0.0

    sentences = [s for s in re.split(r"[.!?]+", summary) if s.strip()]
    avg_sentence_length = len(summary) / len(sentences) if sentences else 0
    style_score = 1.0 if 50 <= avg_sentence_length <= 150 else 0.7

    lowered = summary.lower()
    coherence_score = 0.9 if any(word in lowered for word in TRANSITION_WORDS) else 0.7

    return {
        "coherence": round(coherence_score, 2),
        "coverage": round(coverage_score, 2),
        "style": round(style_score, 2),
        "length": round(length_score, 2),
    }
