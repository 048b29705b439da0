"""Signal classifier: maps a confluence score to BUY / SELL / HOLD."""

from __future__ import annotations

from trend_core.models.config import ScoringConfig
from trend_core.models.signal import ScoreRecord, Signal


def classify(score: float | ScoreRecord, config: ScoringConfig | None = None) -> Signal:
    """
    Classify a score against the configured thresholds.

    score >= buy_threshold -> BUY, score <= sell_threshold -> SELL,
    otherwise HOLD.

    Args:
        score: Raw score or a ScoreRecord
        config: Scoring config holding the thresholds

    Returns:
        The classified Signal
    """
    cfg = config or ScoringConfig()
    value = score.score if isinstance(score, ScoreRecord) else score
    if value >= cfg.buy_threshold:
        return Signal.BUY
    if value <= cfg.sell_threshold:
        return Signal.SELL
    return Signal.HOLD
