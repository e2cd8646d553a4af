# score_resolver.py
# Raw classifier output -> winning mood + confidence + ranked score list.
import math
from dataclasses import dataclass, field

from errors import ClassificationFormatError
from mood_labels import Mood, normalize, SENTIMENT_POSITIONAL

DEFAULT_CONFIDENCE = 0.5


@dataclass(frozen=True)
class RawScore:
    label: str
    score: float


@dataclass(frozen=True)
class ScoredMood:
    mood: Mood
    confidence: float

    def to_dict(self):
        return {"label": self.mood.value, "score": round(self.confidence, 2)}


@dataclass(frozen=True)
class Resolution:
    """Outcome of classifying one entry.

    ``confidence`` is kept unrounded: it is what gets persisted and what the
    aggregators weight by. Only ``to_dict`` rounds, for display.
    """
    mood: Mood
    confidence: float
    all_scores: tuple = field(default_factory=tuple)

    def to_dict(self):
        return {
            "mood": self.mood.value,
            "confidence": round(self.confidence, 2),
            "allScores": [s.to_dict() for s in self.all_scores],
        }


def default_resolution() -> Resolution:
    """No signal is treated as neutral, not as an error."""
    return Resolution(Mood.NEUTRAL, DEFAULT_CONFIDENCE, ())


def parse_raw_classification(payload) -> list:
    """Decode a classifier JSON body into a list of RawScore.

    Accepts the inference API's nested shape ``[[{label, score}, ...]]`` and
    a flat ``[{label, score}, ...]``.
    """
    if not isinstance(payload, list):
        raise ClassificationFormatError(f"expected a list, got {type(payload).__name__}")
    if payload and isinstance(payload[0], list):
        payload = payload[0]

    out = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ClassificationFormatError(f"item {i} is not an object")
        label, score = item.get("label"), item.get("score")
        if not isinstance(label, str):
            raise ClassificationFormatError(f"item {i} has no string label")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ClassificationFormatError(f"item {i} has a non-numeric score")
        if math.isnan(score) or not 0 <= score <= 1:
            raise ClassificationFormatError(f"item {i} score {score!r} outside [0, 1]")
        out.append(RawScore(label, float(score)))
    return out


def resolve(raw, positional=SENTIMENT_POSITIONAL) -> Resolution:
    """Pick the winning mood from a full raw score distribution.

    ``raw`` is a sequence of RawScore (or ``{label, score}`` dicts, which are
    validated through ``parse_raw_classification``). Ties keep the order
    the classifier emitted them in.
    """
    if raw is None:
        raw = []
    try:
        raw = list(raw)
    except TypeError:
        raise ClassificationFormatError(f"expected a list, got {type(raw).__name__}") from None
    if not all(isinstance(r, RawScore) for r in raw):
        raw = parse_raw_classification(raw)
    if not raw:
        return default_resolution()

    scored = [ScoredMood(normalize(r.label, positional), r.score) for r in raw]
    # sorted() is stable, so equal scores stay in input order
    ranked = tuple(sorted(scored, key=lambda s: s.confidence, reverse=True))
    top = ranked[0]
    return Resolution(top.mood, top.confidence, ranked)
