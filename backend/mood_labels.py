# mood_labels.py
# Canonical mood taxonomy, raw-label normalization and the valence scale.
#
# Every classifier we have deployed speaks a slightly different vocabulary
# (positional LABEL_n codes, SST-2 POSITIVE/NEGATIVE, emotion words, VADER
# keys). This module is the only place that knows about those spellings.
import re
from enum import Enum


class Mood(str, Enum):
    SAD = "sad"
    ANGRY = "angry"
    FEAR = "fear"
    DISGUST = "disgust"
    JOY = "joy"
    SURPRISE = "surprise"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNKNOWN = "unknown"


# Output order of the 3-way sentiment models (cardiffnlp style): 0, 1, 2.
SENTIMENT_POSITIONAL = (Mood.NEGATIVE, Mood.NEUTRAL, Mood.POSITIVE)

SYNONYMS = {
    # canonical spellings
    **{m.value: m for m in Mood},
    # emotion-english-distilroberta-base
    "sadness": Mood.SAD,
    "anger": Mood.ANGRY,
    "joy": Mood.JOY,
    # VADER polarity keys
    "neg": Mood.NEGATIVE,
    "neu": Mood.NEUTRAL,
    "pos": Mood.POSITIVE,
    # moods saved by older app versions
    "happy": Mood.JOY,
    "anxious": Mood.FEAR,
    "excited": Mood.SURPRISE,
    "grateful": Mood.POSITIVE,
}

_POSITIONAL_RE = re.compile(r"^label_(\d+)$")


def normalize(raw_label, positional=SENTIMENT_POSITIONAL) -> Mood:
    """Map any raw classifier label onto the canonical taxonomy.

    Total: unrecognized labels, out-of-range positional codes and
    non-string input all come back as ``Mood.UNKNOWN``.
    """
    if isinstance(raw_label, Mood):
        return raw_label
    if not isinstance(raw_label, str):
        return Mood.UNKNOWN
    key = raw_label.strip().lower()

    m = _POSITIONAL_RE.match(key)
    if m:
        idx = int(m.group(1))
        return positional[idx] if idx < len(positional) else Mood.UNKNOWN

    return SYNONYMS.get(key, Mood.UNKNOWN)


# 1 = most negative, 8 = most positive.
NEUTRAL_VALENCE = 4

VALENCE = {
    Mood.SAD: 1,
    Mood.NEGATIVE: 2,
    Mood.DISGUST: 2,
    Mood.ANGRY: 3,
    Mood.FEAR: 3,
    Mood.NEUTRAL: NEUTRAL_VALENCE,
    Mood.SURPRISE: 6,
    Mood.POSITIVE: 7,
    Mood.JOY: 8,
    Mood.UNKNOWN: NEUTRAL_VALENCE,
}


def valence(mood) -> int:
    return VALENCE[normalize(mood)]


def valence_band(value: float) -> str:
    """Human label for a point on the valence scale (chart tooltips)."""
    if value >= 7:
        return "Very Positive"
    if value >= 5.5:
        return "Positive"
    if value >= 3.5:
        return "Neutral"
    if value >= 2:
        return "Negative"
    return "Very Negative"
