# aggregates.py
# Derived views over a user's already-fetched entries: trend, distribution,
# calendar and summary statistics.
#
# Every function here is pure: entries are read, never mutated, and "now" /
# the reference date is always passed in by the caller. An entry is any
# object with ``mood``, ``confidence`` and ``created_at`` attributes
# (models.JournalEntry, or MoodEntry below).
import math
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from mood_labels import Mood, NEUTRAL_VALENCE, normalize, valence, valence_band


@dataclass(frozen=True)
class MoodEntry:
    id: Optional[int]
    user_id: str
    text: str
    mood: str
    confidence: float
    created_at: datetime


@dataclass(frozen=True)
class DailyPoint:
    date: date
    average_valence: float
    entry_count: int

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "averageValence": round(self.average_valence, 2),
            "band": valence_band(round(self.average_valence, 2)),
            "entryCount": self.entry_count,
        }


@dataclass(frozen=True)
class MoodCount:
    mood: Mood
    count: int

    def to_dict(self):
        return {"mood": self.mood.value, "count": self.count}


@dataclass(frozen=True)
class DailyAggregate:
    date: date
    predominant_mood: Mood
    average_valence: float
    entry_count: int

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "predominantMood": self.predominant_mood.value,
            "averageValence": round(self.average_valence, 2),
            "entryCount": self.entry_count,
        }


@dataclass(frozen=True)
class Statistics:
    total_entries: int
    this_week_entries: int
    most_frequent_mood: Mood
    streak: int

    def to_dict(self):
        return {
            "totalEntries": self.total_entries,
            "thisWeekEntries": self.this_week_entries,
            "mostFrequentMood": self.most_frequent_mood.value,
            "streak": self.streak,
        }


# ---------- day helpers ----------

def local_day(moment, tz=None) -> date:
    """Calendar date of a timestamp.

    Stored timestamps are naive UTC. With ``tz`` they are shifted into that
    zone first; without it naive values are taken as-is and aware values
    are read in UTC, so both land on the same calendar.
    """
    if isinstance(moment, datetime):
        if tz is not None:
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            moment = moment.astimezone(tz)
        elif moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
    return moment


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _chronological(entries):
    # stable: same-timestamp entries keep their given order
    return sorted(entries, key=lambda e: e.created_at)


def _group_by_day(entries, tz=None) -> Dict[date, list]:
    days = defaultdict(list)
    for e in entries:
        days[local_day(e.created_at, tz)].append(e)
    return days


def _weighted_valence(entries) -> float:
    values = [valence(e.mood) for e in entries]
    if len(set(values)) == 1:
        # any weighting of a single value is that value; skip the float drift
        return float(values[0])
    weights = math.fsum(e.confidence for e in entries)
    if weights == 0:
        return math.fsum(values) / len(values)
    return math.fsum(v * e.confidence for v, e in zip(values, entries)) / weights


def _first_seen_winner(moods) -> Mood:
    # Counter keeps first-insertion order, and max() returns the first maximum
    counts = Counter(moods)
    return max(counts, key=counts.get)


# ---------- trend ----------

def trend(entries, window_days: int, reference_date, tz=None) -> List[DailyPoint]:
    """Dense per-day series of confidence-weighted valence.

    Covers the ``window_days`` days ending at ``reference_date`` inclusive,
    oldest first. Empty days sit at the neutral baseline.
    """
    if window_days < 1:
        raise ValueError("window_days must be at least 1")
    end = local_day(reference_date, tz)
    start = end - timedelta(days=window_days - 1)

    by_day = _group_by_day(
        (e for e in entries if start <= local_day(e.created_at, tz) <= end), tz
    )

    points = []
    for offset in range(window_days):
        day = start + timedelta(days=offset)
        bucket = by_day.get(day)
        if bucket:
            points.append(DailyPoint(day, _weighted_valence(bucket), len(bucket)))
        else:
            points.append(DailyPoint(day, float(NEUTRAL_VALENCE), 0))
    return points


# ---------- distribution ----------

def distribution(entries) -> List[MoodCount]:
    counts = Counter(normalize(e.mood) for e in entries)
    return [MoodCount(mood, n) for mood, n in counts.items()]


# ---------- calendar ----------

def predominant_mood_by_day(entries, tz=None) -> Dict[date, Mood]:
    """Majority mood per day; ties go to the mood written first that day."""
    by_day = _group_by_day(_chronological(entries), tz)
    return {
        day: _first_seen_winner(normalize(e.mood) for e in bucket)
        for day, bucket in sorted(by_day.items())
    }


def daily_aggregates(entries, tz=None) -> List[DailyAggregate]:
    by_day = _group_by_day(_chronological(entries), tz)
    return [
        DailyAggregate(
            day,
            _first_seen_winner(normalize(e.mood) for e in bucket),
            _weighted_valence(bucket),
            len(bucket),
        )
        for day, bucket in sorted(by_day.items())
    ]


# ---------- statistics ----------

def current_streak(entries, today: date, tz=None, grace_today=False) -> int:
    days = {local_day(e.created_at, tz) for e in entries}
    cursor = today
    if grace_today and cursor not in days:
        cursor -= timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def statistics(entries, now, tz=None, grace_today=False) -> Statistics:
    """Dashboard counters.

    The streak counts back from today and is 0 when today has no entry yet;
    ``grace_today`` lets a run that ended yesterday still count.
    """
    today = local_day(now, tz)
    first_day = week_start(today)
    week_end = first_day + timedelta(days=7)

    ordered = _chronological(entries)
    this_week = sum(1 for e in ordered if first_day <= local_day(e.created_at, tz) < week_end)
    most_frequent = (
        _first_seen_winner(normalize(e.mood) for e in ordered) if ordered else Mood.NEUTRAL
    )
    return Statistics(
        total_entries=len(ordered),
        this_week_entries=this_week,
        most_frequent_mood=most_frequent,
        streak=current_streak(ordered, today, tz, grace_today),
    )


def average_valence(entries) -> float:
    entries = list(entries)
    if not entries:
        return float(NEUTRAL_VALENCE)
    return _weighted_valence(entries)
