# entry_store.py
# Per-user CRUD over journal entries. Every query is scoped by user_id.
import logging
from datetime import datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError

from errors import StoreFailure
from models import db, JournalEntry, utcnow
from mood_labels import normalize

logger = logging.getLogger(__name__)

SORTABLE = {
    "created_at": JournalEntry.created_at,
    "mood": JournalEntry.mood,
    "confidence": JournalEntry.confidence,
}


def _fail(operation, exc):
    db.session.rollback()
    logger.error("entry store %s failed: %s", operation, exc)
    return StoreFailure(operation, exc)


def insert_entry(user_id: str, text: str, mood, confidence: float, created_at=None) -> JournalEntry:
    """Persist a classified entry; mood is stored in canonical form."""
    j = JournalEntry(
        user_id=user_id,
        entry=text,
        mood=normalize(mood).value,
        confidence=confidence,
        created_at=created_at or utcnow(),
    )
    try:
        db.session.add(j)
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("insert", e) from e
    logger.info("saved entry id=%s user=%s mood=%s", j.id, user_id, j.mood)
    return j


def _escape_like(text: str) -> str:
    # user text is matched literally; backslash is the LIKE escape char
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _day_bounds(start, end):
    lo = datetime.combine(start, time.min) if start else None
    hi = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lo, hi


def query_entries(user_id: str, start=None, end=None, mood=None, search=None,
                  sort="created_at", descending=True):
    """Entries of one user, optionally limited to the dates [start, end].

    ``start``/``end`` are dates (inclusive); ``mood`` is any label the
    normalizer understands; ``search`` is a case-insensitive substring.
    """
    column = SORTABLE.get(sort)
    if column is None:
        raise ValueError(f"cannot sort by {sort!r}")

    q = JournalEntry.query.filter(JournalEntry.user_id == user_id)
    lo, hi = _day_bounds(start, end)
    if lo is not None:
        q = q.filter(JournalEntry.created_at >= lo)
    if hi is not None:
        q = q.filter(JournalEntry.created_at < hi)
    if mood:
        q = q.filter(JournalEntry.mood == normalize(mood).value)
    if search:
        q = q.filter(JournalEntry.entry.ilike(f"%{_escape_like(search)}%", escape="\\"))

    order = column.desc() if descending else column.asc()
    try:
        return q.order_by(order, JournalEntry.id.asc()).all()
    except SQLAlchemyError as e:
        raise _fail("query", e) from e


def get_entry(user_id: str, entry_id: int):
    try:
        return JournalEntry.query.filter_by(id=entry_id, user_id=user_id).one_or_none()
    except SQLAlchemyError as e:
        raise _fail("query", e) from e


def update_entry_text(user_id: str, entry_id: int, text: str):
    """Edit the text only; the stored classification is left untouched."""
    j = get_entry(user_id, entry_id)
    if j is None:
        return None
    j.entry = text
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("update", e) from e
    return j


def delete_entry(user_id: str, entry_id: int) -> bool:
    j = get_entry(user_id, entry_id)
    if j is None:
        return False
    try:
        db.session.delete(j)
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail("delete", e) from e
    logger.info("deleted entry id=%s user=%s", entry_id, user_id)
    return True
