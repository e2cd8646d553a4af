from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp; all stored datetimes are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class JournalEntry(db.Model):
    __tablename__ = "journal_entries"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    # Match what app.py uses: `entry=...`
    entry = db.Column(db.Text, nullable=False)

    mood = db.Column(db.String(50), nullable=False)       # canonical, e.g. "joy"
    confidence = db.Column(db.Float, nullable=False)      # unrounded, e.g. 0.9731

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "entry": self.entry,
            "mood": self.mood,
            "confidence": round(float(self.confidence), 2) if self.confidence is not None else None,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
            "updated_at": self.updated_at.isoformat() + "Z" if self.updated_at else None,
        }

    def __repr__(self):
        return f"<JournalEntry id={self.id} user={self.user_id}>"
