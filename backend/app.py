import logging
import math
import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import Flask, Response, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.exceptions import BadRequest, HTTPException, Unauthorized

import aggregates
import entry_store
from classifier_service import CLASSIFIER_BACKEND, analyze_mood
from errors import StoreFailure
from export_service import entries_to_csv
from models import db

# Load .env locally; on Render, env vars are injected automatically.
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("moodscribe")

app = Flask(__name__)

# --- Database config (hosted Postgres in prod, SQLite locally) ---
app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///moodscribe.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

# Init DB
db.init_app(app)
with app.app_context():
    db.create_all()

# --- CORS (allow your deployed frontend origin if provided) ---
frontend_origin = os.getenv("FRONTEND_ORIGIN")
if frontend_origin:
    CORS(app, resources={r"/*": {"origins": [frontend_origin]}})
else:
    # Dev fallback: allow all (ok for local dev; tighten for prod)
    CORS(app)

DEFAULT_TREND_DAYS = 30
MAX_TREND_DAYS = 366
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


# ---------- Request helpers ----------

def _user_id() -> str:
    # Auth lives in front of this service; we only trust the forwarded id.
    uid = (request.headers.get("X-User-Id") or "").strip()
    if not uid:
        raise Unauthorized("Missing X-User-Id header")
    return uid


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text_field(data):
    text = data.get("entry") or data.get("text") or ""
    if not isinstance(text, str) or not text.strip():
        raise BadRequest("Missing 'entry' text")
    return text.strip()


def _date_arg(name):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise BadRequest(f"'{name}' must be YYYY-MM-DD")


def _int_arg(name, default, lo, hi):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(f"'{name}' must be an integer")
    if not lo <= value <= hi:
        raise BadRequest(f"'{name}' must be between {lo} and {hi}")
    return value


def _tz_arg():
    name = request.args.get("tz")
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise BadRequest(f"Unknown time zone '{name}'")


def _now_arg(tz):
    raw = request.args.get("now")
    if not raw:
        return datetime.now(timezone.utc)
    try:
        # fromisoformat only learned the "Z" suffix in 3.11
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        now = datetime.fromisoformat(raw)
    except ValueError:
        raise BadRequest("'now' must be an ISO-8601 datetime")
    # a naive "now" is wall-clock time in the caller's zone
    if now.tzinfo is None and tz is not None:
        now = now.replace(tzinfo=tz)
    return now


def _filtered_entries(user_id):
    order = (request.args.get("order") or "desc").lower()
    if order not in ("asc", "desc"):
        raise BadRequest("'order' must be asc or desc")
    try:
        return entry_store.query_entries(
            user_id,
            start=_date_arg("start"),
            end=_date_arg("end"),
            mood=request.args.get("mood"),
            search=(request.args.get("q") or "").strip() or None,
            sort=request.args.get("sort") or "created_at",
            descending=order == "desc",
        )
    except ValueError as e:
        raise BadRequest(str(e))


# ---------- Error handlers ----------

@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({"error": e.description}), e.code


@app.errorhandler(StoreFailure)
def handle_store_failure(e):
    return jsonify({"error": str(e), "retry": True}), 503


# ---------- Routes ----------

@app.route("/health")
def health():
    """Simple health check + DB connectivity test."""
    db_ok = True
    try:
        with db.engine.connect() as conn:
            conn.execute(db.text("SELECT 1"))
    except Exception:
        logger.exception("health check: database unreachable")
        db_ok = False
    return jsonify({
        "ok": True,
        "db_ok": db_ok,
        "classifier": CLASSIFIER_BACKEND,
        "time": datetime.now(timezone.utc).isoformat(),
    }), 200


@app.route("/analyze", methods=["POST"])
def analyze():
    """Classify text without saving it."""
    text = _json_body().get("text") or ""
    if not isinstance(text, str):
        raise BadRequest("'text' must be a string")
    # empty text short-circuits to neutral inside analyze_mood
    resolution, warning = analyze_mood(text)
    body = resolution.to_dict()
    if warning:
        body["warning"] = warning
    return jsonify(body), 200


@app.route("/journal", methods=["POST"])
def handle_journal():
    """Create one journal entry: classify + save."""
    user_id = _user_id()
    entry = _text_field(_json_body())

    # 1) Classify (never blocks saving: falls back to neutral)
    resolution, warning = analyze_mood(entry)

    # 2) Save to DB with the unrounded confidence
    j = entry_store.insert_entry(user_id, entry, resolution.mood, resolution.confidence)

    body = {
        "id": j.id,
        "created_at": j.created_at.isoformat() + "Z",
        "mood": resolution.to_dict(),
    }
    if warning:
        body["warning"] = warning
    return jsonify(body), 201


@app.route("/entries", methods=["GET"])
def list_entries():
    """List the caller's entries (latest first), filtered and paginated."""
    user_id = _user_id()
    page = _int_arg("page", 1, 1, 1_000_000)
    per_page = _int_arg("per_page", DEFAULT_PER_PAGE, 1, MAX_PER_PAGE)

    items = _filtered_entries(user_id)
    window = items[(page - 1) * per_page:page * per_page]
    return jsonify({
        "entries": [it.to_dict() for it in window],
        "total": len(items),
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(len(items) / per_page),
    }), 200


@app.route("/entries/export.csv", methods=["GET"])
def export_entries():
    """Download the caller's (filtered) entries as CSV."""
    user_id = _user_id()
    csv_text = entries_to_csv(_filtered_entries(user_id))
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=mood-journal-entries.csv"},
    )


@app.route("/entries/<int:entry_id>", methods=["PUT"])
def update_entry(entry_id: int):
    """Edit an entry's text; its mood stays as classified at creation."""
    user_id = _user_id()
    it = entry_store.update_entry_text(user_id, entry_id, _text_field(_json_body()))
    if not it:
        return jsonify({"error": "Not found"}), 404
    return jsonify(it.to_dict()), 200


@app.route("/entries/<int:entry_id>", methods=["DELETE"])
def delete_entry(entry_id: int):
    """Delete a single entry by id."""
    user_id = _user_id()
    if not entry_store.delete_entry(user_id, entry_id):
        return jsonify({"error": "Not found"}), 404
    return jsonify({"ok": True, "deleted": entry_id}), 200


# ---------- Insights ----------

@app.route("/insights/trend", methods=["GET"])
def insights_trend():
    """Confidence-weighted daily valence for the last `days` days."""
    user_id = _user_id()
    tz = _tz_arg()
    days = _int_arg("days", DEFAULT_TREND_DAYS, 1, MAX_TREND_DAYS)
    reference = _date_arg("date") or aggregates.local_day(datetime.now(timezone.utc), tz)

    points = aggregates.trend(entry_store.query_entries(user_id), days, reference, tz)
    return jsonify({
        "days": days,
        "points": [p.to_dict() for p in points],
        "hasData": any(p.entry_count for p in points),
    }), 200


@app.route("/insights/distribution", methods=["GET"])
def insights_distribution():
    """Entry count per mood, for the pie chart."""
    user_id = _user_id()
    tz = _tz_arg()
    start, end = _date_arg("start"), _date_arg("end")

    # filter on local dates, same as the calendar
    items = [
        e for e in entry_store.query_entries(user_id, descending=False)
        if (start is None or aggregates.local_day(e.created_at, tz) >= start)
        and (end is None or aggregates.local_day(e.created_at, tz) <= end)
    ]
    return jsonify([c.to_dict() for c in aggregates.distribution(items)]), 200


@app.route("/insights/calendar", methods=["GET"])
def insights_calendar():
    """Predominant mood (plus average valence) for each day that has entries."""
    user_id = _user_id()
    tz = _tz_arg()
    start, end = _date_arg("start"), _date_arg("end")

    days = aggregates.daily_aggregates(entry_store.query_entries(user_id), tz)
    days = [
        d for d in days
        if (start is None or d.date >= start) and (end is None or d.date <= end)
    ]
    return jsonify([d.to_dict() for d in days]), 200


@app.route("/insights/summary", methods=["GET"])
def insights_summary():
    """Dashboard counters: totals, this week, top mood, streak, average mood."""
    user_id = _user_id()
    tz = _tz_arg()
    now = _now_arg(tz)
    grace = request.args.get("grace") in ("1", "true")

    items = entry_store.query_entries(user_id)
    body = aggregates.statistics(items, now, tz, grace_today=grace).to_dict()
    body["averageValence"] = round(aggregates.average_valence(items), 2)
    return jsonify(body), 200


if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        debug=os.getenv("FLASK_DEBUG") == "1",
    )
