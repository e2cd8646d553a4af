import csv
import io

CSV_HEADER = ["Date", "Mood", "Confidence", "Entry"]


def entries_to_csv(entries) -> str:
    """Entries as CSV text: UTC timestamp, capitalized mood, percent confidence."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_HEADER)
    for e in entries:
        writer.writerow([
            e.created_at.strftime("%Y-%m-%d %H:%M"),
            e.mood.capitalize(),
            f"{round(e.confidence * 100)}%",
            e.entry,
        ])
    return buf.getvalue()
