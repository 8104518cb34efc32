import json
import os
import re
import tempfile
from datetime import datetime, timedelta

from venuecal import config


def trim_log_by_time(log_path, retention_days=config.LOG_RETENTION_DAYS):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


def save_log(log_path, log_lines):
    """Append this run's log lines to the retained part of the log file."""
    existing_log = trim_log_by_time(log_path)
    log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in log_lines]
    write_text_atomic(log_path, "".join(log_content))


def write_bytes_atomic(path, data):
    """Write bytes to path via a temp file in the same directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def write_text_atomic(path, text):
    write_bytes_atomic(path, text.encode("utf-8"))


def write_json(path, data):
    write_text_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def venue_file_path(out_dir, venue_id):
    return out_dir / f"{venue_id}.json"


def load_venue_file(path):
    """
    Load a previously written venue file.
    Missing, unreadable or malformed files all return None so the run treats
    the venue as having no previous batch.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("shows"), list):
        return None
    return data


def build_venue_file(venue, generated_at, shows):
    return {
        "venue": {
            "id": venue["id"],
            "name": venue["name"],
            "calendar_url": venue["calendar_url"],
        },
        "generated_at": generated_at,
        "shows": shows,
    }


def load_venue_files(out_dir):
    """Load every venue file in out_dir, skipping the merged all-venues file."""
    batches = []
    if not out_dir.exists():
        return batches
    for path in sorted(out_dir.glob("*.json")):
        if path.name == config.ALL_VENUES_FILENAME:
            continue
        data = load_venue_file(path)
        if data is not None:
            batches.append(data)
    return batches


def load_existing_status(status_path):
    """Load existing scrape status file if available."""
    try:
        if status_path.exists():
            with open(status_path, "r") as f:
                return json.load(f)
    except (OSError, ValueError):
        pass
    return {"venues": {}}
