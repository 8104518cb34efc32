#!/usr/bin/env python3
"""
Scrape venue calendars and keep per-venue show files in sync.

For each venue the calendar page is fetched and parsed into artist rows,
the rows are grouped into shows, and the shows are reconciled against the
venue's previous file so show ids stay stable across runs. A venue file is
rewritten only when something changed for today or later.

Currently supports:
- Bottom of the Hill
- The Independent
- The Chapel (paged See Tickets list)
- Rickshaw Stop
"""

import argparse
import sys
import time
import traceback
from datetime import date, datetime
from pathlib import Path

from venuecal import config
from venuecal.errors import ParseError
from venuecal.fetch import fetch_pages
from venuecal.pipeline import io
from venuecal.pipeline.match import diff_shows, preserve_show_ids
from venuecal.pipeline.merge import (
    filter_rows_in_range,
    merge_venue_batches,
    retain_past_shows,
    should_write,
    today_iso,
)
from venuecal.pipeline.metrics import VenueMetrics
from venuecal.pipeline.normalize import normalize_shows
from venuecal.pipeline.r2 import download_from_r2, r2_key, upload_to_r2
from venuecal.pipeline.validate import validate_row, validate_show
from venuecal.registry import VENUES, get_venues, venue_ids


def scrape_venue_rows(venue, reference_date, log):
    """
    Fetch a venue's calendar page(s) and run its parser over each.
    Paged calendars stop at the first page that adds no new listing.
    Raises FetchError or ParseError.
    """
    rows = []
    seen = set()
    page_count = 0

    for page_url, html in fetch_pages(venue, log_func=log):
        page_count += 1
        try:
            page_rows = venue["parser"](html, page_url, reference_date)
        except Exception as e:
            raise ParseError(venue["id"], f"parser failed on {page_url}: {e}") from e

        new_keys = {(row["date"], row.get("show_url", "")) for row in page_rows} - seen
        seen |= new_keys
        rows.extend(page_rows)
        if venue.get("page_param"):
            log(f"  Page {page_count}: {len(page_rows)} rows")
        if not new_keys:
            break

    if not rows:
        raise ParseError(venue["id"], "parsed 0 shows; update selectors or add a custom parser")
    return rows


def reconcile_venue(venue, rows, out_dir, generated_at, today, log, metrics):
    """
    Turn one venue's rows into a batch, carry ids over from the previous
    file and write the file when the today-forward slice changed.
    Returns the payload that is on disk after the call (None if none).
    """
    valid_rows = [row for row in rows if validate_row(row)]
    if len(valid_rows) < len(rows):
        log(f"  Filtered out {len(rows) - len(valid_rows)} invalid rows", "WARNING")

    next_shows = normalize_shows(venue["id"], venue["name"], venue["calendar_url"], valid_rows)

    path = io.venue_file_path(out_dir, venue["id"])
    previous = io.load_venue_file(path)
    if previous is None and path.exists():
        log(f"  Previous file {path.name} is unreadable; treating as new", "WARNING")
    previous_shows = [show for show in (previous or {}).get("shows", []) if validate_show(show)]

    shows = preserve_show_ids(next_shows, previous_shows)
    counts = diff_shows(previous_shows, shows)
    write, future_counts = should_write(previous, previous_shows, shows, today)

    metrics.show_count = len(shows)
    metrics.record_counts(counts)
    metrics.written = write
    log(
        f"  unchanged {counts['unchanged']}, updated {counts['updated']}, "
        f"added {counts['added']}, removed {counts['removed']}"
    )

    if not write:
        log(
            f"  No changes from {today} on (unchanged {future_counts['unchanged']}); "
            f"keeping {path.name}"
        )
        return previous

    payload = io.build_venue_file(venue, generated_at, retain_past_shows(previous_shows, shows, today))
    io.write_json(path, payload)
    log(f"  Saved {len(payload['shows'])} shows to {path}")
    return payload


def build_index(out_dir, generated_at):
    """List every registered venue that has a data file."""
    entries = []
    for venue in VENUES:
        if not io.venue_file_path(out_dir, venue["id"]).exists():
            continue
        entries.append({
            "id": venue["id"],
            "name": venue["name"],
            "calendar_url": venue["calendar_url"],
            "data_path": f"{out_dir.name}/{venue['id']}.json",
        })
    return {"generated_at": generated_at, "venues": entries}


def write_merged_files(out_dir, generated_at, log):
    """Write index.json next to the venue directory and all-venues.json inside it."""
    index_path = out_dir.parent / config.INDEX_FILENAME
    io.write_json(index_path, build_index(out_dir, generated_at))
    log(f"Index saved to {index_path}")

    all_path = out_dir / config.ALL_VENUES_FILENAME
    shows = merge_venue_batches(io.load_venue_files(out_dir))
    io.write_json(all_path, {"generated_at": generated_at, "shows": shows})
    log(f"Merged {len(shows)} shows into {all_path}")
    return [index_path, all_path]


def run_update(
    venue="all",
    start_date=None,
    end_date=None,
    reference_date=None,
    out_dir=None,
    sync_r2=False,
    merge_only=False,
    scraped_by_venue=None,
):
    """
    Run one batch. Returns the process exit status: 1 if any venue failed.
    scraped_by_venue maps venue id to pre-scraped rows and skips fetching
    for those venues.
    """
    out_dir = Path(out_dir) if out_dir else config.VENUES_DIR
    status_path = out_dir.parent / config.STATUS_FILENAME
    log_path = out_dir.parent / config.LOG_FILENAME
    start_date = start_date or config.DEFAULT_START_DATE
    end_date = end_date or config.DEFAULT_END_DATE
    reference_date = reference_date or datetime.utcnow().date()

    run_timestamp = datetime.utcnow().isoformat() + "Z"
    today = today_iso()
    log_lines = []

    def log(message, level="INFO"):
        """Log a message to both console and log buffer."""
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        log_lines.append(f"[{timestamp}] [{level}] {message}")
        print(message, file=sys.stderr if level == "ERROR" else sys.stdout)

    selected = get_venues(venue)
    if not selected:
        log(f'No venues matched "{venue}". Available: {", ".join(venue_ids())}', "ERROR")
        return 1

    out_dir.mkdir(parents=True, exist_ok=True)

    if merge_only:
        written_paths = write_merged_files(out_dir, run_timestamp, log)
        if sync_r2:
            upload_to_r2(written_paths, log_func=log)
        return 0

    log(f"Starting venue update at {run_timestamp} ({start_date} to {end_date})")

    existing_status = io.load_existing_status(status_path)
    venue_statuses = dict(existing_status.get("venues", {}))
    venue_metrics = {}
    written_paths = []

    for entry in selected:
        venue_id = entry["id"]
        log(f"Updating {entry['name']}...")
        metrics = VenueMetrics(name=venue_id)
        start_time = time.time()

        venue_status = {
            "last_run": run_timestamp,
            "success": False,
            "show_count": 0,
            "written": False,
            "counts": None,
            "error": None,
        }

        existing_venue = existing_status.get("venues", {}).get(venue_id, {})
        if existing_venue.get("last_success"):
            venue_status["last_success"] = existing_venue["last_success"]
            venue_status["last_success_count"] = existing_venue.get("last_success_count", 0)

        try:
            if scraped_by_venue and venue_id in scraped_by_venue:
                rows = list(scraped_by_venue[venue_id])
            else:
                rows = scrape_venue_rows(entry, reference_date, log)
            metrics.row_count = len(rows)
            rows = filter_rows_in_range(rows, start_date, end_date)
            log(f"  Found {metrics.row_count} rows, {len(rows)} in range")

            path = io.venue_file_path(out_dir, venue_id)
            if sync_r2:
                download_from_r2(r2_key(path), path)

            reconcile_venue(entry, rows, out_dir, run_timestamp, today, log, metrics)
            if metrics.written:
                written_paths.append(path)

            venue_status["success"] = True
            venue_status["show_count"] = metrics.show_count
            venue_status["written"] = metrics.written
            venue_status["counts"] = {
                "unchanged": metrics.unchanged,
                "updated": metrics.updated,
                "added": metrics.added,
                "removed": metrics.removed,
            }
            venue_status["last_success"] = run_timestamp
            venue_status["last_success_count"] = metrics.show_count

        except Exception as e:
            error_msg = str(e)
            error_trace = traceback.format_exc()
            metrics.errors = 1
            metrics.error_messages.append(error_msg)
            log(f"  ERROR: Failed to update {venue_id}: {error_msg}", "ERROR")
            log(f"  Traceback:\n{error_trace}", "ERROR")

            venue_status["error"] = error_msg
            venue_status["error_trace"] = error_trace

        metrics.duration_ms = (time.time() - start_time) * 1000
        venue_statuses[venue_id] = venue_status
        venue_metrics[venue_id] = metrics

    log("")
    log("=" * 72)
    log("VENUE SUMMARY")
    log("=" * 72)
    log(f"{'Venue':<22} {'Shows':>6} {'Same':>5} {'Upd':>5} {'Add':>5} {'Rem':>5} {'Saved':>6} {'Time':>9}")
    log("-" * 72)
    for name in sorted(venue_metrics):
        m = venue_metrics[name]
        saved = "yes" if m.written else ("ERR" if m.errors else "no")
        log(
            f"{name:<22} {m.show_count:>6} {m.unchanged:>5} {m.updated:>5} "
            f"{m.added:>5} {m.removed:>5} {saved:>6} {m.duration_ms:>7.0f}ms"
        )
    log("=" * 72)

    failed_venues = [name for name, m in venue_metrics.items() if m.errors]
    if failed_venues:
        log(f"WARNING: Failed to update: {', '.join(failed_venues)}", "ERROR")

    written_paths.extend(write_merged_files(out_dir, run_timestamp, log))

    status_data = {
        "last_run": run_timestamp,
        "all_success": not failed_venues,
        "any_success": len(failed_venues) < len(venue_metrics),
        "venues": venue_statuses,
    }
    io.write_json(status_path, status_data)
    log(f"Status saved to {status_path}")

    io.save_log(log_path, log_lines)

    if sync_r2:
        upload_to_r2(written_paths + [status_path, log_path], log_func=log)

    return 1 if failed_venues else 0


def iso_date(value):
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="update_venues",
        description="Scrape venue calendars and reconcile them with previously saved shows",
    )
    parser.add_argument(
        "--venue", default="all", metavar="ID",
        help=f"Venue id to update, or 'all' (choices: {', '.join(venue_ids())})",
    )
    parser.add_argument("--start", type=iso_date, metavar="YYYY-MM-DD", help="First date to keep")
    parser.add_argument("--end", type=iso_date, metavar="YYYY-MM-DD", help="Last date to keep")
    parser.add_argument(
        "--reference-date", type=iso_date, metavar="YYYY-MM-DD",
        help="Date used to infer the year of dates without one (default: today)",
    )
    parser.add_argument(
        "--out-dir", type=Path, default=config.VENUES_DIR, metavar="PATH",
        help=f"Directory for venue files (default: {config.VENUES_DIR})",
    )
    parser.add_argument(
        "--merge-only", action="store_true",
        help="Only rebuild index.json and all-venues.json from existing venue files",
    )
    parser.add_argument(
        "--r2", action="store_true", dest="sync_r2",
        help="Pull previous venue files from R2 before comparing and upload results",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    return run_update(
        venue=args.venue,
        start_date=args.start,
        end_date=args.end,
        reference_date=date.fromisoformat(args.reference_date) if args.reference_date else None,
        out_dir=args.out_dir,
        sync_r2=args.sync_r2,
        merge_only=args.merge_only,
    )


if __name__ == "__main__":
    sys.exit(main())
