import re
from datetime import date, timedelta

from venuecal import config

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

DOT_DATE_RE = re.compile(r"(\d{1,2})\.(\d{1,2})")
SLASH_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?")
MONTH_NAME_DATE_RE = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|jul(?:y)?|"
    r"aug(?:ust)?|sep(?:t|tember)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?\s+"
    r"(\d{1,2})(?:st|nd|rd|th)?(?:,\s*(\d{4}))?"
)
TIME_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\b", re.IGNORECASE)
SHOW_TIME_RE = re.compile(r"show:\s*(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\b", re.IGNORECASE)


def to_date(value):
    """Accept a date, datetime or ISO string; return a date or None."""
    if value is None:
        return None
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def infer_year(month, day, reference_date):
    """
    Pick a year for a bare month/day.
    The date is placed in the reference year, then moved forward a year if it
    falls more than a month before the reference date (calendars listing into
    next year) or back a year if it falls more than eleven months after it
    (a listing from the end of last year).
    """
    window = timedelta(days=config.PAST_MATCH_WINDOW_DAYS)
    year = reference_date.year
    try:
        candidate = date(year, month, day)
    except ValueError:
        # Feb 29 outside a leap year; the year is settled by the window below
        candidate = date(year, month, 28)

    if candidate < reference_date - window:
        return year + 1
    if candidate > reference_date + timedelta(days=365) - window:
        return year - 1
    return year


def _format_iso(year, month, day):
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def _month_day(match):
    """Month and day of a numeric match, or None when they can't be a date (prices, "24/7")."""
    month, day = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return month, day


def parse_date_iso(text, reference_date):
    """
    Extract a calendar date from free text and return it as YYYY-MM-DD.
    Notations are tried in order: "M.D", "M/D[/YY[YY]]", "Month D[th][, YYYY]".
    Matches that don't form a valid date are skipped.
    Returns "" when nothing matches.
    """
    if not text:
        return ""
    reference_date = to_date(reference_date) or date.today()
    normalized = text.lower()

    for match in DOT_DATE_RE.finditer(normalized):
        month_day = _month_day(match)
        if month_day is None:
            continue
        month, day = month_day
        iso = _format_iso(infer_year(month, day, reference_date), month, day)
        if iso:
            return iso

    for match in SLASH_DATE_RE.finditer(normalized):
        month_day = _month_day(match)
        if month_day is None:
            continue
        month, day = month_day
        year_text = match.group(3)
        if year_text:
            year = int("20" + year_text) if len(year_text) == 2 else int(year_text)
        else:
            year = infer_year(month, day, reference_date)
        iso = _format_iso(year, month, day)
        if iso:
            return iso

    for match in MONTH_NAME_DATE_RE.finditer(normalized):
        month = MONTHS[match.group(1)]
        day = int(match.group(2))
        year = int(match.group(3)) if match.group(3) else infer_year(month, day, reference_date)
        iso = _format_iso(year, month, day)
        if iso:
            return iso

    return ""


def _to_24h(hour_text, minute_text, meridiem):
    hours = int(hour_text)
    minutes = int(minute_text) if minute_text else 0
    if hours > 12 or minutes > 59:
        return ""
    meridiem = meridiem.lower()
    if meridiem == "p" and hours < 12:
        hours += 12
    elif meridiem == "a" and hours == 12:
        hours = 0
    return f"{hours:02d}:{minutes:02d}"


def parse_show_time(text):
    """
    Extract a show time like "8pm" or "show: 8:30 PM" as 24-hour "HH:MM".
    A "show:" labelled time wins over any other time (e.g. doors) in the text.
    """
    if not text:
        return ""
    match = SHOW_TIME_RE.search(text) or TIME_RE.search(text)
    if not match:
        return ""
    return _to_24h(*match.groups())


def normalize_time(time_str):
    """
    Normalize time strings to consistent HH:MM 24-hour format.
    Handles: "8:00", "8:30pm", "8:00 PM", "20:00:00", "19:00"
    """
    if not time_str:
        return None

    time_str = time_str.strip().lower()

    if time_str.count(":") == 2:
        time_str = ":".join(time_str.split(":")[:2])

    is_pm = "pm" in time_str
    is_am = "am" in time_str
    time_str = time_str.replace("pm", "").replace("am", "").strip()

    parts = time_str.split(":")
    if len(parts) != 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    if is_pm and hours < 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    return f"{hours:02d}:{minutes:02d}"


def format_time_12(time24):
    """Convert "20:00" to "8:00 PM". Empty or malformed input gives None."""
    if not time24:
        return None
    hour_text, _, minute_text = time24.partition(":")
    try:
        hour = int(hour_text)
    except ValueError:
        return None
    minutes = minute_text or "00"
    meridiem = "PM" if hour >= 12 else "AM"
    hour12 = 12 if hour % 12 == 0 else hour % 12
    return f"{hour12}:{minutes} {meridiem}"


def time_sort_key(start_time):
    """Sort key placing known times chronologically and unknown times last."""
    normalized = normalize_time(start_time)
    return (normalized is None, normalized or "")


def is_within_range(date_iso, start_iso, end_iso):
    """True iff start <= date <= end as calendar dates."""
    value, start, end = to_date(date_iso), to_date(start_iso), to_date(end_iso)
    if value is None or start is None or end is None:
        return False
    return start <= value <= end
