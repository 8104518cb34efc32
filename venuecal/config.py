import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.environ.get("VENUECAL_DATA_DIR", REPO_ROOT / "public" / "data"))
VENUES_DIR = DATA_DIR / "venues"
STATUS_FILENAME = "scrape-status.json"
LOG_FILENAME = "scrape-log.txt"
INDEX_FILENAME = "index.json"
ALL_VENUES_FILENAME = "all-venues.json"

LOG_RETENTION_DAYS = 14

DEFAULT_START_DATE = "1900-01-01"
DEFAULT_END_DATE = "2100-12-31"

# Bare month/day dates are placed in the window
# [reference - PAST_MATCH_WINDOW_DAYS, reference + 365 - PAST_MATCH_WINDOW_DAYS].
PAST_MATCH_WINDOW_DAYS = 31

HTTP_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}
HTTP_TIMEOUT = int(os.environ.get("VENUECAL_HTTP_TIMEOUT", "15"))
HTTP_MAX_RETRIES = int(os.environ.get("VENUECAL_HTTP_MAX_RETRIES", "3"))
MAX_PAGES = int(os.environ.get("VENUECAL_MAX_PAGES", "20"))
PAGE_DELAY = 0.5

R2_ACCOUNT_ID = os.environ.get("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.environ.get("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.environ.get("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.environ.get("R2_BUCKET_NAME", "venue-calendar-data")

ROLES = ["headliner", "opener"]
DEFAULT_ROLE = "headliner"
REQUIRED_ROW_FIELDS = ["date", "artists", "venue_id"]
