import random
import time
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import requests

from venuecal import config
from venuecal.errors import FetchError
from venuecal.utils.text import decode_body


def fetch_page(url, venue_id, session=None, log_func=None):
    """
    Fetch one calendar page and return its decoded HTML.
    5xx responses, timeouts and connection errors are retried with backoff.
    Raises FetchError once retries are exhausted or on any other non-2xx.
    """
    log = log_func or print
    http = session or requests
    max_retries = config.HTTP_MAX_RETRIES

    for attempt in range(max_retries):
        try:
            r = http.get(url, headers=config.HTTP_HEADERS, timeout=config.HTTP_TIMEOUT)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if attempt < max_retries - 1:
                wait = (2 ** attempt) * 2 + random.uniform(1, 3)
                log(f"    {venue_id}: Retry {attempt + 1}/{max_retries} after {type(e).__name__}...")
                time.sleep(wait)
                continue
            raise FetchError(venue_id, f"Failed to fetch {url}: {e}") from e

        if 200 <= r.status_code < 300:
            return decode_body(r.content, r.headers.get("Content-Type", ""))
        if r.status_code >= 500 and attempt < max_retries - 1:
            wait = (2 ** attempt) * 2 + random.uniform(1, 3)
            log(f"    {venue_id}: Retry {attempt + 1}/{max_retries} after HTTP {r.status_code}...")
            time.sleep(wait)
            continue
        raise FetchError(venue_id, f"Fetch of {url} failed with {r.status_code}")

    raise FetchError(venue_id, f"Failed to fetch {url}")


def page_url(calendar_url, page, param="list1page"):
    """Return calendar_url with its paging query parameter set to page."""
    parts = urlparse(calendar_url)
    query = parse_qs(parts.query, keep_blank_values=True)
    query[param] = [str(page)]
    return urlunparse(parts._replace(query=urlencode(query, doseq=True)))


def fetch_pages(venue, log_func=None):
    """
    Yield (page_url, html) for a venue's calendar.
    Venues with a paging parameter in their calendar URL are walked page by
    page until the parser stops producing new shows; others yield one page.
    """
    calendar_url = venue["calendar_url"]
    param = venue.get("page_param")
    if not param or param not in parse_qs(urlparse(calendar_url).query):
        yield calendar_url, fetch_page(calendar_url, venue["id"], log_func=log_func)
        return

    with requests.Session() as session:
        for page in range(1, config.MAX_PAGES + 1):
            url = page_url(calendar_url, page, param)
            yield url, fetch_page(url, venue["id"], session=session, log_func=log_func)
            time.sleep(config.PAGE_DELAY)
