import re
from urllib.parse import urljoin, urlparse

PLACEHOLDER_PATTERNS = [
    r"^tba$",
    r"^support\s*tba$",
    r"^more\s*tba$",
]


def normalize_whitespace(value):
    """Collapse runs of whitespace to a single space and trim."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def is_placeholder_name(name):
    """Return True for 'TBA'-style entries that are not real artists."""
    return any(re.match(pattern, name, re.IGNORECASE) for pattern in PLACEHOLDER_PATTERNS)


def split_openers(value):
    """
    Split a support line like "with Band A, Band B, TBA" into artist names.
    Leading "with" / "w/" connectors and TBA placeholders are dropped.
    """
    if not value:
        return []

    cleaned = re.sub(r"^with\s+", "", value.strip(), flags=re.IGNORECASE)
    cleaned = re.sub(r"^w/\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\bwith\s+", "", cleaned, flags=re.IGNORECASE).strip()
    if not cleaned:
        return []

    openers = []
    for item in cleaned.split(","):
        name = normalize_whitespace(item)
        if name and not is_placeholder_name(name):
            openers.append(name)
    return openers


def resolve_url(href, base_url):
    """Resolve a possibly relative href against base_url; fall back to the base."""
    if not href:
        return base_url
    try:
        resolved = urljoin(base_url, href.strip())
    except ValueError:
        return base_url
    if not urlparse(resolved).scheme:
        return base_url
    return resolved


def decode_body(content, content_type=""):
    """
    Decode a response body.
    A declared non-UTF-8 charset is tried first. Otherwise UTF-8 is used, and
    if that produces replacement characters the body is re-read as Latin-1.
    """
    match = re.search(r"charset=([^;]+)", content_type or "", re.IGNORECASE)
    charset = match.group(1).strip().strip("\"'").lower() if match else None

    if charset and charset not in ("utf-8", "utf8"):
        try:
            return content.decode(charset)
        except (LookupError, UnicodeDecodeError):
            pass

    text = content.decode("utf-8", errors="replace")
    if "�" in text:
        return content.decode("iso-8859-1")
    return text
