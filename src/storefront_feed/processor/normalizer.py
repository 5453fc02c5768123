"""Per-field value normalizers.

Spreadsheet cells arrive as free text typed by shop owners: prices with
currency symbols and either decimal convention, stock counts with trailing
units, and images given as Google Drive share links, GitHub page URLs,
plain URLs or bare filenames. Everything here is pure and never raises.
"""

import math
import re
from typing import Optional, Set
from urllib.parse import urlsplit

from storefront_feed.models.config import PipelineConfig

_PRICE_KEEP_RE = re.compile(r"[^\d,.]")
_STOCK_RE = re.compile(r"^\s*([+-]?\d+)")
_SLUG_RE = re.compile(r"\s+")

_DRIVE_ID_PATTERNS = [
    re.compile(r"/file/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"id=([a-zA-Z0-9_-]+)"),
    re.compile(r"/open\?id=([a-zA-Z0-9_-]+)"),
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
]
_BARE_DRIVE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{25,}$")
_DRIVE_HOSTS = ("drive.google.com", "docs.google.com")

_GITHUB_BLOB_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/]+)/([^/]+)/blob/([^?#]+)"
)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def parse_price(value: Optional[str]) -> float:
    """
    Parse a human-typed price.

    Keeps digits, commas and periods. A comma is the decimal separator only
    when no period is present; when both appear the right-most one is the
    decimal mark and the other is grouping. Negative, unparsable and
    non-finite values collapse to 0.

    Examples:
        >>> parse_price("$1,234.50")
        1234.5
        >>> parse_price("1.234,50")
        1234.5
        >>> parse_price("-5")
        0.0
    """
    if value is None:
        return 0.0
    text = str(value)

    first_digit = re.search(r"\d", text)
    if first_digit is None:
        return 0.0
    if "-" in text[:first_digit.start()]:
        return 0.0

    cleaned = _PRICE_KEEP_RE.sub("", text)
    has_comma = "," in cleaned
    has_period = "." in cleaned

    if has_comma and has_period:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif has_comma:
        cleaned = cleaned.replace(",", ".", 1).replace(",", "")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    try:
        price = float(cleaned)
    except ValueError:
        return 0.0

    if not math.isfinite(price) or price < 0:
        return 0.0
    return price


def parse_stock(value: Optional[str]) -> Optional[int]:
    """
    Parse a stock count from its leading integer.

    Returns None (unknown) when no integer can be read, which is distinct
    from 0 (out of stock). Negative counts clamp to 0.
    """
    if value is None:
        return None
    match = _STOCK_RE.match(str(value))
    if not match:
        return None
    return max(0, int(match.group(1)))


def extract_drive_file_id(value: str) -> Optional[str]:
    """Extract a Google Drive file id from a share link or a bare id."""
    if not value:
        return None
    value = value.strip()
    if _BARE_DRIVE_ID_RE.match(value):
        return value
    for pattern in _DRIVE_ID_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


def is_drive_reference(value: str) -> bool:
    return any(host in value for host in _DRIVE_HOSTS) or bool(_BARE_DRIVE_ID_RE.match(value))


def rewrite_github_blob(value: str) -> Optional[str]:
    """
    Rewrite a GitHub file page URL to its raw-content URL.

    ``https://github.com/u/r/blob/main/img.png`` becomes
    ``https://raw.githubusercontent.com/u/r/main/img.png``. Returns None
    when the value is not a blob URL.
    """
    match = _GITHUB_BLOB_RE.match(value.strip())
    if not match:
        return None
    user, repo, rest = match.groups()
    return f"https://raw.githubusercontent.com/{user}/{repo}/{rest}"


def is_external_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def slugify_name(name: str) -> str:
    return _SLUG_RE.sub("-", name.strip().lower())


class FieldNormalizer:
    """Image and identifier normalization bound to one configuration."""

    def __init__(self, config: PipelineConfig):
        self.placeholder = config.placeholder_image
        self.image_directory = config.image_directory
        self.image_proxy_template = config.image_proxy_template
        self.derive_external_image2 = config.derive_external_image2

    def resolve_image(self, value: Optional[str]) -> str:
        """
        Resolve a cell value to a displayable image URL or local path.

        Applied in order: Google Drive link or bare file id -> image proxy
        URL; GitHub blob URL -> raw content URL; absolute http(s) URL ->
        unchanged; other schemes and protocol-relative values ->
        placeholder; anything else is a local file under the asset
        directory.
        """
        if value is None:
            return self.placeholder
        value = str(value).strip()
        if not value:
            return self.placeholder

        if is_drive_reference(value):
            file_id = extract_drive_file_id(value)
            if file_id is None:
                return self.placeholder
            return self.image_proxy_template.replace("{file_id}", file_id)

        raw_url = rewrite_github_blob(value)
        if raw_url is not None:
            return raw_url

        if is_external_url(value):
            return value

        if value.startswith("//") or _SCHEME_RE.match(value):
            return self.placeholder

        if value.startswith(("/", "./")) or value.startswith(self.image_directory):
            return value
        return f"{self.image_directory}{value}"

    def derive_secondary_image(self, primary: str) -> str:
        """
        Derive the secondary image from a resolved primary image.

        Local ``images/x.jpg`` becomes ``images/xa.jpg``; an external URL is
        reused verbatim; the placeholder and extension-less paths fall back
        to the placeholder.
        """
        if not primary or primary == self.placeholder:
            return self.placeholder

        if is_external_url(primary):
            return primary if self.derive_external_image2 else self.placeholder

        slash = primary.rfind("/")
        dot = primary.rfind(".")
        if dot <= slash + 1:
            return self.placeholder
        return f"{primary[:dot]}a{primary[dot:]}"

    def name_image(self, name: str, secondary: bool = False) -> str:
        """Guess a local image path from the product name."""
        suffix = "a" if secondary else ""
        return f"{self.image_directory}{slugify_name(name)}{suffix}.jpg"


class IdentifierFactory:
    """
    Produces product ids for one pipeline run.

    Synthesized ids combine a per-run load token with the data row number.
    Every id handed out is remembered, and a repeated sheet id gets the row
    number appended, so ids are unique within a run.
    """

    def __init__(self, load_token: str):
        self.load_token = load_token
        self._issued: Set[str] = set()

    def make(self, value: Optional[str], row_number: int) -> str:
        if value is not None and str(value).strip():
            candidate = str(value).strip()
        else:
            candidate = f"{self.load_token}-{row_number}"

        while candidate in self._issued:
            candidate = f"{candidate}-{row_number}"
        self._issued.add(candidate)
        return candidate
