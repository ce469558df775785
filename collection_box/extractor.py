"""URL extraction and origin resolution for free-form pasted text.

Text goes through five stages:

1. candidate discovery with two recognizers (scheme-prefixed and bare domain),
2. splitting of scheme-prefixed runs that hold several concatenated URLs,
3. per-candidate canonicalization and eTLD+1 origin lookup,
4. deduplication on a normalization key,
5. assembly of ``URLOriginPair`` values in first-seen order.
"""

from __future__ import annotations

import re
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import quote, urlsplit

import tldextract

from .catalog import OriginCatalog
from .core.errors import CollectionBoxError
from .core.logging import get_logger
from .models import URLOriginPair

logger = get_logger(__name__)

# A URL body stops at whitespace, quotes, angle brackets, parentheses and
# full-width CJK punctuation.
_URL_BODY = r"[^\s\"'<>()，。；：！？、《》「」【】（）]"

SCHEME_URL_RE = re.compile(rf"https?://{_URL_BODY}+")

# An optional leading scheme is captured so foreign schemes (ftp://...) are
# rejected during canonicalization instead of being read as bare hosts.
BARE_URL_RE = re.compile(
    r"(?:(?<![A-Za-z0-9+.-])[A-Za-z][A-Za-z0-9+.-]*://)?"
    r"(?<![A-Za-z0-9_.-])"
    r"[A-Za-z0-9][A-Za-z0-9.-]*\.[A-Za-z]{2,}"
    rf"{_URL_BODY}*"
)

_EMBEDDED_SCHEME_RE = re.compile(r"https?://")
_LEADING_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")

SUPPORTED_SCHEMES = frozenset({"http", "https"})
TRAILING_PUNCTUATION = ".,;:!?"
LOCALHOST = "localhost"

# Characters left untouched when escaping a path for the normalization key
_PATH_SAFE = "/%:@!$&'()*+,;="

# Bundled public suffix snapshot only; no network fetch at runtime. Private
# suffixes count, so user.github.io is its own registrable domain.
_default_tld_extract = tldextract.TLDExtract(
    suffix_list_urls=(), include_psl_private_domains=True
)

TLDExtractor = Callable[[str], Any]


class ResolvedURL(NamedTuple):
    """Result of canonicalizing one candidate."""

    url: str
    origin: str
    host: str
    key: str


def split_concatenated(raw: str) -> List[str]:
    """Split a scheme-prefixed run at every embedded ``http://`` / ``https://``."""
    starts = [match.start() for match in _EMBEDDED_SCHEME_RE.finditer(raw)]
    if not starts:
        return []
    ends = starts[1:] + [len(raw)]
    return [raw[start:end] for start, end in zip(starts, ends)]


def _clip_to_scheme_spans(
    span: Tuple[int, int], scheme_spans: Sequence[Tuple[int, int]]
) -> Tuple[int, int]:
    start, end = span
    for scheme_start, scheme_end in scheme_spans:
        if scheme_start < end and start < scheme_end:
            return (start, scheme_start) if start < scheme_start else (start, start)
    return start, end


def find_candidates(text: str) -> List[str]:
    """Return URL candidates, scheme-prefixed ones first."""
    scheme_spans: List[Tuple[int, int]] = []
    candidates: List[str] = []

    for match in SCHEME_URL_RE.finditer(text):
        scheme_spans.append(match.span())
        candidates.extend(split_concatenated(match.group()))

    for match in BARE_URL_RE.finditer(text):
        start, end = _clip_to_scheme_spans(match.span(), scheme_spans)
        if end > start:
            candidates.append(text[start:end])

    return candidates


def registrable_domain(hostname: str, extract: Optional[TLDExtractor] = None) -> Optional[str]:
    """Return the eTLD+1 of ``hostname``; ``localhost`` maps to itself."""
    result = (extract or _default_tld_extract)(hostname)
    if result.domain and result.suffix:
        return f"{result.domain}.{result.suffix}".lower()
    if hostname == LOCALHOST:
        return LOCALHOST
    return None


def normalization_key(hostname: str, path: str, query: str) -> str:
    """Build the dedup key: host without ``www.`` + escaped path + raw query."""
    host = hostname.lower()
    if host.startswith("www."):
        host = host[4:]
    key = host + quote(path, safe=_PATH_SAFE)
    if query:
        key = f"{key}?{query}"
    return key


class URLExtractor:
    """Turn arbitrary text into deduplicated URL/origin pairs."""

    def __init__(self, catalog: OriginCatalog, tld_extract: Optional[TLDExtractor] = None) -> None:
        self.catalog = catalog
        self._tld_extract = tld_extract or _default_tld_extract

    def resolve(self, candidate: str) -> ResolvedURL:
        """Canonicalize one candidate and look up its origin.

        Raises ``CollectionBoxError`` (invalid argument) when the candidate
        cannot be parsed or does not belong to a supported origin.
        """
        cleaned = candidate.strip().rstrip(TRAILING_PUNCTUATION)
        if not cleaned:
            raise CollectionBoxError.invalid_argument("url cannot be empty")

        scheme = _LEADING_SCHEME_RE.match(cleaned)
        if scheme:
            if scheme.group(1).lower() not in SUPPORTED_SCHEMES:
                raise CollectionBoxError.invalid_argument("unsupported protocol scheme")
            parseable = cleaned
        elif cleaned.startswith("//"):
            parseable = cleaned
        elif "://" in cleaned:
            # a foreign scheme buried in a bare candidate
            raise CollectionBoxError.invalid_argument("unsupported protocol scheme")
        else:
            # protocol-relative form so the parser sees an authority
            parseable = "//" + cleaned

        try:
            parts = urlsplit(parseable)
            hostname = (parts.hostname or "").rstrip(".")
        except ValueError as exc:
            raise CollectionBoxError.invalid_argument(f"invalid url format: {exc}") from exc

        if not hostname:
            raise CollectionBoxError.invalid_argument("url is missing a host")

        host = registrable_domain(hostname, self._tld_extract)
        if host is None:
            raise CollectionBoxError.invalid_argument(f"invalid host: {hostname}")

        origin = self.catalog.lookup(host)
        if origin is None:
            raise CollectionBoxError.invalid_argument(f"unsupported origin: {host}")

        return ResolvedURL(
            url=cleaned,
            origin=origin,
            host=host,
            key=normalization_key(hostname, parts.path, parts.query),
        )

    def extract_all(self, text: str) -> List[URLOriginPair]:
        """Extract every supported URL in ``text``, in first-seen order."""
        if not text or not text.strip():
            raise CollectionBoxError.invalid_argument("url cannot be empty")

        candidates = find_candidates(text)
        if not candidates:
            raise CollectionBoxError.invalid_argument("no valid URL found in input text")

        seen = set()
        pairs: List[URLOriginPair] = []
        for candidate in candidates:
            try:
                resolved = self.resolve(candidate)
            except CollectionBoxError as exc:
                logger.debug("URL candidate rejected", candidate=candidate, reason=exc.message)
                continue

            dedup_key = f"{resolved.key}|{resolved.origin}"
            if dedup_key in seen:
                continue
            seen.add(dedup_key)
            pairs.append(URLOriginPair(url=resolved.url, origin=resolved.origin))

        if not pairs:
            raise CollectionBoxError.invalid_argument("no *supported* origin found in input text")

        logger.debug("URLs extracted", candidates=len(candidates), pairs=len(pairs))
        return pairs


__all__ = [
    "URLExtractor",
    "ResolvedURL",
    "find_candidates",
    "split_concatenated",
    "registrable_domain",
    "normalization_key",
    "SCHEME_URL_RE",
    "BARE_URL_RE",
]
