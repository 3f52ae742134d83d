"""
Extraction stage of the analyzer.

Each rule is a small pure function returning what it found so signals can be
tested one at a time. Nothing here checks that an address, number or domain
exists in the real world.
"""
import math
import re
import logging
from collections import Counter
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

import tldextract
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# ===== REGEX PATTERNS =====

EMAIL_PATTERN = re.compile(r'[\w.+-]+@(?:[\w-]+\.)+[\w-]{2,}', re.ASCII)

# Indian mobile numbers: optional +91/91, then 10 digits starting 6-9 or 3-3-4 groups
PHONE_PATTERN = re.compile(
    r'(?:\+91|91)?[\s\-]?(?:[6-9]\d{9}|\d{3}-\d{3}-\d{4})',
    re.ASCII
)

# Payment handles such as name@okaxis
PAYMENT_ID_PATTERN = re.compile(r'\b[a-zA-Z0-9.\-_]{2,}@[a-zA-Z]{2,}\b', re.ASCII)

URL_PATTERN = re.compile(r'https?://[^\s)]+', re.IGNORECASE)

SCHEME_PATTERN = re.compile(r'https?://', re.IGNORECASE)

TRAILING_PUNCTUATION = re.compile(r'[.,;:)\]]+$')

# Characters a browser refuses inside a hostname
FORBIDDEN_HOST_CHARS = frozenset(' #%/:<>?@[\\]^|')

# Bundled public suffix snapshot only, never fetched
_tld_extract = tldextract.TLDExtract(suffix_list_urls=())


def normalize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return str(text).strip()


def html_to_text(html: str) -> str:
    """
    Reduce HTML to its visible text, keeping link targets inline so URL
    checks still see them.
    """
    try:
        soup = BeautifulSoup(html, 'lxml')

        # Link targets follow the visible text
        for tag in soup.find_all(['a', 'img']):
            if tag.name == 'a' and tag.get('href'):
                tag.insert_after(f" {tag.get('href')} ")
            elif tag.get('src'):
                tag.insert_after(f" {tag.get('src')} ")

        for tag in soup.find_all(['script', 'style']):
            tag.decompose()

        text = soup.get_text(separator=' ')
        return re.sub(r'\s+', ' ', text).strip()
    except Exception as e:
        logger.warning(f"HTML parsing error: {e}")
        return re.sub(r'<[^>]+>', ' ', html)


def extract_emails(text: str) -> List[str]:
    return EMAIL_PATTERN.findall(text)


@lru_cache(maxsize=16)
def _free_email_pattern(providers: Sequence[str]) -> re.Pattern:
    alternatives = '|'.join(re.escape(p) for p in providers)
    return re.compile(rf'\b(?:{alternatives})\b', re.IGNORECASE)


def find_free_emails(emails: Iterable[str], providers: Sequence[str]) -> List[str]:
    """Emails whose text names a consumer webmail provider"""
    if not providers:
        return []
    pattern = _free_email_pattern(tuple(providers))
    return [email for email in emails if pattern.search(email)]


def extract_phones(text: str) -> List[str]:
    return [match.strip() for match in PHONE_PATTERN.findall(text)]


def extract_payment_ids(text: str) -> List[str]:
    return PAYMENT_ID_PATTERN.findall(text)


@lru_cache(maxsize=16)
def _bare_domain_pattern(tlds: Sequence[str]) -> re.Pattern:
    alternatives = '|'.join(re.escape(t) for t in tlds)
    return re.compile(rf'\b[\w.-]+\.(?:{alternatives})\b', re.IGNORECASE | re.ASCII)


def find_url_candidate(text: str, bare_domain_tlds: Sequence[str]) -> Optional[str]:
    """
    First explicit http(s) URL in the text, else the first bare domain ending
    in one of the allowed TLDs.
    """
    match = URL_PATTERN.search(text)
    if match:
        return TRAILING_PUNCTUATION.sub('', match.group(0)) or None

    if not bare_domain_tlds:
        return None

    match = _bare_domain_pattern(tuple(bare_domain_tlds)).search(text)
    return match.group(0) if match else None


def parse_hostname(candidate: str) -> str:
    """
    Hostname of a URL candidate, lower-cased.

    Raises ValueError when the candidate cannot be parsed as a URL.
    """
    url = candidate if SCHEME_PATTERN.match(candidate) else 'https://' + candidate
    parts = urlsplit(url)

    hostname = parts.hostname
    # Accessing port validates it
    parts.port

    if not hostname:
        raise ValueError(f"No hostname in {candidate!r}")
    if any(c in FORBIDDEN_HOST_CHARS for c in hostname):
        raise ValueError(f"Invalid hostname {hostname!r}")
    if not hostname.isascii():
        hostname = hostname.encode('idna').decode('ascii')

    return hostname


def registered_domain(hostname: str) -> str:
    extracted = _tld_extract(hostname)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}"
    return ""


def hostname_entropy(hostname: str, clamp: float = 6.0) -> float:
    """Shannon entropy (bits per character) of the hostname without dots"""
    if not hostname:
        return 0.0

    chars = hostname.replace('.', '')
    if not chars:
        return 0.0

    length = len(chars)
    entropy = 0.0
    for count in Counter(chars).values():
        p = count / length
        entropy -= p * math.log2(p)

    return min(clamp, entropy)


def count_matches(text: str, phrases: Iterable[str]) -> int:
    """Number of distinct phrases present in the text, case-insensitive"""
    if not text:
        return 0
    lower = text.lower()
    return sum(1 for phrase in phrases if phrase.lower() in lower)


def caps_ratio(text: str) -> float:
    upper = sum(1 for c in text if 'A' <= c <= 'Z')
    letters = upper + sum(1 for c in text if 'a' <= c <= 'z')
    if letters == 0:
        return 0.0
    return upper / letters
