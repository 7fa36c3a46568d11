"""Split hostnames into subdomain, domain and top-level domain."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

MULTI_PART_TLDS = frozenset(
    {"co.uk", "co.in", "com.au", "au.uk", "co.nz", "co.jp", "co.kr", "com.br", "com.cn"}
)


class URLParseError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class URLParts:
    domain: str
    tld: str
    subdomain: str = ""

    @property
    def full_domain(self) -> str:
        """Registrable domain, e.g. ``example.co.uk``."""

        return f"{self.domain}.{self.tld}"


def _strip_www(labels: list[str]) -> str:
    if labels and labels[0] == "www":
        labels = labels[1:]
    return ".".join(labels)


def parse_url(url: str) -> URLParts:
    """Parse ``url``, assuming ``https://`` when no scheme is given."""

    if not url.startswith(("http://", "https://")):
        url = "https://" + url

    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError as exc:
        raise URLParseError(f"failed to parse URL: {exc}") from exc

    labels = hostname.split(".")
    if len(labels) < 2 or not all(labels):
        raise URLParseError(f"invalid hostname format: {hostname!r}")

    suffix = ".".join(labels[-2:])
    if suffix in MULTI_PART_TLDS:
        remaining = labels[:-2]
        if not remaining:
            raise URLParseError(f"invalid hostname format: {hostname!r}")
        return URLParts(domain=remaining[-1], tld=suffix, subdomain=_strip_www(remaining[:-1]))

    return URLParts(domain=labels[-2], tld=labels[-1], subdomain=_strip_www(labels[:-2]))


def displayed_link(url: str) -> str:
    """Short form of ``url`` shown next to citations; falls back to ``url``."""

    try:
        return parse_url(url).full_domain
    except URLParseError:
        return url
