"""Normalize user-supplied repository references into canonical Source records.

Supported forms (each optionally suffixed with ``#subdir``):
- owner/repo
- owner/repo/sub/dir
- github.com/owner/repo
- https://github.com/owner/repo(.git)
- https://github.com/owner/repo/tree/<ref>/<path>
- ssh://git@host/owner/repo.git
- git@host:owner/repo.git
- ./local/path
"""

import re
from dataclasses import dataclass
from typing import Literal

from agpm.errors import InvalidSourceFormatError

SourceFormat = Literal["auto", "claude-marketplace", "claude-plugin", "simple"]

SOURCE_FORMATS: tuple[str, ...] = ("auto", "claude-marketplace", "claude-plugin", "simple")

DEFAULT_HOST = "github.com"

# Hosts accepted without a scheme in shorthand form (e.g. "gitlab.com/owner/repo")
KNOWN_HOSTS = frozenset({"github.com", "gitlab.com", "bitbucket.org", "codeberg.org"})

# Path segments that precede "<ref>/<path>" in browser URLs pointing into a tree
_TREE_MARKERS: dict[str, tuple[str, ...]] = {
    "github.com": ("tree",),
    "gitlab.com": ("-", "tree"),
}

_URL_PATTERN = re.compile(
    r"^(?P<scheme>https?|ssh|git)://"
    r"(?:(?P<userinfo>[^@/]+)@)?"
    r"(?P<host>[^/:]+)"
    r"(?::(?P<port>\d+))?"
    r"(?:/(?P<path>.*))?$"
)
_SCP_PATTERN = re.compile(r"^(?:(?P<user>[\w.-]+)@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$")
_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


@dataclass(frozen=True)
class Source:
    """A normalized reference to a git repository that publishes artifacts.

    Attributes:
        name: Stable lookup key, usually "owner/repo"
        url: Protocol-qualified clone URL
        format: Forces a discovery strategy; None or "auto" means detect
        subdir: Repository subtree discovery is scoped to
    """

    name: str
    url: str
    format: SourceFormat | None = None
    subdir: str | None = None

    @property
    def explicit_format(self) -> SourceFormat | None:
        """Format that bypasses detection, or None when detection should run."""
        if self.format is None or self.format == "auto":
            return None
        return self.format


def _strip_git_suffix(value: str) -> str:
    if value.endswith(".git"):
        return value[: -len(".git")]
    return value


def _clean_subdir(fragment: str) -> str | None:
    cleaned = fragment.strip().strip("/")
    if cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return cleaned or None


def _sanitize(value: str) -> str:
    """Derive a filesystem- and key-safe name from an arbitrary URL or path."""
    stripped = _SCHEME_PREFIX.sub("", value)
    # Drop credentials / ssh user before the host
    if "@" in stripped.split("/", 1)[0]:
        stripped = stripped.split("@", 1)[1]
    stripped = _strip_git_suffix(stripped.rstrip("/"))
    sanitized = _UNSAFE_CHARS.sub("_", stripped)
    if sanitized in ("", ".", ".."):
        return f"_{sanitized}"
    return sanitized


def _is_local_path(value: str) -> bool:
    return value.startswith(("./", "../", "/", "~"))


def _split_tree(host: str, rest: list[str]) -> tuple[bool, str | None]:
    """Interpret path segments after owner/repo.

    Returns (recognized, subdir). Only browser tree URLs of known hosts are
    recognized; the ref segment is dropped since a Source carries no ref.
    """
    if not rest:
        return True, None
    marker = _TREE_MARKERS.get(host)
    if marker is None:
        return False, None
    if tuple(rest[: len(marker)]) != marker or len(rest) <= len(marker):
        return False, None
    path_parts = rest[len(marker) + 1 :]
    if not path_parts:
        return True, None
    return True, "/".join(path_parts)


def _fallback(base: str, subdir: str | None) -> Source:
    return Source(name=_sanitize(base), url=base, subdir=subdir)


def _parse_url(base: str, match: re.Match[str], subdir: str | None) -> Source:
    scheme = match.group("scheme")
    userinfo = match.group("userinfo")
    host = match.group("host").lower()
    port = match.group("port")
    segments = [segment for segment in (match.group("path") or "").split("/") if segment]
    if len(segments) < 2:
        return _fallback(base, subdir)

    owner, repo = segments[0], _strip_git_suffix(segments[1])
    recognized, tree_subdir = _split_tree(host, segments[2:])
    if not recognized or not repo:
        return _fallback(base, subdir)

    authority = host if port is None else f"{host}:{port}"
    if userinfo is not None:
        authority = f"{userinfo}@{authority}"
    return Source(
        name=f"{owner}/{repo}",
        url=f"{scheme}://{authority}/{owner}/{repo}.git",
        subdir=subdir if subdir is not None else tree_subdir,
    )


def _parse_scp(base: str, match: re.Match[str], subdir: str | None) -> Source:
    segments = [segment for segment in match.group("path").split("/") if segment]
    if len(segments) != 2:
        return _fallback(base, subdir)
    owner, repo = segments[0], _strip_git_suffix(segments[1])
    if not repo:
        return _fallback(base, subdir)
    user = match.group("user")
    host = match.group("host").lower()
    authority = host if user is None else f"{user}@{host}"
    return Source(name=f"{owner}/{repo}", url=f"{authority}:{owner}/{repo}.git", subdir=subdir)


def is_contained_path(path: str) -> bool:
    """Whether path is relative and stays below the directory it is joined to."""
    candidate = path.replace("\\", "/")
    if candidate.startswith(("/", "~")) or _DRIVE_PREFIX.match(candidate):
        return False
    return ".." not in candidate.split("/")


def parse_source_string(reference: str) -> Source:
    """Parse a free-form repository reference into a Source.

    Unrecognized URL shapes still produce a usable Source with a sanitized
    name; only input without any path-like structure is rejected.

    Raises:
        InvalidSourceFormatError: If the input is empty, has no slash-delimited
            segments, or names a subdir outside the repository
    """
    source = _parse_reference(reference)
    if source.subdir is not None and not is_contained_path(source.subdir):
        raise InvalidSourceFormatError(reference)
    return source


def _parse_reference(reference: str) -> Source:
    text = reference.strip()
    if not text:
        raise InvalidSourceFormatError(reference)

    base, _, fragment = text.partition("#")
    subdir = _clean_subdir(fragment)

    if _is_local_path(base):
        return _fallback(base, subdir)

    url_match = _URL_PATTERN.match(base)
    if url_match is not None:
        return _parse_url(base, url_match, subdir)

    scp_match = _SCP_PATTERN.match(base)
    if scp_match is not None:
        return _parse_scp(base, scp_match, subdir)

    if _SCHEME_PREFIX.match(base):
        return _fallback(base, subdir)

    segments = [segment for segment in base.split("/") if segment]
    if "/" not in base or len(segments) < 2:
        raise InvalidSourceFormatError(reference)

    if segments[0].lower() in KNOWN_HOSTS:
        url_match = _URL_PATTERN.match(f"https://{base}")
        if url_match is not None:
            return _parse_url(base, url_match, subdir)

    owner, repo = segments[0], _strip_git_suffix(segments[1])
    if subdir is None and len(segments) > 2:
        subdir = "/".join(segments[2:])
    return Source(
        name=f"{owner}/{repo}",
        url=f"https://{DEFAULT_HOST}/{owner}/{repo}.git",
        subdir=subdir,
    )


def repo_storage_parts(url: str) -> tuple[str, ...]:
    """Map a normalized clone URL to its relative on-disk location.

    Recognized URLs map to (host, owner, repo); anything else to a single
    sanitized segment. Pure function of the URL, so the same Source always
    addresses the same working copy.
    """
    url_match = _URL_PATTERN.match(url)
    if url_match is not None:
        segments = [s for s in (url_match.group("path") or "").split("/") if s]
        if len(segments) == 2:
            return (url_match.group("host").lower(), segments[0], _strip_git_suffix(segments[1]))

    scp_match = _SCP_PATTERN.match(url)
    if scp_match is not None:
        segments = [s for s in scp_match.group("path").split("/") if s]
        if len(segments) == 2:
            return (scp_match.group("host").lower(), segments[0], _strip_git_suffix(segments[1]))

    return (_sanitize(url),)
