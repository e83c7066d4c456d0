"""Re-check locked artifacts against their recorded fingerprints."""

import logging
from dataclasses import dataclass
from typing import Literal

from agpm.cache.integrity import ensure_integrity
from agpm.cache.store import ContentCache
from agpm.errors import IntegrityMismatchError
from agpm.lock.models import AgpmLock

logger = logging.getLogger(__name__)

IntegrityStatus = Literal["ok", "mismatch", "uncached"]


@dataclass(frozen=True)
class IntegrityCheck:
    """Verification outcome for one lock entry."""

    lock_key: str
    status: IntegrityStatus
    error: IntegrityMismatchError | None = None


def verify_lock(cache: ContentCache, lock: AgpmLock) -> list[IntegrityCheck]:
    """Recompute the fingerprint of every locked artifact that is cached.

    Entries whose commit isn't cached are reported as "uncached" rather than
    staged. Mismatches are reported, never raised.
    """
    checks: list[IntegrityCheck] = []
    for lock_key, entry in sorted(lock.artifacts.items()):
        if not cache.has(entry.sha):
            checks.append(IntegrityCheck(lock_key=lock_key, status="uncached"))
            continue
        try:
            ensure_integrity(cache.path_for(entry.sha) / entry.path, entry.integrity)
        except IntegrityMismatchError as e:
            logger.warning("%s", e)
            checks.append(IntegrityCheck(lock_key=lock_key, status="mismatch", error=e))
            continue
        checks.append(IntegrityCheck(lock_key=lock_key, status="ok"))
    return checks
