import logging
from pathlib import Path
from typing import Dict

from src.errors import ObjectReadFailed, ReferenceResolutionFailed
from src.git_objects.models import CommitObject, GitObject, TagObject
from src.git_objects.parser import read_object

logger = logging.getLogger(__name__)


class ObjectStore:
    """Read-only view of a repository's objects with a per-query read cache.

    Objects are immutable and addressed by content hash, so a cached read is
    always consistent with a fresh one.
    """

    def __init__(self, git_dir: Path):
        self.git_dir = git_dir
        self._cache: Dict[str, GitObject] = {}

    def read(self, oid: str) -> GitObject:
        obj = self._cache.get(oid)
        if obj is None:
            obj = read_object(oid, self.git_dir)
            self._cache[oid] = obj
        return obj

    def read_commit(self, oid: str) -> CommitObject:
        obj = self.read(oid)
        if not isinstance(obj, CommitObject):
            raise ObjectReadFailed(f"Expected commit {oid}, found {obj.type.decode()}")
        return obj

    def peel_to_commit(self, oid: str, ref_name: str = "") -> CommitObject:
        """Follow tag objects from ``oid`` until a commit is reached."""
        label = ref_name or oid
        seen = set()
        current = oid
        while True:
            if current in seen:
                raise ReferenceResolutionFailed(f"Tag chain for {label} loops back to {current}")
            seen.add(current)

            try:
                obj = self.read(current)
            except ObjectReadFailed as e:
                raise ReferenceResolutionFailed(f"Cannot dereference {label}: {e}") from e

            if isinstance(obj, CommitObject):
                return obj
            if isinstance(obj, TagObject):
                logger.debug("Peeling tag object %s -> %s", current, obj.object_oid)
                current = obj.object_oid
                continue
            raise ReferenceResolutionFailed(
                f"{label} points to a {obj.type.decode()} ({current}), not a commit"
            )
