import heapq
import logging
from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Pattern, Set

from src.errors import ReferenceResolutionFailed
from src.git_objects.models import CommitObject
from src.git_objects.store import ObjectStore
from src.dag.models import FrontierEntry
from src.dag.refs import HeadKind, read_head

logger = logging.getLogger(__name__)

CommitPredicate = Callable[[CommitObject], bool]


def head_commit_oid(git_dir: Path) -> Optional[str]:
    """The commit HEAD's branch points at, or None for an unborn branch.

    A missing or detached HEAD is reported rather than treated as an empty
    history.
    """
    head = read_head(git_dir)
    if head.kind is HeadKind.MISSING:
        raise ReferenceResolutionFailed(f"No HEAD reference in {git_dir}")
    if head.kind is HeadKind.DETACHED:
        raise ReferenceResolutionFailed(f"HEAD is detached at {head.oid}")
    if head.kind is HeadKind.UNBORN:
        logger.debug("HEAD points at unborn branch %s", head.ref)
        return None
    return head.oid


def commit_filter(author: Optional[str] = None, pattern: Optional[Pattern] = None) -> Optional[CommitPredicate]:
    """Builds the predicate for author equality and/or a message regex."""
    if author is None and pattern is None:
        return None

    def matches(commit: CommitObject) -> bool:
        if author is not None and commit.author.name != author:
            return False
        if pattern is not None and not (commit.message and pattern.search(commit.message)):
            return False
        return True

    return matches


class HistoryWalker:
    """Streams commits newest-first from a set of starting points.

    The frontier is a heap ordered by commit timestamp (latest first, ties by
    ascending hash). Each commit enters the frontier at most once, and a
    commit is held back while any of its children is still in the frontier,
    so a parent never comes out before its child even when both share a
    timestamp. Parents of an emitted commit are only read when the consumer
    asks for the next commit, so stopping early never reads more history than
    was pulled.
    """

    def __init__(self, store: ObjectStore):
        self.store = store

    def walk(
        self,
        start_oids: Iterable[str],
        limit: Optional[int] = None,
        predicate: Optional[CommitPredicate] = None,
    ) -> Iterator[CommitObject]:
        frontier: List[FrontierEntry] = []
        seen: Set[str] = set()
        # oid -> children of it still waiting in the frontier
        pending_children: Dict[str, int] = defaultdict(int)
        held: Dict[str, FrontierEntry] = {}

        def enqueue(oid: str):
            if oid in seen:
                return
            seen.add(oid)
            entry = FrontierEntry(oid=oid, commit=self.store.read_commit(oid))
            for parent_oid in entry.parents:
                pending_children[parent_oid] += 1
            heapq.heappush(frontier, entry)

        for oid in start_oids:
            enqueue(oid)

        emitted = 0
        skipped = 0
        while frontier:
            entry = heapq.heappop(frontier)
            if pending_children[entry.oid]:
                held[entry.oid] = entry
                continue

            if predicate is None or predicate(entry.commit):
                yield entry.commit
                emitted += 1
                if limit is not None and emitted >= limit:
                    logger.debug("History walk stopped at limit %d (%d skipped)", limit, skipped)
                    return
            else:
                skipped += 1

            # Non-matching commits still lead to matching ancestors
            for parent_oid in entry.parents:
                pending_children[parent_oid] -= 1
                if not pending_children[parent_oid] and parent_oid in held:
                    heapq.heappush(frontier, held.pop(parent_oid))
                enqueue(parent_oid)

        logger.debug("History walk exhausted after %d commits (%d skipped)", emitted, skipped)

    def walk_head(
        self,
        limit: Optional[int] = None,
        predicate: Optional[CommitPredicate] = None,
    ) -> Iterator[CommitObject]:
        head_oid = head_commit_oid(self.store.git_dir)
        if head_oid is None:
            return iter(())
        return self.walk([head_oid], limit=limit, predicate=predicate)
