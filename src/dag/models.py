from dataclasses import dataclass, field
from src.git_objects.models import CommitObject


@dataclass(order=True)
class FrontierEntry:
    """A discovered commit waiting in the walk's priority queue.

    Ordering puts the newest commit first; equal timestamps fall back to
    ascending hash so the walk is deterministic.
    """

    sort_key: tuple = field(init=False, repr=False)
    oid: str = field(compare=False)
    commit: CommitObject = field(compare=False)

    def __post_init__(self):
        self.sort_key = (-self.commit.timestamp, self.oid)

    @property
    def parents(self):
        return self.commit.parent_oids
