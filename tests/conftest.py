import zlib
from pathlib import Path
from typing import Optional, Sequence

import pytest

from src.git_objects.models import CommitObject, GitObject, OpaqueObject, Signature, TagObject

BASE_TIME = 1_700_000_000


class RepoFactory:
    """Writes a real .git directory of loose objects and refs."""

    def __init__(self, root: Path):
        self.root = root
        self.git_dir = root / ".git"
        (self.git_dir / "objects").mkdir(parents=True)
        (self.git_dir / "refs" / "heads").mkdir(parents=True)
        (self.git_dir / "refs" / "tags").mkdir(parents=True)
        (self.git_dir / "HEAD").write_text("ref: refs/heads/main\n")
        self._clock = BASE_TIME
        self.tree = self.write(OpaqueObject(kind=b"tree", data=b""))

    def write(self, obj: GitObject) -> str:
        data = obj.serialize()
        oid = obj.compute_oid()
        store = f"{obj.type.decode()} {len(data)}".encode() + b"\x00" + data

        path = self.git_dir / "objects" / oid[:2] / oid[2:]
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(zlib.compress(store))
        return oid

    def commit(
        self,
        message: str,
        parents: Sequence[str] = (),
        author: str = "Test User",
        email: str = "test@example.com",
        timestamp: Optional[int] = None,
        branch: Optional[str] = "main",
    ) -> str:
        if timestamp is None:
            self._clock += 60
            timestamp = self._clock
        signature = Signature(name=author, email=email, timestamp=timestamp)
        oid = self.write(CommitObject(
            tree_oid=self.tree,
            parent_oids=list(parents),
            author=signature,
            committer=signature,
            message=message,
        ))
        if branch:
            self.set_ref(f"refs/heads/{branch}", oid)
        return oid

    def chain(self, messages: Sequence[str], **kwargs) -> list:
        oids = []
        for message in messages:
            oids.append(self.commit(message, parents=oids[-1:], **kwargs))
        return oids

    def tag(self, name: str, target: str, message: Optional[str] = None, target_type: str = "commit") -> str:
        """Lightweight tag when ``message`` is None, annotated otherwise."""
        if message is None:
            self.set_ref(f"refs/tags/{name}", target)
            return target
        oid = self.write(TagObject(
            object_oid=target,
            object_type=target_type,
            name=name,
            tagger=Signature(name="Tagger", email="tagger@example.com", timestamp=BASE_TIME),
            message=message,
        ))
        self.set_ref(f"refs/tags/{name}", oid)
        return oid

    def set_ref(self, ref: str, oid: str):
        path = self.git_dir / ref
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(oid + "\n")

    def set_head(self, content: str):
        (self.git_dir / "HEAD").write_text(content + "\n")


@pytest.fixture
def repo_factory(tmp_path):
    return RepoFactory(tmp_path / "project")


@pytest.fixture
def linear_repo(repo_factory):
    """C1 (root) <- C2 <- C3 (main, HEAD)"""
    c1, c2, c3 = repo_factory.chain(["Initial commit", "Second commit", "Third commit"])
    return repo_factory, (c1, c2, c3)


@pytest.fixture
def make_repo(tmp_path):
    """Builds further repositories beside ``repo_factory``'s."""
    return lambda name: RepoFactory(tmp_path / name)
