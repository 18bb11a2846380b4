from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import hashlib
import re

_SIGNATURE_RE = re.compile(r"^(?P<name>.*?)\s*<(?P<email>[^>]*)>\s*(?P<ts>-?\d+)?\s*(?P<tz>[+-]\d{4})?\s*$")


@dataclass(frozen=True)
class Signature:
    """Identity line of an author, committer or tagger.

    Git writes these as ``Name <email> <unix seconds> <+hhmm>``.
    """

    name: str
    email: str
    timestamp: int = 0
    offset_minutes: int = 0

    @classmethod
    def parse(cls, line: str) -> "Signature":
        match = _SIGNATURE_RE.match(line)
        if not match:
            # Not a well-formed identity, keep the raw text as the name
            return cls(name=line.strip(), email="")

        offset = 0
        tz = match.group("tz")
        if tz:
            sign = -1 if tz[0] == "-" else 1
            offset = sign * (int(tz[1:3]) * 60 + int(tz[3:5]))

        return cls(
            name=match.group("name"),
            email=match.group("email"),
            timestamp=int(match.group("ts") or 0),
            offset_minutes=offset,
        )

    def format(self) -> str:
        sign = "-" if self.offset_minutes < 0 else "+"
        hours, minutes = divmod(abs(self.offset_minutes), 60)
        return f"{self.name} <{self.email}> {self.timestamp} {sign}{hours:02d}{minutes:02d}"

    def to_datetime(self) -> datetime:
        tz = timezone(timedelta(minutes=self.offset_minutes))
        return datetime.fromtimestamp(self.timestamp, tz)


@dataclass
class GitObject(ABC):
    oid: Optional[str] = field(default=None, init=False)

    @property
    @abstractmethod
    def type(self) -> bytes:
        pass

    @abstractmethod
    def serialize(self) -> bytes:
        pass

    @classmethod
    @abstractmethod
    def deserialize(cls, data: bytes) -> "GitObject":
        pass

    def compute_oid(self) -> str:
        """Computes and sets the SHA-1 hash of the object."""
        data = self.serialize()
        header = f"{self.type.decode()} {len(data)}".encode() + b"\x00"
        full_content = header + data
        self.oid = hashlib.sha1(full_content).hexdigest()
        return self.oid


def _split_headers(data: bytes):
    """Split a commit or tag body into (headers, message).

    Continuation lines (leading space, used by ``gpgsig`` and ``mergetag``)
    are folded into the preceding header.
    """
    content = data.decode("utf-8", errors="replace")
    lines = content.split("\n")

    headers = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line:
            # Empty line indicates end of headers
            i += 1
            break
        if line.startswith(" ") and headers:
            key, value = headers[-1]
            headers[-1] = (key, value + "\n" + line[1:])
        else:
            key, _, value = line.partition(" ")
            headers.append((key, value))
        i += 1

    # The rest is the message
    message = "\n".join(lines[i:])
    return headers, message


@dataclass
class CommitObject(GitObject):
    tree_oid: str
    parent_oids: List[str]
    author: Signature
    committer: Signature
    message: str

    @property
    def type(self) -> bytes:
        return b"commit"

    @property
    def timestamp(self) -> int:
        return self.committer.timestamp

    def serialize(self) -> bytes:
        lines = []
        lines.append(f"tree {self.tree_oid}".encode())
        for p in self.parent_oids:
            lines.append(f"parent {p}".encode())
        lines.append(f"author {self.author.format()}".encode())
        lines.append(f"committer {self.committer.format()}".encode())
        lines.append(b"")
        lines.append(self.message.encode())

        return b"\n".join(lines)

    @classmethod
    def deserialize(cls, data: bytes) -> "CommitObject":
        headers, message = _split_headers(data)

        tree_oid = ""
        parent_oids = []
        author = Signature(name="", email="")
        committer = Signature(name="", email="")

        for key, value in headers:
            if key == "tree":
                tree_oid = value
            elif key == "parent":
                parent_oids.append(value)
            elif key == "author":
                author = Signature.parse(value)
            elif key == "committer":
                committer = Signature.parse(value)

        return cls(
            tree_oid=tree_oid,
            parent_oids=parent_oids,
            author=author,
            committer=committer,
            message=message,
        )


@dataclass
class TagObject(GitObject):
    object_oid: str
    object_type: str
    name: str
    tagger: Optional[Signature]
    message: str

    @property
    def type(self) -> bytes:
        return b"tag"

    def serialize(self) -> bytes:
        lines = [
            f"object {self.object_oid}".encode(),
            f"type {self.object_type}".encode(),
            f"tag {self.name}".encode(),
        ]
        if self.tagger is not None:
            lines.append(f"tagger {self.tagger.format()}".encode())
        lines.append(b"")
        lines.append(self.message.encode())
        return b"\n".join(lines)

    @classmethod
    def deserialize(cls, data: bytes) -> "TagObject":
        headers, message = _split_headers(data)
        fields = {}
        tagger = None
        for key, value in headers:
            if key == "tagger":
                tagger = Signature.parse(value)
            else:
                fields.setdefault(key, value)

        return cls(
            object_oid=fields.get("object", ""),
            object_type=fields.get("type", ""),
            name=fields.get("tag", ""),
            tagger=tagger,
            message=message,
        )


@dataclass
class OpaqueObject(GitObject):
    """A blob or tree. Only its kind is ever inspected."""

    kind: bytes
    data: bytes

    @property
    def type(self) -> bytes:
        return self.kind

    def serialize(self) -> bytes:
        return self.data

    @classmethod
    def deserialize(cls, data: bytes) -> "OpaqueObject":
        return cls(kind=b"blob", data=data)
