from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict

from src.errors import ReferenceResolutionFailed
from src.git_objects.parser import common_dir

MAX_SYMREF_DEPTH = 5


def read_packed_refs(git_dir: Path) -> Dict[str, str]:
    """Parses .git/packed-refs into {ref name: oid}."""
    packed_path = common_dir(git_dir) / "packed-refs"
    refs: Dict[str, str] = {}
    if not packed_path.is_file():
        return refs

    for line in packed_path.read_text().splitlines():
        # '#' starts the header, '^' is the peeled target of the previous tag
        if not line or line.startswith("#") or line.startswith("^"):
            continue
        oid, _, name = line.partition(" ")
        if name:
            refs[name.strip()] = oid.strip()
    return refs


def resolve_ref(git_dir: Path, ref_path: str, _depth: int = 0) -> Optional[str]:
    """Resolves a reference (e.g., 'refs/heads/main') to an OID."""
    if _depth > MAX_SYMREF_DEPTH:
        raise ReferenceResolutionFailed(f"Too many levels of symbolic refs at {ref_path}")

    # HEAD is per worktree, branches and tags live in the common directory
    full_path = git_dir / ref_path
    if not full_path.is_file():
        full_path = common_dir(git_dir) / ref_path
    if not full_path.is_file():
        return read_packed_refs(git_dir).get(ref_path)

    content = full_path.read_text().strip()
    if content.startswith("ref: "):
        # Recursive resolution (e.g. HEAD -> refs/heads/main)
        return resolve_ref(git_dir, content[5:], _depth + 1)
    return content


class HeadKind(Enum):
    SYMBOLIC = "symbolic"
    UNBORN = "unborn"
    DETACHED = "detached"
    MISSING = "missing"


@dataclass(frozen=True)
class HeadState:
    kind: HeadKind
    ref: Optional[str] = None
    oid: Optional[str] = None


def read_head(git_dir: Path = Path(".git")) -> HeadState:
    head_path = git_dir / "HEAD"
    if not head_path.is_file():
        return HeadState(HeadKind.MISSING)

    content = head_path.read_text().strip()
    if not content.startswith("ref: "):
        return HeadState(HeadKind.DETACHED, oid=content)

    ref = content[5:]
    oid = resolve_ref(git_dir, ref)
    if oid is None:
        # Branch has no commits yet (fresh repository)
        return HeadState(HeadKind.UNBORN, ref=ref)
    return HeadState(HeadKind.SYMBOLIC, ref=ref, oid=oid)


def _list_refs(git_dir: Path, prefix: str) -> Dict[str, str]:
    """Loose and packed refs under ``prefix``, sorted by short name.

    A loose ref shadows a packed ref of the same name.
    """
    refs = {}
    for full_name, oid in read_packed_refs(git_dir).items():
        if full_name.startswith(prefix):
            refs[full_name[len(prefix):]] = oid

    base_dir = common_dir(git_dir) / prefix
    if base_dir.exists():
        for path in base_dir.glob("**/*"):
            if path.is_file():
                # name is relative to the prefix, e.g. 'feat/new-feature'
                name = path.relative_to(base_dir).as_posix()
                refs[name] = path.read_text().strip()

    return dict(sorted(refs.items()))


def get_branches(git_dir: Path = Path(".git")) -> Dict[str, str]:
    """Returns a dictionary of branch names and their tip OIDs."""
    return _list_refs(git_dir, "refs/heads/")


def get_tags(git_dir: Path = Path(".git")) -> Dict[str, str]:
    """Returns a dictionary of tag names and the OIDs their refs point at.

    For annotated tags this is the tag object, not the commit.
    """
    return _list_refs(git_dir, "refs/tags/")
