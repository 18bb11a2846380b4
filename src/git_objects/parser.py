import logging
import re
import subprocess
import zlib
from pathlib import Path

from src.errors import ObjectReadFailed
from .models import GitObject, CommitObject, TagObject, OpaqueObject

logger = logging.getLogger(__name__)

_OID_RE = re.compile(r"^[0-9a-f]{40}$")


def common_dir(git_dir: Path) -> Path:
    """Directory holding objects, shared refs and config for ``git_dir``.

    A linked worktree's git directory only keeps its own HEAD and names the
    main repository's directory in a ``commondir`` file.
    """
    pointer = git_dir / "commondir"
    if not pointer.is_file():
        return git_dir
    return (git_dir / pointer.read_text().strip()).resolve()


def _build_object(type_str: bytes, content: bytes, oid: str) -> GitObject:
    obj: GitObject
    if type_str == b"commit":
        obj = CommitObject.deserialize(content)
    elif type_str == b"tag":
        obj = TagObject.deserialize(content)
    elif type_str in (b"blob", b"tree"):
        obj = OpaqueObject(kind=type_str, data=content)
    else:
        raise ObjectReadFailed(f"Unknown object type {type_str!r} for {oid}")

    obj.oid = oid
    return obj


def _read_packed_object(oid: str, git_dir: Path) -> GitObject:
    """Read an object git keeps in a packfile by asking git itself."""
    try:
        # Use --git-dir to be explicit and avoid cwd issues
        cmd_type = ["git", "--git-dir", str(git_dir), "cat-file", "-t", oid]
        type_proc = subprocess.run(cmd_type, capture_output=True, check=True)
        obj_type = type_proc.stdout.strip()

        # 'git cat-file <type>' prints the raw content, '-p' would pretty print
        cmd_content = ["git", "--git-dir", str(git_dir), "cat-file", obj_type.decode(), oid]
        content_proc = subprocess.run(cmd_content, capture_output=True, check=True)
    except subprocess.CalledProcessError as e:
        stderr_msg = e.stderr.decode(errors="replace").strip() if e.stderr else "No stderr"
        raise ObjectReadFailed(f"Object {oid} not found in loose objects or packfiles: {stderr_msg}") from e
    except OSError as e:
        raise ObjectReadFailed(f"Object {oid} is not a loose object and git is unavailable: {e}") from e

    logger.debug("Read packed object %s (%s)", oid, obj_type.decode())
    return _build_object(obj_type, content_proc.stdout, oid)


def read_object(oid: str, git_dir: Path = Path(".git")) -> GitObject:
    """Read an object from the git directory by its SHA-1 hash."""
    if not _OID_RE.match(oid):
        raise ObjectReadFailed(f"Invalid Object ID: {oid!r}")

    path = common_dir(git_dir) / "objects" / oid[:2] / oid[2:]
    if not path.exists():
        return _read_packed_object(oid, git_dir)

    try:
        with open(path, "rb") as f:
            compressed_data = f.read()
        raw_data = zlib.decompress(compressed_data)
    except (OSError, zlib.error) as e:
        raise ObjectReadFailed(f"Could not read object {oid} from {path}: {e}") from e

    # format: "type size\0content"
    null_idx = raw_data.find(b"\x00")
    if null_idx == -1:
        raise ObjectReadFailed(f"Invalid object format for {oid} (no null byte)")

    header = raw_data[:null_idx]
    content = raw_data[null_idx + 1:]

    try:
        type_str, size_str = header.split(b" ")
        size = int(size_str)
    except ValueError as e:
        raise ObjectReadFailed(f"Invalid object header for {oid}: {header!r}") from e
    if size != len(content):
        raise ObjectReadFailed(f"Object {oid} is truncated ({len(content)} of {size} bytes)")

    return _build_object(type_str, content, oid)
