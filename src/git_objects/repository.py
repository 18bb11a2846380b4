import configparser
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from src.errors import RepositoryUnavailable
from src.git_objects.parser import common_dir
from src.git_objects.store import ObjectStore

logger = logging.getLogger(__name__)


def _is_git_dir(path: Path) -> bool:
    return (path / "HEAD").is_file() and (common_dir(path) / "objects").is_dir()


def _follow_gitfile(dot_git: Path) -> Path:
    """Target of a ``.git`` file, as written for submodules and linked worktrees."""
    try:
        text = dot_git.read_text(errors="replace").strip()
    except OSError as e:
        raise RepositoryUnavailable(f"Could not read {dot_git}: {e}") from e
    if not text.startswith("gitdir:"):
        raise RepositoryUnavailable(f"Invalid gitfile format: {dot_git}")

    target = (dot_git.parent / text[len("gitdir:"):].strip()).resolve()
    if not _is_git_dir(target):
        raise RepositoryUnavailable(f"Not a git repository: {target} (named by {dot_git})")
    return target


def find_git_dir(start: Path) -> Optional[Path]:
    """Locate the git directory for ``start``, walking up like git does.

    A ``.git`` file ends the search: discovery never falls through to an
    enclosing repository when the gitfile's target is unusable.
    """
    start = start.resolve()
    for candidate in [start, *start.parents]:
        dot_git = candidate / ".git"
        if dot_git.is_file():
            return _follow_gitfile(dot_git)
        if dot_git.is_dir() and _is_git_dir(dot_git):
            return dot_git
        if _is_git_dir(candidate):
            # Bare repository or a path to the .git directory itself
            return candidate
    return None


def _origin_name(git_dir: Path) -> Optional[str]:
    config_path = common_dir(git_dir) / "config"
    if not config_path.is_file():
        return None

    # Git indents keys with tabs, which configparser reads as continuations
    text = "\n".join(line.strip() for line in config_path.read_text(errors="replace").splitlines())
    parser = configparser.ConfigParser(strict=False, interpolation=None)
    try:
        parser.read_string(text)
    except configparser.Error as e:
        logger.warning("Could not parse %s: %s", config_path, e)
        return None

    url = parser.get('remote "origin"', "url", fallback=None)
    if not url:
        return None
    name = url.rstrip("/")
    if name.endswith(".git"):
        name = name[: -len(".git")]
    # Handles both https://host/owner/repo and git@host:owner/repo
    return name.replace(":", "/").rsplit("/", 1)[-1] or None


@dataclass
class Repository:
    git_dir: Path
    store: ObjectStore = field(init=False)

    def __post_init__(self):
        self.store = ObjectStore(self.git_dir)

    @property
    def name(self) -> str:
        origin = _origin_name(self.git_dir)
        if origin:
            return origin
        # Fallback to directory name if no remote origin
        work_tree = self.git_dir.parent if self.git_dir.name == ".git" else self.git_dir
        return work_tree.name or "unknown"


def open_repository(path: Path = Path(".")) -> Repository:
    if not path.exists():
        raise RepositoryUnavailable(f"Path does not exist: {path}")

    git_dir = find_git_dir(path)
    if git_dir is None:
        raise RepositoryUnavailable(f"Not a git repository (or any of the parent directories): {path}")

    logger.debug("Opened repository at %s", git_dir)
    return Repository(git_dir=git_dir)
