import zlib
import shutil
from pathlib import Path
from src.git_objects.models import CommitObject, OpaqueObject, Signature, TagObject


def write_object(obj, git_dir):
    oid = obj.compute_oid()
    data = obj.serialize()
    store = f"{obj.type.decode()} {len(data)}".encode() + b"\x00" + data

    # Write to disk
    obj_dir = git_dir / "objects" / oid[:2]
    obj_dir.mkdir(parents=True, exist_ok=True)
    obj_file = obj_dir / oid[2:]

    if not obj_file.exists():
        with open(obj_file, "wb") as f:
            f.write(zlib.compress(store))

    return oid


def main():
    repo_dir = Path("demo_repo")
    if repo_dir.exists():
        shutil.rmtree(repo_dir)

    git_dir = repo_dir / ".git"
    (git_dir / "objects").mkdir(parents=True)
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "refs" / "tags").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")

    print(f"Creating demo repo in {repo_dir}...")
    tree_oid = write_object(OpaqueObject(kind=b"tree", data=b""), git_dir)

    def commit(message, parents, who, when):
        sig = Signature(name=who, email=f"{who.lower()}@example.com", timestamp=when)
        oid = write_object(CommitObject(tree_oid, parents, sig, sig, message), git_dir)
        print(f"Created commit {oid[:7]} - {message}")
        return oid

    start = 1_700_000_000
    c1 = commit("Initial commit", [], "Alice", start)
    c2 = commit("fix login bug", [c1], "Bob", start + 3600)
    c3 = commit("add feature", [c2], "Alice", start + 7200)
    c4 = commit("fix rendering bug", [c2], "Bob", start + 5400)
    c5 = commit("Merge branch 'feature'", [c4, c3], "Alice", start + 9000)

    (git_dir / "refs" / "heads" / "main").write_text(c5 + "\n")
    (git_dir / "refs" / "heads" / "feature").write_text(c3 + "\n")

    # Lightweight tag and annotated tag
    (git_dir / "refs" / "tags" / "v0.1").write_text(c1 + "\n")
    tag = TagObject(
        object_oid=c5,
        object_type="commit",
        name="v1.0",
        tagger=Signature(name="Alice", email="alice@example.com", timestamp=start + 9600),
        message="Release 1.0\n",
    )
    (git_dir / "refs" / "tags" / "v1.0").write_text(write_object(tag, git_dir) + "\n")

    print("\nRepo created. Try: git-seek --repo demo_repo preset run recent-commits --format table")


if __name__ == "__main__":
    main()
