from pathlib import Path
import sys

from src.adapter.adapter import GitAdapter
from src.errors import GitSeekError
from src.git_objects.repository import open_repository
from src.presets.presets import all_presets, run
from src.query.executor import ShapeExecutor


def main(path: str = "."):
    try:
        repo = open_repository(Path(path))
    except GitSeekError as e:
        print(e)
        return

    print(f"Repository: {repo.name} ({repo.git_dir})")
    executor = ShapeExecutor(GitAdapter(repo))

    for preset in all_presets():
        if any(p.required for p in preset.params):
            continue
        print(f"\n--- {preset.name}: {preset.description} ---")
        shape = run(preset.name, {})
        for row in executor.execute(shape):
            print("  " + " | ".join(str(row[c]).splitlines()[0] if row[c] else "-" for c in shape.columns()))


if __name__ == "__main__":
    main(*sys.argv[1:2])
