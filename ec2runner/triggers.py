"""Trigger tokens for the package, upload and install steps."""

import hashlib
import time
from pathlib import Path


def always_trigger() -> list[str]:
    """A token that changes every run: current unix time in milliseconds."""
    return [str(time.time_ns() // 1_000_000)]


def source_tree_hash(source_dir, excludes=()) -> str:
    """SHA256 of every file under source_dir, sorted by relative path.

    A path is skipped when any of its components matches a bare exclude,
    the same way tar --exclude treats a bare name. An exclude written as
    "./name" only matches name at the top of the tree.
    """
    root = Path(source_dir)
    anchored = {e[2:] for e in excludes if e.startswith("./")}
    excluded = {e for e in excludes if not e.startswith("./")}
    hasher = hashlib.sha256()
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if rel.parts[0] in anchored or excluded.intersection(rel.parts) or not path.is_file():
            continue
        hasher.update(f"{rel.as_posix()}\n".encode())
        hasher.update(path.read_bytes())
        hasher.update(b"\n")
    return hasher.hexdigest()


def make_triggers(mode, source_dir, excludes=()) -> list[str]:
    """Build the trigger list shared by the fresh steps of one run.

    Args:
        mode: "always" re-runs every time; "content" re-runs only when the
            source tree changes.
    """
    if mode == "always":
        return always_trigger()
    if mode == "content":
        return [source_tree_hash(source_dir, excludes)]
    raise ValueError(f"Unknown triggers mode '{mode}'")
