"""Local packaging step: archive the application tree with tar."""

import logging
import os
import shlex

import pulumi
from pulumi_command import local

logger = logging.getLogger(__name__)


def archive_relpath(archive, source_dir) -> str:
    """Path of the archive as seen from inside source_dir."""
    return os.path.relpath(os.path.abspath(archive), os.path.abspath(source_dir))


def archive_excludes(archive, source_dir, excludes=()) -> list[str]:
    """Excludes for packaging source_dir, always leaving the archive out.

    When the archive lies inside the tree and its top-level entry is not
    already excluded, that entry is added anchored at the tree root ("./x"),
    so tar never packs the archive into itself and content hashes stay stable.
    """
    result = list(excludes)
    rel = archive_relpath(archive, source_dir)
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return result
    top = rel.split(os.sep, 1)[0]
    if top not in result and f"./{top}" not in result:
        result.append(f"./{top}")
    return result


def tar_command(archive, excludes=()) -> str:
    """Build the shell command that recreates the archive.

    Runs from the root of the tree being packaged; `archive` is relative to
    that root.
    """
    target = shlex.quote(archive)
    parts = [f"rm -rf {target} && tar zcfv {target}"]
    parts += [f"--exclude={shlex.quote(e)}" for e in excludes]
    parts.append(".")
    return " ".join(parts)


def create_package_command(name, source_dir, archive, excludes, triggers, opts=None):
    """Declare the local tar command.

    A non-zero exit fails the step and the engine aborts the run.
    """
    create = tar_command(archive_relpath(archive, source_dir), excludes)
    logger.debug(f"{name}: (cd {source_dir} && {create})")
    return local.Command(
        name,
        dir=os.path.abspath(source_dir),
        create=create,
        triggers=triggers,
        opts=opts or pulumi.ResourceOptions(),
    )
