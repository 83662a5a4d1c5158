"""Remote steps: copy the archive to the instance and run its install script."""

import logging
import os
import posixpath
import shlex

import pulumi
from pulumi_command import remote

logger = logging.getLogger(__name__)


def connection_args(host, private_key, user="ec2-user"):
    """SSH connection used by both the upload and the install command."""
    return remote.ConnectionArgs(
        host=host,
        user=user,
        private_key=private_key,
    )


def remote_archive_path(user, archive_name) -> str:
    return posixpath.join(f"/home/{user}", archive_name)


def install_command(archive_name, remote_dir="server", script="install.sh", args=("root",)) -> str:
    """Build the remote command: unpack into a clean directory, run the script.

    Runs from the login user's home directory, where the archive was copied.
    """
    target = shlex.quote(remote_dir)
    script_path = shlex.quote(f"./{posixpath.join(remote_dir, script)}")
    invoke = " ".join(["bash", script_path, *(shlex.quote(str(a)) for a in args)])
    return f"rm -rf {target} && mkdir -p {target} && tar xzf {shlex.quote(archive_name)} -C {target} && {invoke}"


def create_upload(name, connection, archive, remote_path, package, triggers, opts=None):
    """Declare the copy of the local archive to remote_path.

    The file asset is built from the package step's output, so the archive is
    only read once tar has written it.
    """
    source = package.stdout.apply(lambda _: pulumi.FileAsset(os.path.abspath(archive)))
    logger.debug(f"{name}: {archive} -> {remote_path}")
    return remote.CopyToRemote(
        name,
        connection=connection,
        source=source,
        remote_path=remote_path,
        triggers=triggers,
        opts=opts or pulumi.ResourceOptions(),
    )


def create_install_command(name, connection, create, triggers, opts=None):
    """Declare the remote install. A non-zero exit aborts the run."""
    logger.debug(f"{name}: {create}")
    return remote.Command(
        name,
        connection=connection,
        create=create,
        triggers=triggers,
        opts=opts or pulumi.ResourceOptions(),
    )
