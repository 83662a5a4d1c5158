"""Tests for the local and remote command strings."""

from ec2runner.provisioning.packaging import archive_excludes, archive_relpath, tar_command
from ec2runner.provisioning.remote import install_command, remote_archive_path


# ── Packaging ────────────────────────────────────────────────────


def test_tar_command_default_excludes():
    cmd = tar_command("infrastructure/server.tar.gz", [".bundle", "infrastructure"])
    assert cmd == (
        "rm -rf infrastructure/server.tar.gz && tar zcfv infrastructure/server.tar.gz"
        " --exclude=.bundle --exclude=infrastructure ."
    )


def test_tar_command_no_excludes():
    assert tar_command("out.tgz") == "rm -rf out.tgz && tar zcfv out.tgz ."


def test_tar_command_quotes_paths():
    cmd = tar_command("my dir/app.tar.gz", ["node modules"])
    assert "'my dir/app.tar.gz'" in cmd
    assert "--exclude='node modules'" in cmd


def test_archive_relpath_inside_tree(tmp_path):
    source = tmp_path / "server"
    archive = source / "infrastructure" / "server.tar.gz"
    assert archive_relpath(str(archive), str(source)) == "infrastructure/server.tar.gz"


def test_archive_relpath_outside_tree(tmp_path):
    source = tmp_path / "server"
    archive = tmp_path / "server.tar.gz"
    assert archive_relpath(str(archive), str(source)) == "../server.tar.gz"


def test_archive_excludes_default_layout(tmp_path):
    source = tmp_path / "server"
    archive = source / "infrastructure" / "server.tar.gz"
    excludes = [".bundle", "infrastructure"]
    assert archive_excludes(str(archive), str(source), excludes) == excludes


def test_archive_excludes_adds_project_dir(tmp_path):
    source = tmp_path / "server"
    archive = source / "deploy" / "server.tar.gz"
    result = archive_excludes(str(archive), str(source), [".bundle", "infrastructure"])
    assert result == [".bundle", "infrastructure", "./deploy"]


def test_archive_excludes_archive_at_tree_root(tmp_path):
    source = tmp_path / "server"
    assert archive_excludes(str(source / "app.tar.gz"), str(source)) == ["./app.tar.gz"]


def test_archive_excludes_archive_outside_tree(tmp_path):
    source = tmp_path / "server"
    archive = tmp_path / "server.tar.gz"
    assert archive_excludes(str(archive), str(source), [".bundle"]) == [".bundle"]


def test_archive_excludes_does_not_mutate_input(tmp_path):
    source = tmp_path / "server"
    excludes = [".bundle"]
    archive_excludes(str(source / "deploy" / "a.tgz"), str(source), excludes)
    assert excludes == [".bundle"]


# ── Remote ───────────────────────────────────────────────────────


def test_install_command_defaults():
    assert install_command("server.tar.gz") == (
        "rm -rf server && mkdir -p server && tar xzf server.tar.gz -C server && bash ./server/install.sh root"
    )


def test_install_command_custom_args():
    cmd = install_command("app.tgz", remote_dir="app", script="setup.sh", args=["--user", "deploy"])
    assert cmd == "rm -rf app && mkdir -p app && tar xzf app.tgz -C app && bash ./app/setup.sh --user deploy"


def test_install_command_no_args():
    assert install_command("server.tar.gz", args=()).endswith("bash ./server/install.sh")


def test_remote_archive_path():
    assert remote_archive_path("ec2-user", "server.tar.gz") == "/home/ec2-user/server.tar.gz"
