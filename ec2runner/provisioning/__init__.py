"""Resource declarations: security group, credential, instance, package, remote steps."""

from ec2runner.provisioning.credentials import Credential, create_key_pair, create_private_key
from ec2runner.provisioning.instance import create_instance
from ec2runner.provisioning.network import (
    DEFAULT_EGRESS,
    DEFAULT_INGRESS,
    FirewallRule,
    create_security_group,
    require_ssh_ingress,
    rules_from_config,
)
from ec2runner.provisioning.packaging import archive_excludes, archive_relpath, create_package_command, tar_command
from ec2runner.provisioning.remote import (
    connection_args,
    create_install_command,
    create_upload,
    install_command,
    remote_archive_path,
)

__all__ = [
    "Credential",
    "create_private_key",
    "create_key_pair",
    "create_instance",
    "FirewallRule",
    "DEFAULT_INGRESS",
    "DEFAULT_EGRESS",
    "rules_from_config",
    "require_ssh_ingress",
    "create_security_group",
    "archive_relpath",
    "archive_excludes",
    "tar_command",
    "create_package_command",
    "connection_args",
    "remote_archive_path",
    "install_command",
    "create_upload",
    "create_install_command",
]
