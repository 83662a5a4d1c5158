"""Pulumi program: declare the runner chain and export its outputs.

Steps are declared in plan order with explicit depends_on edges taken from
ec2runner.plan. The engine does the scheduling; nothing here waits or retries.
"""

import logging
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws
import pulumi_tls as tls
from pulumi_command import local, remote

from ec2runner import plan
from ec2runner.config import RunnerConfig
from ec2runner.provisioning import (
    Credential,
    archive_excludes,
    archive_relpath,
    connection_args,
    create_install_command,
    create_instance,
    create_key_pair,
    create_package_command,
    create_private_key,
    create_security_group,
    create_upload,
    install_command,
    remote_archive_path,
    require_ssh_ingress,
    rules_from_config,
    tar_command,
)
from ec2runner.triggers import make_triggers

logger = logging.getLogger(__name__)

OUTPUT_IP = "ip"
OUTPUT_SSH_KEY = "sshKey"
OUTPUT_INSTALL_STDOUT = "installStdout"
OUTPUT_INSTALL_STDERR = "installStderr"


class ProvisioningError(RuntimeError):
    """A resource declaration failed. The message names the step."""

    def __init__(self, step, cause):
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")


@dataclass
class RunnerResources:
    security_group: aws.ec2.SecurityGroup
    private_key: tls.PrivateKey
    key_pair: aws.ec2.KeyPair
    instance: aws.ec2.Instance
    package: local.Command
    upload: remote.CopyToRemote
    install: remote.Command


def runner_rules(config: RunnerConfig):
    return rules_from_config("ingress", config.network.ingress) + rules_from_config("egress", config.network.egress)


def package_excludes(config: RunnerConfig) -> list[str]:
    pkg = config.package
    return archive_excludes(pkg.archive, pkg.source_dir, pkg.excludes)


def _declare(declared, name, factory):
    """Declare one step with depends_on edges from the plan.

    Any failure is re-raised as ProvisioningError naming the step.
    """
    step = plan.get_step(plan.RUNNER_STEPS, name)
    opts = pulumi.ResourceOptions(depends_on=[declared[dep] for dep in step.depends_on])
    try:
        resource = factory(opts)
    except Exception as e:
        raise ProvisioningError(name, e) from e
    declared[name] = resource
    return resource


def pulumi_program(config: RunnerConfig | None = None) -> RunnerResources:
    """Declare every runner resource, then export the run outputs.

    Outputs are exported only after all declarations succeeded.
    """
    config = config or RunnerConfig()
    plan.validate_plan(plan.RUNNER_STEPS)
    rules = runner_rules(config)
    require_ssh_ingress(rules)

    pkg = config.package
    excludes = package_excludes(config)
    triggers = make_triggers(config.triggers, pkg.source_dir, excludes)
    declared = {}

    security_group = _declare(
        declared,
        plan.SECURITY_GROUP,
        lambda opts: create_security_group(plan.SECURITY_GROUP, rules, config.network.description, opts=opts),
    )
    private_key = _declare(
        declared,
        plan.PRIVATE_KEY,
        lambda opts: create_private_key(plan.PRIVATE_KEY, config.rsa_bits, opts=opts),
    )
    key_pair = _declare(
        declared,
        plan.KEY_PAIR,
        lambda opts: create_key_pair(plan.KEY_PAIR, private_key, opts=opts),
    )
    credential = Credential(private_key=private_key, key_pair=key_pair)
    instance = _declare(
        declared,
        plan.INSTANCE,
        lambda opts: create_instance(
            plan.INSTANCE,
            security_group,
            credential,
            instance_type=config.instance.instance_type,
            ami=config.instance.ami,
            opts=opts,
        ),
    )
    package = _declare(
        declared,
        plan.PACKAGE,
        lambda opts: create_package_command(plan.PACKAGE, pkg.source_dir, pkg.archive, excludes, triggers, opts=opts),
    )

    user = config.instance.ssh_user
    connection = connection_args(instance.public_ip, credential.private_key_openssh, user)
    upload = _declare(
        declared,
        plan.UPLOAD,
        lambda opts: create_upload(
            plan.UPLOAD,
            connection,
            pkg.archive,
            remote_archive_path(user, config.archive_name),
            package,
            triggers,
            opts=opts,
        ),
    )
    install = _declare(
        declared,
        plan.INSTALL,
        lambda opts: create_install_command(plan.INSTALL, connection, _install_create(config), triggers, opts=opts),
    )

    pulumi.export(OUTPUT_IP, instance.public_ip)
    pulumi.export(OUTPUT_SSH_KEY, pulumi.Output.secret(credential.private_key_openssh))
    pulumi.export(OUTPUT_INSTALL_STDOUT, install.stdout)
    pulumi.export(OUTPUT_INSTALL_STDERR, install.stderr)

    return RunnerResources(
        security_group=security_group,
        private_key=private_key,
        key_pair=key_pair,
        instance=instance,
        package=package,
        upload=upload,
        install=install,
    )


def _install_create(config: RunnerConfig) -> str:
    inst = config.install
    return install_command(config.archive_name, inst.remote_dir, inst.script, inst.args)


def _rule_summary(rule) -> str:
    if rule.protocol == "-1":
        return "all"
    ports = str(rule.from_port) if rule.from_port == rule.to_port else f"{rule.from_port}-{rule.to_port}"
    return f"{ports}/{rule.protocol}"


def describe_step(step: plan.Step, config: RunnerConfig) -> str:
    """One-line description of what a step declares, for dry runs."""
    pkg = config.package
    user = config.instance.ssh_user
    if step.name == plan.SECURITY_GROUP:
        rules = runner_rules(config)
        ingress = ", ".join(_rule_summary(r) for r in rules if r.direction == "ingress")
        egress = ", ".join(_rule_summary(r) for r in rules if r.direction == "egress")
        return f"security group '{config.network.description}': ingress {ingress}; egress {egress}"
    if step.name == plan.PRIVATE_KEY:
        return f"RSA-{config.rsa_bits} private key"
    if step.name == plan.KEY_PAIR:
        return "register public key as EC2 key pair"
    if step.name == plan.INSTANCE:
        return f"instance {config.instance.instance_type} from {config.instance.ami} in {config.region}"
    if step.name == plan.PACKAGE:
        create = tar_command(archive_relpath(pkg.archive, pkg.source_dir), package_excludes(config))
        return f"local (cd {pkg.source_dir}): {create}"
    if step.name == plan.UPLOAD:
        return f"scp {pkg.archive} -> {user}@<instance ip>:{remote_archive_path(user, config.archive_name)}"
    if step.name == plan.INSTALL:
        return f"ssh {user}@<instance ip>: {_install_create(config)}"
    raise KeyError(step.name)
