"""Security group: firewall rules for the runner instance."""

import logging
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

logger = logging.getLogger(__name__)

ANYWHERE = ("0.0.0.0/0",)
ANYWHERE_V6 = ("::/0",)


@dataclass(frozen=True)
class FirewallRule:
    """One security group rule. protocol "-1" means all protocols."""

    direction: str  # "ingress" or "egress"
    protocol: str
    from_port: int
    to_port: int
    cidr_blocks: tuple[str, ...] = ANYWHERE
    ipv6_cidr_blocks: tuple[str, ...] = ()
    description: str = ""

    def covers(self, port, protocol) -> bool:
        if self.protocol not in (protocol, "-1"):
            return False
        # All-protocol rules use 0-0 to mean every port
        if self.protocol == "-1" and self.from_port == 0 and self.to_port == 0:
            return True
        return self.from_port <= port <= self.to_port


DEFAULT_INGRESS = (
    FirewallRule("ingress", "tcp", 22, 22, description="SSH"),
    FirewallRule("ingress", "udp", 53, 53, description="DNS UDP"),
    FirewallRule("ingress", "tcp", 53, 53, description="DNS TCP"),
)

DEFAULT_EGRESS = (
    FirewallRule("egress", "-1", 0, 0, ipv6_cidr_blocks=ANYWHERE_V6),
)


def rules_from_config(direction, entries):
    """Build rules from config dicts; None yields the defaults for direction.

    Each entry needs `port` or `from_port`/`to_port`; `protocol` defaults to
    tcp and `cidr_blocks` to anywhere.
    """
    if entries is None:
        return list(DEFAULT_INGRESS if direction == "ingress" else DEFAULT_EGRESS)

    if not isinstance(entries, list):
        raise ValueError(f"{direction} rules must be a list, got {type(entries).__name__}")

    rules = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"{direction} rule {entry!r} must be a mapping")
        if "port" in entry:
            from_port = to_port = int(entry["port"])
        elif "from_port" in entry and "to_port" in entry:
            from_port, to_port = int(entry["from_port"]), int(entry["to_port"])
        else:
            raise ValueError(f"{direction} rule {entry!r} needs 'port' or 'from_port'/'to_port'")
        rules.append(
            FirewallRule(
                direction,
                str(entry.get("protocol", "tcp")),
                from_port,
                to_port,
                cidr_blocks=tuple(entry.get("cidr_blocks", ANYWHERE)),
                ipv6_cidr_blocks=tuple(entry.get("ipv6_cidr_blocks", ())),
                description=entry.get("description", ""),
            )
        )
    return rules


def require_ssh_ingress(rules, port=22):
    """Raise ValueError unless some ingress rule lets SSH in from somewhere.

    The upload and install steps connect over SSH; without this rule they
    can never reach the instance.
    """
    for rule in rules:
        if rule.direction != "ingress":
            continue
        if rule.covers(port, "tcp") and (rule.cidr_blocks or rule.ipv6_cidr_blocks):
            return
    raise ValueError(f"Rule set has no ingress rule for SSH ({port}/tcp)")


def _ingress_args(rule):
    return aws.ec2.SecurityGroupIngressArgs(
        description=rule.description or None,
        from_port=rule.from_port,
        to_port=rule.to_port,
        protocol=rule.protocol,
        cidr_blocks=list(rule.cidr_blocks),
        ipv6_cidr_blocks=list(rule.ipv6_cidr_blocks) or None,
    )


def _egress_args(rule):
    return aws.ec2.SecurityGroupEgressArgs(
        description=rule.description or None,
        from_port=rule.from_port,
        to_port=rule.to_port,
        protocol=rule.protocol,
        cidr_blocks=list(rule.cidr_blocks),
        ipv6_cidr_blocks=list(rule.ipv6_cidr_blocks) or None,
    )


def create_security_group(name, rules, description="SSH and DNS", opts=None):
    """Declare the security group holding every ingress and egress rule."""
    ingress = [_ingress_args(r) for r in rules if r.direction == "ingress"]
    egress = [_egress_args(r) for r in rules if r.direction == "egress"]
    logger.debug(f"{name}: {len(ingress)} ingress, {len(egress)} egress rule(s)")
    return aws.ec2.SecurityGroup(
        name,
        description=description,
        ingress=ingress,
        egress=egress,
        opts=opts or pulumi.ResourceOptions(),
    )
