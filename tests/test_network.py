"""Tests for security group rules and the SSH reachability check."""

import pytest

from ec2runner.provisioning.network import (
    DEFAULT_EGRESS,
    DEFAULT_INGRESS,
    FirewallRule,
    require_ssh_ingress,
    rules_from_config,
)


# ── Defaults ─────────────────────────────────────────────────────


def test_default_ingress_ssh_and_dns():
    summary = [(r.protocol, r.from_port, r.to_port, r.description) for r in DEFAULT_INGRESS]
    assert summary == [
        ("tcp", 22, 22, "SSH"),
        ("udp", 53, 53, "DNS UDP"),
        ("tcp", 53, 53, "DNS TCP"),
    ]
    assert all(r.cidr_blocks == ("0.0.0.0/0",) for r in DEFAULT_INGRESS)


def test_default_egress_allows_everything():
    (rule,) = DEFAULT_EGRESS
    assert rule.protocol == "-1"
    assert (rule.from_port, rule.to_port) == (0, 0)
    assert rule.cidr_blocks == ("0.0.0.0/0",)
    assert rule.ipv6_cidr_blocks == ("::/0",)


def test_default_rules_pass_ssh_check():
    require_ssh_ingress(list(DEFAULT_INGRESS) + list(DEFAULT_EGRESS))


# ── require_ssh_ingress ──────────────────────────────────────────


def test_no_ssh_rule_raises():
    rules = [FirewallRule("ingress", "udp", 53, 53)]
    with pytest.raises(ValueError, match="no ingress rule for SSH"):
        require_ssh_ingress(rules)


def test_ssh_egress_only_raises():
    rules = [FirewallRule("egress", "tcp", 22, 22)]
    with pytest.raises(ValueError):
        require_ssh_ingress(rules)


def test_ssh_rule_without_sources_raises():
    rules = [FirewallRule("ingress", "tcp", 22, 22, cidr_blocks=())]
    with pytest.raises(ValueError):
        require_ssh_ingress(rules)


def test_port_range_covers_ssh():
    require_ssh_ingress([FirewallRule("ingress", "tcp", 1, 1024, cidr_blocks=("10.0.0.0/8",))])


def test_all_protocol_rule_covers_ssh():
    require_ssh_ingress([FirewallRule("ingress", "-1", 0, 0)])


def test_udp_22_does_not_cover_ssh():
    with pytest.raises(ValueError):
        require_ssh_ingress([FirewallRule("ingress", "udp", 22, 22)])


# ── rules_from_config ────────────────────────────────────────────


def test_rules_from_config_none_uses_defaults():
    assert rules_from_config("ingress", None) == list(DEFAULT_INGRESS)
    assert rules_from_config("egress", None) == list(DEFAULT_EGRESS)


def test_rules_from_config_single_port():
    (rule,) = rules_from_config("ingress", [{"port": 443, "description": "HTTPS"}])
    assert rule == FirewallRule("ingress", "tcp", 443, 443, description="HTTPS")


def test_rules_from_config_port_range_and_cidrs():
    (rule,) = rules_from_config(
        "ingress",
        [{"from_port": 8000, "to_port": 8080, "protocol": "tcp", "cidr_blocks": ["10.0.0.0/8"]}],
    )
    assert (rule.from_port, rule.to_port) == (8000, 8080)
    assert rule.cidr_blocks == ("10.0.0.0/8",)


def test_rules_from_config_missing_port_raises():
    with pytest.raises(ValueError, match="needs 'port'"):
        rules_from_config("ingress", [{"protocol": "tcp"}])


def test_rules_from_config_entry_not_a_mapping_raises():
    with pytest.raises(ValueError, match="must be a mapping"):
        rules_from_config("ingress", [22])


def test_rules_from_config_not_a_list_raises():
    with pytest.raises(ValueError, match="must be a list"):
        rules_from_config("egress", {"port": 22})
