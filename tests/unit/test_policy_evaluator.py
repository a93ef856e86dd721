"""Tests for the address policy predicates."""

import ipaddress

import pytest

from safedial.policy.defaults import DEFAULT_BLOCKED_RANGES, default_policy
from safedial.policy.evaluator import AddressPolicy, canonical_ip
from safedial.policy.models import PolicyConfig, build_policy


def ip(text: str):
    return ipaddress.ip_address(text)


def test_transport_exact_match():
    rules = AddressPolicy(PolicyConfig(allowed_transports=frozenset({"tcp"})))
    assert rules.is_transport_allowed("tcp")
    assert not rules.is_transport_allowed("udp")
    assert not rules.is_transport_allowed("TCP")
    assert not rules.is_transport_allowed("tcp4")


def test_port_exact_match():
    rules = AddressPolicy(PolicyConfig(allowed_ports=frozenset({80, 443})))
    assert rules.is_port_allowed(443)
    assert not rules.is_port_allowed(25)
    assert not rules.is_port_allowed(0)


def test_empty_port_set_fails_closed():
    rules = AddressPolicy(PolicyConfig())
    assert not rules.is_port_allowed(80)


def test_no_rules_allows_every_ip():
    rules = AddressPolicy(PolicyConfig())
    assert rules.is_ip_allowed(ip("127.0.0.1"))
    assert rules.is_ip_allowed(ip("::"))


@pytest.mark.parametrize("address", ["10.1.2.3", "172.16.5.4", "192.168.1.1", "127.0.0.1", "::1", "fd00::1"])
def test_block_private(address: str):
    rules = AddressPolicy(PolicyConfig(block_private=True))
    assert rules.blocked_by(ip(address)) == "private"


@pytest.mark.parametrize("address", ["192.0.2.1", "198.18.0.1", "240.0.0.1", "100.64.0.1", "2001:db8::1", "172.32.0.1"])
def test_block_private_leaves_other_special_ranges_alone(address: str):
    rules = AddressPolicy(PolicyConfig(block_private=True))
    assert rules.blocked_by(ip(address)) is None


@pytest.mark.parametrize("address", ["169.254.169.254", "fe80::1", "224.0.0.251", "ff02::1"])
def test_block_link_local(address: str):
    rules = AddressPolicy(PolicyConfig(block_link_local=True))
    assert rules.blocked_by(ip(address)) == "link-local"


def test_link_local_flag_ignores_wider_multicast():
    rules = AddressPolicy(PolicyConfig(block_link_local=True))
    assert rules.is_ip_allowed(ip("224.0.1.1"))
    assert rules.is_ip_allowed(ip("ff05::1"))


@pytest.mark.parametrize("address", ["239.1.2.3", "224.0.0.1", "ff01::1", "ff05::2", "ff0e::1"])
def test_block_multicast(address: str):
    rules = AddressPolicy(PolicyConfig(block_multicast=True))
    assert rules.blocked_by(ip(address)) == "multicast"


@pytest.mark.parametrize("address", ["0.0.0.0", "::"])
def test_block_unspecified(address: str):
    rules = AddressPolicy(PolicyConfig(block_unspecified=True))
    assert rules.blocked_by(ip(address)) == "unspecified"


def test_blocked_range_reports_network():
    rules = AddressPolicy(build_policy(blocked_ranges=("198.51.100.0/24", "2001:db8::/32")))
    assert rules.blocked_by(ip("198.51.100.7")) == "198.51.100.0/24"
    assert rules.blocked_by(ip("2001:db8::5")) == "2001:db8::/32"
    assert rules.blocked_by(ip("198.51.101.7")) is None


def test_range_order_does_not_change_membership():
    forward = AddressPolicy(build_policy(blocked_ranges=("10.0.0.0/8", "192.168.0.0/16")))
    backward = AddressPolicy(build_policy(blocked_ranges=("192.168.0.0/16", "10.0.0.0/8")))
    for address in ("10.9.9.9", "192.168.3.3", "8.8.8.8"):
        assert forward.is_ip_allowed(ip(address)) == backward.is_ip_allowed(ip(address))


def test_ipv4_mapped_ipv6_checked_as_ipv4():
    rules = AddressPolicy(build_policy(blocked_ranges=("10.0.0.0/8",)))
    assert rules.blocked_by(ip("::ffff:10.1.1.1")) == "10.0.0.0/8"
    assert canonical_ip(ip("::ffff:10.1.1.1")) == ip("10.1.1.1")


def test_public_addresses_allowed_by_default():
    rules = AddressPolicy(default_policy())
    assert rules.is_ip_allowed(ip("93.184.215.14"))
    assert rules.is_ip_allowed(ip("8.8.8.8"))
    assert rules.is_ip_allowed(ip("2606:4700:4700::1111"))


def test_default_allows_addresses_outside_listed_ipv6_ranges():
    rules = AddressPolicy(default_policy())
    assert rules.is_ip_allowed(ip("2001:100::1"))
    assert rules.is_ip_allowed(ip("2001:200::1"))
    assert rules.blocked_by(ip("2001::1")) == "2001::/32"


@pytest.mark.parametrize("cidr", DEFAULT_BLOCKED_RANGES)
def test_every_default_range_blocked_at_both_ends(cidr: str):
    rules = AddressPolicy(default_policy())
    network = ipaddress.ip_network(cidr)
    assert not rules.is_ip_allowed(network.network_address)
    assert not rules.is_ip_allowed(network.broadcast_address)


def test_flags_block_without_any_ranges():
    rules = AddressPolicy(
        PolicyConfig(
            block_private=True,
            block_link_local=True,
            block_multicast=True,
            block_unspecified=True,
        )
    )
    for address in ("10.0.0.1", "169.254.1.1", "239.0.0.1", "0.0.0.0", "fc00::1"):
        assert not rules.is_ip_allowed(ip(address)), address
    assert rules.is_ip_allowed(ip("8.8.8.8"))
