import pytest

from netpolkit.kube.ipaddress import (
    is_ip_address_match_for_ip_block,
    is_ip_in_cidr,
    is_ipv4_address,
    make_cidr_from_ones,
    make_cidr_from_zeroes,
)
from netpolkit.kube.model import IPBlock


@pytest.mark.parametrize(
    "ip, cidr, is_member",
    [
        ("1.2.3.3", "1.2.3.0/24", True),
        ("1.2.3.3", "1.2.3.0/28", True),
        ("1.2.3.3", "1.2.3.0/30", True),
        ("1.2.3.3", "1.2.3.0/31", False),
    ],
)
def test_ipv4_address_in_cidr(ip, cidr, is_member):
    assert is_ip_in_cidr(ip, cidr) is is_member


@pytest.mark.parametrize(
    "ip, cidr, is_member",
    [
        ("fd00:10:244:a8:96fd:be93:52d8:6b85", "fd00:10:244:a8:96fd:be93:52d8:6b00/120", True),
        ("fd00:10:244:a8:96fd:be93:52d8:6b85", "fd00:10:244:a8:96fd:be93:52d8:6b80/124", True),
        ("fd00:10:244:a8:96fd:be93:52d8:6b90", "fd00:10:244:a8:96fd:be93:52d8:6b80/124", False),
        ("2001:0db8::1.2.3.4", "2001:db8::/32", True),
        ("2001:0db9::", "2001:db8::/32", False),
        ("2001:db8::68", "2001:db8::/32", True),
    ],
)
def test_ipv6_address_in_cidr(ip, cidr, is_member):
    assert is_ip_in_cidr(ip, cidr) is is_member


def test_malformed_ip_and_cidr_report_an_error():
    with pytest.raises(ValueError):
        is_ip_address_match_for_ip_block("abc", IPBlock(cidr="1.2.3.4", except_=[]))


def test_cidr_without_prefix_is_rejected():
    with pytest.raises(ValueError, match="unable to parse CIDR"):
        is_ip_in_cidr("1.2.3.4", "1.2.3.4")


def test_malformed_ip_is_rejected():
    with pytest.raises(ValueError, match="unable to parse IP"):
        is_ip_in_cidr("abc", "1.2.3.0/24")


@pytest.mark.parametrize(
    "ip, cidr, is_match",
    [
        ("1.2.3.3", "1.2.3.0/24", True),
        ("1.2.3.3", "1.2.3.0/28", True),
        ("1.2.3.3", "1.2.3.0/30", True),
        ("1.2.3.3", "1.2.3.0/31", False),
    ],
)
def test_ip_blocks_without_exceptions(ip, cidr, is_match):
    assert is_ip_address_match_for_ip_block(ip, IPBlock(cidr=cidr)) is is_match


@pytest.mark.parametrize(
    "ip, cidr, excepts, is_match",
    [
        ("1.2.3.3", "1.2.3.0/28", ["1.2.3.0/30"], False),
        ("1.2.3.4", "1.2.3.0/28", ["1.2.3.4/30"], False),
        ("1.2.3.3", "1.2.3.0/28", ["1.2.3.4/30"], True),
    ],
)
def test_ip_blocks_with_exceptions(ip, cidr, excepts, is_match):
    assert is_ip_address_match_for_ip_block(ip, IPBlock(cidr=cidr)) is True
    assert is_ip_address_match_for_ip_block(ip, IPBlock(cidr=cidr, except_=excepts)) is is_match


def test_malformed_exception_reports_an_error():
    with pytest.raises(ValueError):
        is_ip_address_match_for_ip_block("1.2.3.3", IPBlock(cidr="1.2.3.0/24", except_=["nope"]))


@pytest.mark.parametrize(
    "ip, expected",
    [("1.2.3.4", True), ("fd00::1", False), ("2001:0db8::1.2.3.4", False)],
)
def test_is_ipv4_address(ip, expected):
    assert is_ipv4_address(ip) is expected


def test_is_ipv4_address_rejects_neither():
    with pytest.raises(ValueError):
        is_ipv4_address("abc")


@pytest.mark.parametrize(
    "ip, zeroes, expected",
    [
        ("255.255.255.255", 0, "255.255.255.255/32"),
        ("255.255.255.255", 1, "255.255.255.254/31"),
        ("255.255.255.255", 2, "255.255.255.252/30"),
        ("255.255.255.255", 4, "255.255.255.240/28"),
        ("255.255.255.255", 8, "255.255.255.0/24"),
        ("255.255.255.255", 16, "255.255.0.0/16"),
    ],
)
def test_make_ipv4_cidr_from_zeroes(ip, zeroes, expected):
    assert make_cidr_from_zeroes(ip, zeroes) == expected


FULL_V6 = "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff"


@pytest.mark.parametrize(
    "bits, expected",
    [
        (128, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff/128"),
        (127, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:fffe/127"),
        (126, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:fffc/126"),
        (124, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:fff0/124"),
        (120, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ff00/120"),
        (112, "ffff:ffff:ffff:ffff:ffff:ffff:ffff:0/112"),
        (96, "ffff:ffff:ffff:ffff:ffff:ffff::/96"),
        (80, "ffff:ffff:ffff:ffff:ffff::/80"),
        (64, "ffff:ffff:ffff:ffff::/64"),
        (48, "ffff:ffff:ffff::/48"),
        (32, "ffff:ffff::/32"),
        (16, "ffff::/16"),
    ],
)
def test_make_ipv6_cidr_from_ones(bits, expected):
    assert make_cidr_from_ones(FULL_V6, bits) == expected


def test_zeroes_and_ones_agree():
    assert make_cidr_from_zeroes("1.2.3.4", 8) == make_cidr_from_ones("1.2.3.4", 24)
    assert make_cidr_from_zeroes(FULL_V6, 16) == make_cidr_from_ones(FULL_V6, 112)


def test_made_cidr_contains_its_address():
    cidr = make_cidr_from_zeroes("10.244.1.17", 8)
    assert is_ip_in_cidr("10.244.1.17", cidr)


def test_make_cidr_rejects_bad_address():
    with pytest.raises(ValueError):
        make_cidr_from_ones("1.2.3.999", 24)