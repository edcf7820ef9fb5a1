"""Tests for PORT/PASV and EPRT/EPSV address encoding."""

import pytest

from ftpwire.address import (
    Address,
    Family,
    decode_extended,
    decode_port,
    encode_extended,
    encode_port,
)
from ftpwire.errors import MalformedAddress


class TestPort:
    def test_decode_passive_reply(self):
        address = decode_port("227 Entering Passive Mode (127,0,0,1,192,1)")
        assert address == Address("127.0.0.1", 49153, Family.IPV4)

    def test_reencode(self):
        address = decode_port("227 Entering Passive Mode (127,0,0,1,192,1)")
        assert encode_port(address) == "127,0,0,1,192,1"

    def test_decode_without_parentheses(self):
        assert decode_port("Entering Passive Mode 10,1,2,3,0,21").port == 21

    @pytest.mark.parametrize(
        "text",
        [
            "227 Entering Passive Mode",
            "227 Entering Passive Mode (127,0,0,1,300,1)",
            "227 Entering Passive Mode (256,0,0,1,4,1)",
            "227 (1,2,3,4,5)",
        ],
    )
    def test_decode_rejects(self, text):
        assert decode_port(text) is None

    def test_encode_rejects_ipv6(self):
        with pytest.raises(MalformedAddress):
            encode_port(Address("::1", 21))

    def test_encode_rejects_out_of_range_octets(self):
        with pytest.raises(MalformedAddress):
            encode_port(Address("999.300.1.1", 21))

    def test_encode_rejects_hostname(self):
        with pytest.raises(MalformedAddress):
            encode_port(Address("localhost", 21))


class TestExtended:
    @pytest.mark.parametrize("text", ["|1|127.0.0.1|49153|", "|2|::1|49153|"])
    def test_roundtrip(self, text):
        assert encode_extended(decode_extended(text)) == text

    def test_ipv6_family(self):
        address = decode_extended("|2|::1|49153|")
        assert address.family == Family.IPV6
        assert str(address) == "[::1]:49153"

    def test_port_only(self):
        address = decode_extended("229 Entering Extended Passive Mode (|||6446|)")
        assert address.ip is None
        assert address.port == 6446

    def test_unknown_family_is_inferred(self):
        assert decode_extended("|9|fe80::1|21|").family == Family.IPV6

    @pytest.mark.parametrize("text", ["229 Entering Extended Passive Mode", "|1|not-an-ip|21|", "|1||99999|"])
    def test_decode_rejects(self, text):
        assert decode_extended(text) is None


class TestAddress:
    def test_port_range(self):
        with pytest.raises(MalformedAddress):
            Address("127.0.0.1", 70000)

    def test_address_error_is_value_error(self):
        with pytest.raises(ValueError):
            Address("127.0.0.1", -1)

    def test_replace(self):
        address = Address(None, 6446).replace(ip="::1", family=Family.IPV6)
        assert address == Address("::1", 6446, Family.IPV6)

    def test_peer_without_writer(self):
        assert Address.peer(object()) is None
