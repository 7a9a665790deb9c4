"""
Tests for SNMP value parsing.
"""

import pytest
from pysnmp.proto import rfc1905
from pysnmp.proto.rfc1902 import Integer32, IpAddress, OctetString

from netsnmp.snmp.parsers import (
    decode_ip,
    decode_mac,
    decode_port_id,
    decode_string,
    hex_to_octets,
    is_no_such,
    normalize_mac,
    parse_line,
    parse_response,
    parse_text_output,
    parse_value,
    parse_walk,
    strip_quotes,
)


class TestAbsentValues:
    """No Such markers and None"""

    @pytest.mark.parametrize("value", [
        None,
        "No Such Object available on this agent at this OID",
        "No Such Instance currently exists at this OID",
        '"No Such Object available"',
        "noSuchObject",
        b"No Such Instance",
    ])
    def test_is_no_such(self, value):
        assert is_no_such(value)
        assert parse_value(value) is None

    def test_pysnmp_exception_values(self):
        assert is_no_such(rfc1905.noSuchObject)
        assert is_no_such(rfc1905.noSuchInstance)
        assert is_no_such(rfc1905.endOfMibView)

    def test_real_values_are_present(self):
        assert not is_no_such("core-sw-01")
        assert not is_no_such("")


class TestTextCleanup:

    def test_strip_quotes(self):
        assert strip_quotes('"FOC1234X0AB"') == "FOC1234X0AB"
        assert strip_quotes("  'sw1'  ") == "sw1"
        assert strip_quotes('plain') == "plain"

    def test_parse_value_unquotes(self):
        assert parse_value('"core-sw-01"') == "core-sw-01"

    def test_parse_value_bytes(self):
        assert parse_value(b"access-sw\x00") == "access-sw"

    def test_parse_value_empty_string_is_present(self):
        assert parse_value('""') == ""


class TestResponseAlignment:

    def test_positions_follow_request(self):
        oids = ["1.1", "1.2", "1.3"]
        bindings = parse_response(oids, ["a", None, '"c"'])
        assert [b.oid for b in bindings] == oids
        assert [b.value for b in bindings] == ["a", None, "c"]

    def test_short_response_is_padded(self):
        bindings = parse_response(["1.1", "1.2"], ["a"])
        assert bindings[1].value is None
        assert not bindings[1].present

    def test_missing_response(self):
        bindings = parse_response(["1.1"], None)
        assert bindings[0].value is None

    def test_walk_drops_absent_rows(self):
        bindings = parse_walk([("1.1", "x"), ("1.2", "No Such Instance"), (".1.3", "y")])
        assert [(b.oid, b.value) for b in bindings] == [("1.1", "x"), ("1.3", "y")]


class TestTextOutput:
    """net-snmp command output lines"""

    def test_typed_line(self):
        assert parse_line('.1.3.6.1.2.1.1.5.0 = STRING: "core-sw-01"') == (
            "1.3.6.1.2.1.1.5.0", '"core-sw-01"'
        )

    def test_quick_print_line(self):
        assert parse_line('1.3.6.1.2.1.1.5.0 "core-sw-01"') == ("1.3.6.1.2.1.1.5.0", '"core-sw-01"')

    def test_hex_string_keeps_marker(self):
        oid, value = parse_line("1.3.6.1.4.1.9.9.23.1.2.1.1.4.10.1 = Hex-STRING: C0 A8 01 01")
        assert value == "Hex-STRING:C0 A8 01 01"
        assert decode_ip(value) == "192.168.1.1"

    def test_blank_line(self):
        assert parse_line("   ") is None

    def test_multi_line(self):
        text = "1.1 = INTEGER: 5\n\n1.2 = STRING: \"x\"\n"
        assert parse_text_output(text) == [("1.1", "5"), ("1.2", '"x"')]


class TestDecodeIp:

    def test_hex_text(self):
        assert decode_ip("0xC0A80101") == "192.168.1.1"

    def test_spaced_hex(self):
        assert decode_ip("0A 00 00 01") == "10.0.0.1"

    def test_raw_octets(self):
        assert decode_ip(b"\xc0\xa8\x01\x01") == "192.168.1.1"

    def test_family_byte_is_skipped(self):
        assert decode_ip(b"\x01\x0a\x01\x02\x03") == "10.1.2.3"

    def test_dotted_text_passes_through(self):
        assert decode_ip('"172.16.0.9"') == "172.16.0.9"

    @pytest.mark.parametrize("value", [None, "", "0xC0A801", "zz", b"\x01\x02", "No Such Object"])
    def test_undecodable(self, value):
        assert decode_ip(value) is None

    def test_hex_to_octets_rejects_odd_length(self):
        assert hex_to_octets("0xABC") is None


class TestDecodeMac:

    def test_raw_octets(self):
        assert decode_mac(b"\x00\x1b\x2c\x3d\x4e\x5f") == "00:1b:2c:3d:4e:5f"

    def test_hex_text(self):
        assert decode_mac("0x001B2C3D4E5F") == "00:1b:2c:3d:4e:5f"

    def test_unpadded_net_snmp_form(self):
        assert decode_mac("0:1b:2c:3d:4e:5f") == "00:1b:2c:3d:4e:5f"

    def test_cisco_dotted(self):
        assert normalize_mac("001b.2c3d.4e5f") == "00:1b:2c:3d:4e:5f"

    @pytest.mark.parametrize("value", [None, "", b"", b"\x00\x01", "not-a-mac"])
    def test_invalid(self, value):
        assert decode_mac(value) is None


class TestPysnmpValues:
    """Values as PysnmpTransport hands them over"""

    def test_display_string(self):
        assert parse_value(OctetString("core-sw-01")) == "core-sw-01"

    def test_hex_looking_text_is_kept(self):
        assert parse_value(OctetString("0x4142")) == "0x4142"
        assert decode_string("0x4142") == "0x4142"

    def test_binary_octets_render_as_hex(self):
        assert parse_value(OctetString(hexValue="00ff10")) == "0x00ff10"

    def test_trailing_null_dropped(self):
        assert parse_value(OctetString(b"FOC1234X\x00")) == "FOC1234X"

    def test_multiline_text_kept(self):
        assert parse_value(OctetString("Cisco IOS\r\nVersion 15.2")) == "Cisco IOS\r\nVersion 15.2"

    def test_ip_address(self):
        assert parse_value(IpAddress("10.1.2.3")) == "10.1.2.3"
        assert decode_ip(IpAddress("10.1.2.3")) == "10.1.2.3"

    def test_octet_string_address(self):
        assert decode_ip(OctetString(hexValue="c0a80101")) == "192.168.1.1"

    def test_octet_string_mac(self):
        assert decode_mac(OctetString(hexValue="aabbccddeeff")) == "aa:bb:cc:dd:ee:ff"

    def test_integer(self):
        assert parse_value(Integer32(5)) == "5"


class TestDecodePortId:

    def test_mac_subtype(self):
        assert decode_port_id(3, OctetString(hexValue="aabbccddeeff")) == "aa:bb:cc:dd:ee:ff"
        assert decode_port_id(3, OctetString(hexValue="001b2c3d4e5f")) == "00:1b:2c:3d:4e:5f"

    def test_network_address_subtype(self):
        assert decode_port_id(4, OctetString(hexValue="010a000001")) == "10.0.0.1"

    def test_interface_name_subtype(self):
        assert decode_port_id(5, OctetString("Gi1/0/24")) == "Gi1/0/24"

    def test_locally_assigned_subtype_is_text(self):
        assert decode_port_id(7, OctetString("616263")) == "616263"

    def test_unknown_subtype_is_text(self):
        assert decode_port_id(None, "eth0") == "eth0"

    def test_undecodable_mac_falls_back_to_text(self):
        assert decode_port_id(3, OctetString("port-12")) == "port-12"
