"""Tests for the CLI text fallback parsers."""

from __future__ import annotations

import pytest

from eapimgmt.eapi.textparse import (
    canonical_interface_name,
    expand_interface_name,
    extract_log_text,
    extract_text_output,
    filter_by_interface,
    interface_matches,
    parse_default_gateway,
    parse_number,
    parse_transceiver_text,
    tail_lines,
)

TRANSCEIVER_TABLE = """\
If device is externally calibrated, only calibrated values are printed.
N/A: not applicable, Tx: transmit, Rx: receive.
mA: milliamperes, dBm: decibels (milliwatts).
                                                       Bias      Optical   Optical
           Temp       Voltage   Current   Tx Power  Rx Power
Port       (Celsius)  (Volts)   (mA)      (dBm)     (dBm)     Last Update
---------- ---------- --------- --------- --------- --------- -------------------
Et1        31.50      3.29      6.10      -2.20     -2.55     0:00:05 ago
Et2        46.71      3.31      33.48    -2.97     -3.86     0:00:00 ago
Et3        N/A        N/A       N/A       N/A       N/A       0:00:00 ago
Et4        45.00      N/A       6.00      -         -2.00     1:02:03 ago
Ethernet49/1 inf      3.30      N/A       N/A       N/A
"""


# ── number parsing ─────────────────────────────────────────────────────


class TestParseNumber:
    @pytest.mark.parametrize(
        "token, expected",
        [("3.5", 3.5), ("-2.97", -2.97), (" 4 ", 4.0), (2, 2.0), (1.5, 1.5)],
    )
    def test_numbers(self, token, expected):
        assert parse_number(token) == expected

    @pytest.mark.parametrize("token", ["N/A", "n/a", "-", "", "abc", "nan", "inf", float("inf"), True, None, [1]])
    def test_rejected(self, token):
        assert parse_number(token) is None


# ── transceiver table ──────────────────────────────────────────────────


class TestParseTransceiverTable:
    def test_single_row_from_distilled_example(self):
        text = (
            "           Temp       Voltage   Current   Tx Power  Rx Power\n"
            "Et2        46.71      3.31      33.48    -2.97     -3.86     0:00:00 ago\n"
        )
        readings = parse_transceiver_text(text)

        assert list(readings) == ["Ethernet2"]
        assert readings["Ethernet2"].as_dict() == {
            "temperature": 46.71,
            "voltage": 3.31,
            "biasCurrent": 33.48,
            "txPower": -2.97,
            "rxPower": -3.86,
        }

    def test_full_table(self):
        readings = parse_transceiver_text(TRANSCEIVER_TABLE)

        assert list(readings) == ["Ethernet1", "Ethernet2", "Ethernet4", "Ethernet49/1"]
        assert readings["Ethernet1"].temperature == 31.5

    def test_sentinels_are_omitted(self):
        readings = parse_transceiver_text(TRANSCEIVER_TABLE)

        assert "Ethernet3" not in readings
        assert readings["Ethernet4"].as_dict() == {"temperature": 45.0, "biasCurrent": 6.0, "rxPower": -2.0}

    def test_non_finite_value_dropped(self):
        assert parse_transceiver_text(TRANSCEIVER_TABLE)["Ethernet49/1"].as_dict() == {"voltage": 3.3}

    def test_rows_before_header_ignored(self):
        text = "Et9 1 2 3 4 5\n" "Temp Voltage Current Tx Power Rx Power\n" "Et1 1 2 3 4 5\n"
        assert list(parse_transceiver_text(text)) == ["Ethernet1"]

    def test_interface_filter(self):
        readings = parse_transceiver_text(TRANSCEIVER_TABLE, interface="ethernet 2")
        assert list(readings) == ["Ethernet2"]

    @pytest.mark.parametrize("text", [None, "", "   \n", "% Invalid input", 42])
    def test_nothing_usable(self, text):
        assert parse_transceiver_text(text) == {}


class TestParseTransceiverBlocks:
    BLOCKS = """\
Ethernet1
  Temperature: 35.2 C
  Voltage: 3.29 V
  Tx Bias Current: 7.1 mA
  Tx Power: -1.9 dBm
  Rx Power: N/A
  Vendor: Arista Networks
Ethernet2
  Temperature (Celsius): 40
"""

    def test_every_block_is_kept(self):
        readings = parse_transceiver_text(self.BLOCKS)

        assert readings["Ethernet1"].as_dict() == {
            "temperature": 35.2,
            "voltage": 3.29,
            "biasCurrent": 7.1,
            "txPower": -1.9,
        }
        assert readings["Ethernet2"].as_dict() == {"temperature": 40.0}

    def test_block_without_readings_skipped(self):
        readings = parse_transceiver_text("Et1\n  Vendor: x\nEt2\n  rx power: -4.1\n")
        assert list(readings) == ["Ethernet2"]


# ── interface names ────────────────────────────────────────────────────


class TestInterfaceNames:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Et2", "ethernet2"),
            ("eth2", "ethernet2"),
            ("Ethernet 2", "ethernet2"),
            ("Po10", "portchannel10"),
            ("Port-Channel10", "portchannel10"),
            ("port_channel10", "portchannel10"),
            ("Ma1", "management1"),
            ("Management1", "management1"),
            ("Ethernet1/1", "ethernet1/1"),
        ],
    )
    def test_canonical(self, name, expected):
        assert canonical_interface_name(name) == expected

    def test_expand(self):
        assert expand_interface_name("Et49/1") == "Ethernet49/1"
        assert expand_interface_name("Ethernet3") == "Ethernet3"
        assert expand_interface_name("Management1") == "Management1"

    def test_matches(self):
        assert interface_matches("Et1", "Ethernet1")
        assert interface_matches("Ethernet1", "Ethernet1/1")
        assert interface_matches("Ethernet1/1", "Et1")
        assert not interface_matches("Ethernet2", "Ethernet3")
        assert not interface_matches("", "Ethernet1")

    def test_filter_prefers_exact(self):
        entries = {"Ethernet1": 1, "Ethernet10": 2, "Ethernet1/1": 3}
        assert filter_by_interface(entries, "Et1") == {"Ethernet1": 1}

    def test_filter_falls_back_to_containment(self):
        assert filter_by_interface({"Ethernet1/1": 3, "Ethernet2/1": 4}, "Et1") == {"Ethernet1/1": 3}

    def test_filter_no_match(self):
        assert filter_by_interface({"Ethernet1": 1}, "Po5") == {}


# ── logs / text helpers ────────────────────────────────────────────────


class TestExtractLogText:
    def test_output_of_last_result(self):
        assert extract_log_text([{}, {}, {"output": "line1\nline2"}]) == "line1\nline2"

    def test_messages_list(self):
        assert extract_log_text([{}, {"messages": [{"message": "a"}, "b", {"other": 1}]}]) == "a\nb"

    def test_any_result_when_last_is_empty(self):
        assert extract_log_text([{"output": "early"}, {"output": "   "}]) == "early"

    def test_nested(self):
        assert extract_log_text([{"logging": {"buffer": {"output": "nested"}}}]) == "nested"

    @pytest.mark.parametrize("results", [None, [], [{}], "text", [{"messages": []}]])
    def test_nothing_found(self, results):
        assert extract_log_text(results) is None


class TestTextHelpers:
    def test_extract_text_output(self):
        assert extract_text_output({"output": "x"}) == "x"
        assert extract_text_output("y") == "y"
        assert extract_text_output({"foo": 1}) is None

    def test_tail_lines(self):
        assert tail_lines("a\nb\nc", 2) == "b\nc"
        assert tail_lines("a\nb\nc", None) == "a\nb\nc"
        assert tail_lines("a\nb\nc", 0) == "a\nb\nc"

    def test_parse_default_gateway(self):
        text = (
            "Gateway of last resort:\n"
            " S        0.0.0.0/0 [1/0] via 10.0.0.1, Management1\n"
            " C        10.0.0.0/24 is directly connected, Management1\n"
        )
        assert parse_default_gateway(text) == "10.0.0.1"
        assert parse_default_gateway("Gateway of last resort is not set") is None
        assert parse_default_gateway(None) is None
