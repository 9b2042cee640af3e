from __future__ import annotations

import json
import random
from typing import Any

from trafficmix.document import dump_document, dump_packet
from trafficmix.headers import EtherHeader, IpHeader, TcpHeader
from trafficmix.mix import MixConfig, MixEntry
from trafficmix.parser import parse_config
from trafficmix.ranges import AddrRange, PortRange, decode_ip


# ---------------------------------------------------------------------------
# Document shape
# ---------------------------------------------------------------------------


class TestDumpDocument:
    def test_single_entry_form(self, tcp_syn: dict[str, Any]) -> None:
        assert dump_document(parse_config(tcp_syn)) == {
            "ether": {
                "daddr": "ff:ff:ff:ff:ff:ff",
                "ip": {"version": 4, "tcp": {"dport": 80, "flags": []}},
            }
        }

    def test_named_entries_keep_their_names(self, full_mix: dict[str, Any]) -> None:
        document = dump_document(parse_config(full_mix))
        assert list(document) == ["mix1", "mix2", "mix3", "mix4"]
        assert document["mix2"]["quantity"] == 5

    def test_unnamed_entries_numbered_by_position(self) -> None:
        mix = MixConfig((MixEntry(EtherHeader(), 2), MixEntry(EtherHeader(), 3)))
        assert dump_document(mix) == {
            "mix1": {"ether": {}, "quantity": 2},
            "mix2": {"ether": {}, "quantity": 3},
        }

    def test_single_entry_with_quantity_uses_mix_form(self) -> None:
        mix = MixConfig((MixEntry(EtherHeader(), 4),))
        assert dump_document(mix) == {"mix1": {"ether": {}, "quantity": 4}}

    def test_address_range(self, full_mix: dict[str, Any]) -> None:
        document = dump_document(parse_config(full_mix))
        ether = document["mix1"]["ether"]
        assert ether["saddr"] == "00:11:22:33:44:55"
        assert ether["daddr"] == {
            "range": {
                "min": "00:00:00:00:00:01",
                "max": "00:00:00:00:00:ff",
                "start": "00:00:00:00:00:01",
                "incr": 2,
            }
        }
        assert ether["vlan-tci"] == 100

    def test_payloads(self, full_mix: dict[str, Any]) -> None:
        document = dump_document(parse_config(full_mix))
        tcp = document["mix1"]["ether"]["ip"]["tcp"]
        assert tcp["randbytes"] == {"size": 100, "deviation": 10}
        assert tcp["flags"] == ["syn", "ack"]
        assert tcp["seq"] == "incr"
        udp = document["mix2"]["ether"]["ip"]["udp"]
        assert udp["pdist"] == [
            {"probability": 0.3, "raw": {"data": "query"}},
            {"probability": 0.7, "randbytes": {"size": 64, "deviation": 0}},
        ]

    def test_icmp_writes_its_default_payload(self) -> None:
        document = dump_document(parse_config({"ether": {"ip": {"icmp": {}}}}))
        assert document["ether"]["ip"]["icmp"] == {
            "type": 0,
            "code": 0,
            "identifier": 0,
            "raw": {"data": ""},
        }

    def test_is_json_serializable(self, full_mix: dict[str, Any]) -> None:
        document = dump_document(parse_config(full_mix))
        assert json.loads(json.dumps(document)) == document


class TestDumpPacket:
    def test_hand_built_packet(self) -> None:
        packet = EtherHeader(
            child=IpHeader(
                version=6,
                daddr=AddrRange.single(decode_ip("2001:db8::1")),
                child=TcpHeader(sport=PortRange(1000, 2000, 1500, 5)),
            )
        )
        assert dump_packet(packet) == {
            "ip": {
                "version": 6,
                "daddr": "2001:db8::1",
                "tcp": {
                    "sport": {"range": {"min": 1000, "max": 2000, "start": 1500, "incr": 5}},
                    "flags": [],
                },
            }
        }


# ---------------------------------------------------------------------------
# Reparse
# ---------------------------------------------------------------------------


class TestReparse:
    def test_full_mix(self, full_mix: dict[str, Any]) -> None:
        mix = parse_config(full_mix)
        assert parse_config(dump_document(mix)) == mix

    def test_random_sequence_with_same_seed(self) -> None:
        document = {"mix1": {"ether": {"ip": {"tcp": {"seq": "rand"}}}, "quantity": 3}}
        mix = parse_config(document, rng=random.Random(42))
        assert parse_config(dump_document(mix), rng=random.Random(42)) == mix

    def test_fixed_range_keeps_increment(self) -> None:
        document = {"ether": {"ip": {"saddr": {"range": {"min": "10.0.0.1", "max": "10.0.0.1"}}}}}
        mix = parse_config(document)
        dumped = dump_document(mix)
        assert dumped["ether"]["ip"]["saddr"]["range"]["incr"] == 1
        assert parse_config(dumped) == mix
