from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from trafficmix.codec import encode
from trafficmix.config import discover_config, load_config, load_document
from trafficmix.errors import MixConfigError, RangeInvalidError
from trafficmix.headers import IpHeader, UdpHeader, describe
from trafficmix.payload import RawPayload


_TOML_MIX = """\
[mix1]
quantity = 4

[mix1.ether]
daddr = "ff:ff:ff:ff:ff:ff"
vlan-tci = 12

[mix1.ether.ip]
version = 4
saddr = { range = { min = "10.0.0.1", max = "10.0.0.9", incr = 2 } }

[mix1.ether.ip.udp]
dport = 53

[mix1.ether.ip.udp.raw]
data = "hello"

[mix2]
q = 1
ether = { arp = { opcode = 2 } }
"""


# ---------------------------------------------------------------------------
# load_document
# ---------------------------------------------------------------------------


class TestLoadDocument:
    def test_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "mix.toml"
        toml_file.write_text(_TOML_MIX)
        document = load_document(toml_file)
        assert isinstance(document, dict)
        assert document["mix1"]["quantity"] == 4

    def test_json(self, tmp_path: Path) -> None:
        json_file = tmp_path / "mix.json"
        json_file.write_text(json.dumps({"ether": {}}))
        assert load_document(json_file) == {"ether": {}}

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "mix.yaml"
        yaml_file.write_text("ether: {}\n")
        with pytest.raises(ValueError, match="Unsupported mix file type"):
            load_document(yaml_file)


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_toml_mix(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "mix.toml"
        toml_file.write_text(_TOML_MIX)
        mix = load_config(toml_file)
        assert [entry.name for entry in mix] == ["mix1", "mix2"]
        assert mix.total_quantity == 5

        eth = mix[0].packet
        assert eth.vlan is not None
        assert eth.vlan.tci == 12
        ip = eth.child
        assert isinstance(ip, IpHeader)
        assert ip.saddr is not None
        assert ip.saddr.incr_value == 2
        assert isinstance(ip.child, UdpHeader)
        assert ip.child.child == RawPayload("hello")
        assert describe(mix[1].packet) == "ether > arp"

    def test_json_mix(self, tmp_path: Path, tcp_syn: dict) -> None:
        json_file = tmp_path / "mix.json"
        json_file.write_text(json.dumps(tcp_syn))
        mix = load_config(json_file)
        assert len(mix) == 1
        assert describe(mix[0].packet) == "ether > ip > tcp"

    def test_msgpack_mix(self, tmp_path: Path, full_mix: dict) -> None:
        json_file = tmp_path / "mix.json"
        json_file.write_text(json.dumps(full_mix))
        expected = load_config(json_file)

        msgpack_file = tmp_path / "mix.msgpack"
        msgpack_file.write_bytes(encode(expected))
        assert load_config(msgpack_file) == expected

    def test_invalid_mix_raises(self, tmp_path: Path) -> None:
        json_file = tmp_path / "mix.json"
        json_file.write_text(json.dumps({"ether": {"ip": {"version": 5}}}))
        with pytest.raises(RangeInvalidError) as exc_info:
            load_config(json_file)
        assert isinstance(exc_info.value, MixConfigError)
        assert exc_info.value.path == ("ether", "ip", "version")

    def test_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.toml")

    def test_logs_summary(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        toml_file = tmp_path / "mix.toml"
        toml_file.write_text(_TOML_MIX)
        with caplog.at_level(logging.INFO, logger="trafficmix.config"):
            load_config(toml_file)
        assert any("2 entries, 5 packets per round" in message for message in caplog.messages)


# ---------------------------------------------------------------------------
# discover_config
# ---------------------------------------------------------------------------


class TestDiscoverConfig:
    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "trafficmix.toml"
        toml_file.write_text("")
        assert discover_config(tmp_path) == toml_file

    def test_finds_json(self, tmp_path: Path) -> None:
        json_file = tmp_path / "trafficmix.json"
        json_file.write_text("{}")
        assert discover_config(tmp_path) == json_file

    def test_prefers_toml_over_json(self, tmp_path: Path) -> None:
        (tmp_path / "trafficmix.json").write_text("{}")
        toml_file = tmp_path / "trafficmix.toml"
        toml_file.write_text("")
        assert discover_config(tmp_path) == toml_file

    def test_walks_up(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "trafficmix.toml"
        toml_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert discover_config(child) == toml_file

    def test_not_found_returns_none(self, tmp_path: Path) -> None:
        child = tmp_path / "isolated"
        child.mkdir()
        assert discover_config(child) is None

    def test_load_config_discovers_from_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "trafficmix.json").write_text(json.dumps({"ether": {"raw": {"data": "x"}}}))
        monkeypatch.chdir(tmp_path)
        mix = load_config()
        assert mix[0].packet.child == RawPayload("x")

    def test_load_config_without_file_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError, match="No mix file found"):
            load_config()
