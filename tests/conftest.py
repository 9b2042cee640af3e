"""Shared fixtures and sample documents for trafficmix tests."""

import random
from typing import Any

import pytest


# Sample documents


def tcp_syn_document() -> dict[str, Any]:
    """Single-entry document: broadcast ether, IPv4, TCP to port 80."""
    return {
        "ether": {
            "daddr": "ff:ff:ff:ff:ff:ff",
            "ip": {"version": 4, "tcp": {"dport": 80}},
        }
    }


def full_mix_document() -> dict[str, Any]:
    """Multi-entry document touching every header and payload kind."""
    return {
        "mix1": {
            "ether": {
                "saddr": "00:11:22:33:44:55",
                "daddr": {"range": {"min": "00:00:00:00:00:01", "max": "00:00:00:00:00:ff", "incr": 2}},
                "vlan-tci": 100,
                "ip": {
                    "version": 4,
                    "saddr": {"range": {"min": "10.0.0.1", "max": "10.0.0.254", "start": "10.0.0.10"}},
                    "daddr": "192.168.1.1",
                    "tcp": {
                        "sport": {"range": {"min": 1024, "max": 2048}},
                        "dport": 443,
                        "seq": "incr",
                        "flags": ["syn", "ack"],
                        "randbytes": {"size": 100, "deviation": 10},
                    },
                },
            },
            "quantity": 10,
        },
        "mix2": {
            "ether": {
                "ip": {
                    "version": 6,
                    "saddr": "fe80::1",
                    "daddr": "fe80::2",
                    "udp": {
                        "dport": 53,
                        "pdist": [
                            {"probability": 0.3, "raw": {"data": "query"}},
                            {"probability": 0.7, "randbytes": {"size": 64}},
                        ],
                    },
                },
            },
            "q": 5,
        },
        "mix3": {
            "ether": {
                "ip": {
                    "daddr": "8.8.8.8",
                    "icmp": {"type": 8, "code": 0, "id": 7, "seqnum": "increasing", "raw": {"data": "ping"}},
                },
            },
            "quantity": 2,
        },
        "mix4": {
            "ether": {
                "arp": {
                    "opcode": 2,
                    "gratuitous": True,
                    "sha": "00:aa:bb:cc:dd:ee",
                    "spa": "10.0.0.1",
                    "tha": "ff:ff:ff:ff:ff:ff",
                    "tpa": "10.0.0.2",
                },
            },
            "quantity": 1,
        },
    }


# Fixtures


@pytest.fixture
def rng() -> random.Random:
    """Deterministic source of sequence seeds."""
    return random.Random(1234)


@pytest.fixture
def tcp_syn() -> dict[str, Any]:
    return tcp_syn_document()


@pytest.fixture
def full_mix() -> dict[str, Any]:
    return full_mix_document()
