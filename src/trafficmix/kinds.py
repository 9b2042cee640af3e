"""The ``DataType`` tag carried by every header and payload class."""

from __future__ import annotations

from enum import Enum


__all__ = ["DataType"]


class DataType(Enum):
    """Discriminator naming which header or payload a node holds.

    Values are the document keys that introduce each node.
    """

    ETHER = "ether"
    VLAN = "vlan-tci"
    ARP = "arp"
    IP = "ip"
    TCP = "tcp"
    UDP = "udp"
    ICMP = "icmp"
    PDIST = "pdist"
    RANDBYTES = "randbytes"
    RAW = "raw"
