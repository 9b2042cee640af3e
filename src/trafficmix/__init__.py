from trafficmix.config import CONFIG_NAMES, discover_config, load_config
from trafficmix.document import dump_document, dump_packet
from trafficmix.errors import (
    MissingRequiredFieldError,
    MixConfigError,
    RangeInvalidError,
    TypeMismatchError,
    UnknownKeyError,
)
from trafficmix.headers import (
    ArpHeader,
    EtherChild,
    EtherHeader,
    IcmpHeader,
    IpChild,
    IpHeader,
    ProtocolHeader,
    TcpFlags,
    TcpHeader,
    UdpHeader,
    VlanTag,
    describe,
    header_chain,
)
from trafficmix.kinds import DataType
from trafficmix.mix import MixConfig, MixEntry
from trafficmix.parser import MIX_KEY_PATTERN, ConfigParser, parse_config
from trafficmix.payload import Distribution, Payload, PDistEntry, RandomBytes, RawPayload
from trafficmix.ranges import AddrRange, PortRange
from trafficmix.sequence import Sequence, SequenceType

__all__ = [
    # Parsing
    "ConfigParser",
    "parse_config",
    "MIX_KEY_PATTERN",
    # Mix
    "MixConfig",
    "MixEntry",
    # Headers
    "DataType",
    "EtherHeader",
    "VlanTag",
    "ArpHeader",
    "IpHeader",
    "TcpHeader",
    "UdpHeader",
    "IcmpHeader",
    "TcpFlags",
    "ProtocolHeader",
    "EtherChild",
    "IpChild",
    "header_chain",
    "describe",
    # Payloads
    "Payload",
    "RawPayload",
    "RandomBytes",
    "Distribution",
    "PDistEntry",
    # Ranges and sequences
    "AddrRange",
    "PortRange",
    "Sequence",
    "SequenceType",
    # Errors
    "MixConfigError",
    "UnknownKeyError",
    "TypeMismatchError",
    "RangeInvalidError",
    "MissingRequiredFieldError",
    # Files
    "CONFIG_NAMES",
    "load_config",
    "discover_config",
    "dump_document",
    "dump_packet",
]
