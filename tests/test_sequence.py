from __future__ import annotations

import random

import pytest

from trafficmix.errors import RangeInvalidError, TypeMismatchError
from trafficmix.headers import TcpFlags, parse_tcp_flags
from trafficmix.sequence import Sequence, SequenceType, parse_sequence


# ---------------------------------------------------------------------------
# Sequence tokens
# ---------------------------------------------------------------------------


class TestParseSequence:
    @pytest.mark.parametrize("token", ["rand", "random", "RAND", "Random"])
    def test_random_tokens(self, token: str) -> None:
        seq = parse_sequence(token, random.Random(1))
        assert seq.type is SequenceType.RANDOM
        assert 0 <= seq.next < 2**32

    def test_random_seed_comes_from_rng(self) -> None:
        expected = random.Random(99).getrandbits(32)
        assert parse_sequence("rand", random.Random(99)).next == expected

    def test_random_without_rng(self) -> None:
        seq = parse_sequence("random")
        assert seq.type is SequenceType.RANDOM
        assert 0 <= seq.next < 2**32

    @pytest.mark.parametrize("token", ["incr", "increasing", "INCR"])
    def test_increasing_starts_at_zero(self, token: str) -> None:
        assert parse_sequence(token) == Sequence(SequenceType.INCREASING, next=0)

    @pytest.mark.parametrize("token", ["decr", "", "randomly"])
    def test_unknown_token(self, token: str) -> None:
        with pytest.raises(RangeInvalidError):
            parse_sequence(token)

    def test_non_string(self) -> None:
        with pytest.raises(TypeMismatchError):
            parse_sequence(1)


# ---------------------------------------------------------------------------
# TCP flags
# ---------------------------------------------------------------------------


class TestTcpFlags:
    def test_bit_values(self) -> None:
        assert [int(flag) for flag in TcpFlags] == [0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80]

    def test_syn_ack(self) -> None:
        assert parse_tcp_flags(["syn", "ack"]) == TcpFlags.SYN | TcpFlags.ACK

    def test_repeated_flag_cancels(self) -> None:
        assert parse_tcp_flags(["syn", "syn"]) == 0

    def test_triple_flag_sets_again(self) -> None:
        assert parse_tcp_flags(["fin", "fin", "fin"]) == TcpFlags.FIN

    def test_case_insensitive(self) -> None:
        assert parse_tcp_flags(["PSH", "Urg"]) == TcpFlags.PSH | TcpFlags.URG

    def test_all_flags(self) -> None:
        names = ["fin", "syn", "rst", "psh", "ack", "urg", "ece", "cwr"]
        assert parse_tcp_flags(names) == 0xFF

    def test_empty(self) -> None:
        assert parse_tcp_flags([]) == TcpFlags(0)

    def test_unknown_flag(self) -> None:
        with pytest.raises(RangeInvalidError) as exc_info:
            parse_tcp_flags(["syn", "nope"])
        assert exc_info.value.path == ("[1]",)

    def test_not_an_array(self) -> None:
        with pytest.raises(TypeMismatchError):
            parse_tcp_flags("syn")

    def test_non_string_item(self) -> None:
        with pytest.raises(TypeMismatchError):
            parse_tcp_flags([2])
