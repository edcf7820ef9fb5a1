"""Tests for configuration and credential dataclasses."""

import aioftp
import pytest

from ftpwire import Basic, Guest, Limits, Polling, Retry, Timeout
from ftpwire.codes import describe, family, known


class TestConfig:
    def test_defaults(self):
        assert Retry().total == 3
        assert Retry().sequence == 3
        assert Polling().block == 16
        assert Limits().size == 1024
        assert Timeout().connect == 5.0

    @pytest.mark.parametrize(
        "build",
        [
            lambda: Retry(total=-1),
            lambda: Retry(sequence=-1),
            lambda: Retry(backoff=-0.5),
            lambda: Timeout(connect=0),
            lambda: Timeout(write=-1),
            lambda: Polling(wait=0),
            lambda: Polling(attempts=0),
            lambda: Limits(size=0),
            lambda: Limits(read=-10),
        ],
    )
    def test_invalid(self, build):
        with pytest.raises(ValueError):
            build()

    def test_backoff(self):
        retry = Retry(backoff=0.5)
        assert [retry.delay(n) for n in range(3)] == [0.5, 1.0, 2.0]

    def test_slow_settle_warns(self):
        with pytest.warns(UserWarning, match="Settle interval"):
            Polling(wait=0.1, settle=0.5)


class TestAuth:
    def test_basic_trims(self):
        auth = Basic(" bob ", "  s3cret ")
        assert auth.user == "bob"
        assert auth.password == "s3cret"

    def test_basic_internal_whitespace(self):
        with pytest.warns(UserWarning, match="Whitespace"):
            auth = Basic("bo b")
        assert auth.user == "bob"

    def test_basic_empty(self):
        with pytest.raises(ValueError):
            Basic("   ")

    def test_guest(self):
        guest = Guest()
        assert guest.user == "anonymous"
        assert guest.password == aioftp.DEFAULT_PASSWORD

    def test_guest_empty_password(self):
        with pytest.warns(UserWarning):
            Guest("  ")


class TestCodes:
    def test_families(self):
        assert family(150) == 1
        assert family(226) == 2
        assert family(631) == 6

    def test_table(self):
        assert known(229)
        assert not known(299)
        assert describe(530) == "Not logged in"
        assert describe(299) == "Unknown reply"
