"""Tests for the command model and the verb catalog."""

import logging

import pytest

from ftpwire import commands
from ftpwire.command import Command
from ftpwire.parser import Reply


class TestCommand:
    def test_lifecycle(self):
        command = Command("PORT", "param=value", [200, 220])

        assert command.verb == "PORT"
        assert command.parameters == "param=value"
        assert command.expected == "200|220"
        assert command.success
        assert not command.valid

        reply = Reply(220, "Server ready")
        command.attach(reply, RuntimeError("Test error"))
        assert not command.success
        assert str(command.last_error) == "Test error"
        assert command.valid
        assert command.reply is reply

        command.flush()
        assert command.errors == []
        assert command.success

        command.add(RuntimeError("Test error 2"))
        assert not command.success

    def test_attach_without_error(self):
        command = Command("NOOP", statuses={200, 220})
        command.attach(Reply(500, "Syntax error"))
        assert command.success
        assert not command.valid

    def test_add_none_is_ignored(self):
        command = Command("NOOP")
        command.add(None)
        assert command.success

    def test_wire_form(self):
        assert Command("user", "bob").encode() == b"USER bob\r\n"
        assert Command("NOOP").encode() == b"NOOP\r\n"

    @pytest.mark.parametrize("verb", ["PASS", "ACCT"])
    def test_secrets_censored(self, verb):
        command = Command(verb, "hunter2")
        assert command.censored == f"{verb} ****"
        assert "hunter2" not in repr(command)

    def test_transfer(self):
        assert Command("RETR", "file.txt").transfer
        assert not Command("PWD").transfer


class TestCatalog:
    @pytest.mark.parametrize(
        "raw,verb",
        [("list", "LIST"), (" retr ", "RETR"), ("XPWD", "PWD"), ("xmkd", "MKD"), ("LPSV", "EPSV")],
    )
    def test_canonical(self, raw, verb):
        assert commands.canonical(raw) == verb

    def test_unknown(self):
        command = Command("FROB")
        assert command.unknown
        assert command.verb == commands.UNKNOWN
        assert command.source == "FROB"

    def test_historic(self):
        assert commands.historic("xcwd")
        assert not commands.historic("CWD")

    def test_historic_verb_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="ftpwire")
        Command("XPWD")
        assert "Historic verb XPWD sent as PWD" in caplog.text
