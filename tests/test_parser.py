"""Tests for the re-entrant reply parser (no network)."""

import pytest

from ftpwire.errors import InvalidFormat, InvalidStatus
from ftpwire.parser import Parser, Reply


class TestSingleLine:
    @pytest.mark.parametrize(
        "raw,status,message",
        [
            (b"200 Command okay\r\n", 200, "Command okay"),
            (b"220 Service ready for new user\r\n", 220, "Service ready for new user"),
            (b"550 No such file\n", 550, "No such file"),
            (b"  331 Password required  \r\n", 331, "Password required"),
        ],
    )
    def test_one_reply(self, raw, status, message):
        parser = Parser()
        assert parser.parse(raw) == 1
        reply = parser.get()
        assert reply == Reply(status, message, False)
        assert not reply.multiline
        assert parser.get() is None
        assert not parser.has_errors

    def test_split_across_chunks(self):
        parser = Parser()
        assert parser.parse(b"200 Comm") == 0
        assert parser.get() is None
        assert parser.parse(b"and okay\r\n") == 1
        assert parser.get().message == "Command okay"

    def test_undecodable_bytes_replaced(self):
        parser = Parser()
        parser.parse(b"200 caf\xff\r\n")
        assert parser.get().message == "caf�"


class TestMultiLine:
    def test_marker_stripped_lines_in_order(self):
        parser = Parser()
        assert parser.parse(b"220-first\r\nmiddle\r\n220 last\r\n") == 1
        reply = parser.get()
        assert reply.status == 220
        assert reply.multiline
        assert reply.lines == ["first", "middle", "last"]
        assert parser.get() is None

    def test_waits_for_closing_line(self):
        parser = Parser()
        assert parser.parse(b"211-Features:\r\n MDTM\r\n") == 0
        assert len(parser) == 0
        assert parser.parse(b" SIZE\r\n211 End\r\n") == 1
        assert parser.get().lines == ["Features:", "MDTM", "SIZE", "End"]

    def test_dashed_repeats_continue(self):
        parser = Parser()
        parser.parse(b"227-listen socket created\r\n227-still here\r\n227 Entering Passive Mode (127,0,0,1,4,1)\r\n")
        reply = parser.get()
        assert reply.lines == ["listen socket created", "still here", "Entering Passive Mode (127,0,0,1,4,1)"]

    def test_different_status_starts_next_reply(self):
        parser = Parser()
        assert parser.parse(b"220-welcome\r\n221 Goodbye\r\n") == 2
        first, second = parser.drain()
        assert first == Reply(220, "welcome", True)
        assert second == Reply(221, "Goodbye", False)

    def test_finish_closes_open_reply(self):
        parser = Parser()
        parser.parse(b"211-status\r\nunterminated")
        assert parser.get() is None
        assert parser.finish() == 1
        assert parser.get() == Reply(211, "status\nunterminated", True)


class TestPipelined:
    def test_two_replies_in_arrival_order(self):
        parser = Parser()
        assert parser.parse(b"150 Opening data connection\r\n226 Transfer complete\r\n") == 2
        assert parser.get().status == 150
        assert parser.get().status == 226
        assert parser.get() is None

    def test_empty_parser(self):
        parser = Parser()
        assert parser.get() is None
        assert parser.drain() == []
        assert parser.last_error is None


class TestErrors:
    def test_line_without_code(self):
        parser = Parser()
        parser.parse(b"hello there\r\n200 OK\r\n")
        assert isinstance(parser.last_error, InvalidFormat)
        assert parser.get() == Reply(200, "OK")

    def test_unknown_code(self):
        parser = Parser()
        parser.parse(b"999 Nope\r\n")
        assert parser.get() is None
        error = parser.drain_errors()[0]
        assert isinstance(error, InvalidStatus)
        assert error.status == 999
        assert not parser.has_errors

    def test_blank_input_is_absorbed(self):
        parser = Parser()
        assert parser.parse(b"\r\n  \r\n") == 0
        assert not parser.has_errors
        assert not parser.pending

    def test_reply_rejects_unknown_status(self):
        with pytest.raises(InvalidStatus):
            Reply(999, "bogus")
