"""End-to-end session against a real aioftp server on localhost."""

import asyncio

import aioftp

from ftpwire import Command, FtpClient, Retry


def _run(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


async def _serve(tmp_path):
    server = aioftp.Server([aioftp.User(base_path=tmp_path)])
    await server.start("127.0.0.1", 0)
    port = server.server.sockets[0].getsockname()[1]
    return server, port


class TestAioftpServer:
    def test_session(self, tmp_path):
        (tmp_path / "hello.txt").write_bytes(b"Hello, FTP!\n")

        async def scenario():
            server, port = await _serve(tmp_path)
            try:
                async with FtpClient(f"ftp://127.0.0.1:{port}", retry=Retry(backoff=0)) as client:
                    greeting = client.greeting
                    binary = await client.request(Command("TYPE", "I", {200}))

                    await client.passive()
                    listing, names = await client.transfer(Command("LIST", statuses={226}))

                    pasv = await client.passive()
                    retrieve, content = await client.transfer(Command("RETR", "hello.txt", {226}))

                    missing = await client.request(Command("CWD", "nope", {250}))
                return greeting, binary, pasv, listing, names, retrieve, content, missing, client
            finally:
                await server.close()

        greeting, binary, pasv, listing, names, retrieve, content, missing, client = _run(scenario())

        assert greeting.status == 220
        assert binary.success
        assert pasv.success
        assert client.data.ip == "127.0.0.1"
        assert listing.success
        assert b"hello.txt" in names
        assert retrieve.success
        assert content == b"Hello, FTP!\n"
        assert not missing.success
        assert client.disconnected
        assert not client.ready
