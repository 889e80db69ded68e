"""Tests for the MCP JSON-RPC request handling."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from membank.config import MembankConfig
from membank.server import TOOLS, MembankServer


@pytest.fixture
def server(tmp_path: Path) -> MembankServer:
    return MembankServer(MembankConfig(root_dir=tmp_path))


def _call(req_id: int, name: str, **arguments) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


class TestProtocol:
    @pytest.mark.asyncio
    async def test_initialize(self, server: MembankServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        assert resp["id"] == 1
        assert resp["result"]["serverInfo"]["name"] == "membank"
        assert "tools" in resp["result"]["capabilities"]

    @pytest.mark.asyncio
    async def test_notification_has_no_response(self, server: MembankServer):
        resp = await server.handle_request(
            {"jsonrpc": "2.0", "method": "notifications/initialized"}
        )
        assert resp is None

    @pytest.mark.asyncio
    async def test_tools_list(self, server: MembankServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        names = [t["name"] for t in resp["result"]["tools"]]
        assert names == [t["name"] for t in TOOLS]
        assert set(names) == set(server.tools)

    @pytest.mark.asyncio
    async def test_unknown_method(self, server: MembankServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 3, "method": "bogus"})
        assert resp["error"]["code"] == -32601


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_write_then_read(self, server: MembankServer):
        resp = await server.handle_request(
            _call(1, "memory_bank_write", project_name="demo", file_name="n.md", content="hi")
        )
        assert "isError" not in resp["result"]

        resp = await server.handle_request(
            _call(2, "memory_bank_read", project_name="demo", file_name="n.md")
        )
        assert resp["result"]["content"] == [{"type": "text", "text": "hi"}]

    @pytest.mark.asyncio
    async def test_not_found_is_tool_error(self, server: MembankServer):
        resp = await server.handle_request(
            _call(1, "memory_bank_read", project_name="demo", file_name="missing.md")
        )
        assert resp["result"]["isError"] is True
        assert "not found" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_missing_argument(self, server: MembankServer):
        resp = await server.handle_request(_call(1, "memory_bank_write", project_name="demo"))
        assert resp["result"]["isError"] is True
        assert "file_name" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server: MembankServer):
        resp = await server.handle_request(_call(1, "nope"))
        assert resp["result"]["isError"] is True

    @pytest.mark.asyncio
    async def test_extra_arguments_ignored(self, server: MembankServer):
        resp = await server.handle_request(_call(1, "list_projects", verbose=True))
        assert resp["result"]["content"][0]["text"] == "(no projects)"

    @pytest.mark.asyncio
    async def test_internal_error(self, server: MembankServer):
        server.tools["list_projects"] = AsyncMock(side_effect=PermissionError("denied"))
        resp = await server.handle_request(_call(1, "list_projects"))
        assert resp["result"]["isError"] is True
        assert "denied" in resp["result"]["content"][0]["text"]


class TestMalformedRequests:
    @pytest.mark.asyncio
    async def test_non_object_request(self, server: MembankServer):
        resp = await server.handle_request([1, 2])
        assert resp["id"] is None
        assert resp["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_params_not_object(self, server: MembankServer):
        resp = await server.handle_request(
            {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": []}
        )
        assert resp["id"] == 4
        assert resp["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_arguments_not_object(self, server: MembankServer):
        resp = await server.handle_request(
            {
                "jsonrpc": "2.0",
                "id": 5,
                "method": "tools/call",
                "params": {"name": "list_projects", "arguments": ["demo"]},
            }
        )
        assert resp["error"]["code"] == -32600
