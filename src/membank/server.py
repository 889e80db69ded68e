"""MCP server: membank — per-project memory bank files with version history.

Exposes the file store as MCP tools for Claude Code and other MCP clients.

Protocol: JSON-RPC 2.0 over stdio (NDJSON).

Usage:
  python -m membank serve
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import sys

from membank import __version__
from membank.config import MembankConfig, build_repository, load_config
from membank.tools.file_tools import ToolError, get_file_tools

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────

SERVER_NAME = "membank"
PROTOCOL_VERSION = "2024-11-05"

# ── Tool definitions ─────────────────────────────────────────

_PROJECT = {"type": "string", "description": "The name of the project"}
_FILE = {"type": "string", "description": "The name of the file"}
_VERSION = {
    "type": "string",
    "description": "The version identifier, e.g. notes.md.20261019T101500Z",
}


def _schema(**properties: dict) -> dict:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
    }


TOOLS = [
    {
        "name": "list_projects",
        "description": "List all projects in the memory bank",
        "inputSchema": _schema(),
    },
    {
        "name": "list_project_files",
        "description": "List all files within a specific project",
        "inputSchema": _schema(project_name=_PROJECT),
    },
    {
        "name": "memory_bank_read",
        "description": "Read a memory bank file for a specific project",
        "inputSchema": _schema(project_name=_PROJECT, file_name=_FILE),
    },
    {
        "name": "memory_bank_write",
        "description": "Create a new memory bank file for a specific project",
        "inputSchema": _schema(
            project_name=_PROJECT,
            file_name=_FILE,
            content={"type": "string", "description": "The content of the file"},
        ),
    },
    {
        "name": "memory_bank_update",
        "description": (
            "Update an existing memory bank file for a specific project. "
            "The previous content is kept as a version."
        ),
        "inputSchema": _schema(
            project_name=_PROJECT,
            file_name=_FILE,
            content={"type": "string", "description": "The new content of the file"},
        ),
    },
    {
        "name": "memory_bank_append",
        "description": "Append content to a memory bank file, creating it if needed",
        "inputSchema": _schema(
            project_name=_PROJECT,
            file_name=_FILE,
            content={"type": "string", "description": "The content to append"},
        ),
    },
    {
        "name": "memory_bank_log",
        "description": "Log content to a memory bank file with a timestamp",
        "inputSchema": _schema(
            project_name=_PROJECT,
            file_name=_FILE,
            content={"type": "string", "description": "The content to log"},
        ),
    },
    {
        "name": "list_file_versions",
        "description": "List all versions of a memory bank file, newest first",
        "inputSchema": _schema(project_name=_PROJECT, file_name=_FILE),
    },
    {
        "name": "get_file_version",
        "description": "Get a specific version of a memory bank file",
        "inputSchema": _schema(project_name=_PROJECT, file_name=_FILE, version_id=_VERSION),
    },
    {
        "name": "revert_file_version",
        "description": "Revert a file to a specific version",
        "inputSchema": _schema(project_name=_PROJECT, file_name=_FILE, version_id=_VERSION),
    },
]

_REQUIRED = {tool["name"]: tool["inputSchema"]["required"] for tool in TOOLS}

# ── JSON-RPC 2.0 helpers ─────────────────────────────────────


def jsonrpc_result(req_id, result):
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def jsonrpc_error(req_id, code, message):
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


def _text_result(text: str, is_error: bool = False) -> dict:
    result: dict = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


class MembankServer:
    """Routes MCP requests to the file tools."""

    def __init__(self, config: MembankConfig | None = None) -> None:
        self.config = config or load_config()
        self.repository = build_repository(self.config)
        self.tools = get_file_tools(self.repository)

    async def call_tool(self, name: str, args: dict) -> dict:
        tool = self.tools.get(name)
        if tool is None:
            return _text_result(f"Unknown tool: {name}", is_error=True)

        missing = [f for f in _REQUIRED[name] if f not in args]
        if missing:
            return _text_result(f"Missing required field: {', '.join(missing)}", is_error=True)

        accepted = inspect.signature(tool).parameters
        kwargs = {k: v for k, v in args.items() if k in accepted}
        try:
            text = await tool(**kwargs)
        except ToolError as e:
            return _text_result(str(e), is_error=True)
        except Exception as e:
            logger.exception("Tool %s failed", name)
            return _text_result(f"[internal error] {e}", is_error=True)
        return _text_result(text)

    async def handle_request(self, req: dict) -> dict | None:
        if not isinstance(req, dict):
            return jsonrpc_error(None, -32600, "Invalid Request: expected a JSON object")

        req_id = req.get("id")
        method = req.get("method", "")
        logger.debug("<- %s", method or "?")

        # Notifications (no id) — no response
        if req_id is None:
            if method == "notifications/initialized":
                logger.info("Client initialized")
            return None

        if method == "initialize":
            return jsonrpc_result(req_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            })

        if method == "ping":
            return jsonrpc_result(req_id, {})

        if method == "tools/list":
            return jsonrpc_result(req_id, {"tools": TOOLS})

        if method == "tools/call":
            params = req.get("params") or {}
            if not isinstance(params, dict):
                return jsonrpc_error(req_id, -32600, "Invalid Request: params must be an object")
            args = params.get("arguments") or {}
            if not isinstance(args, dict):
                return jsonrpc_error(req_id, -32600, "Invalid Request: arguments must be an object")
            result = await self.call_tool(params.get("name", ""), args)
            return jsonrpc_result(req_id, result)

        return jsonrpc_error(req_id, -32601, f"Method not found: {method}")

    # ── Stdio transport (NDJSON) ─────────────────────────────

    async def serve_stdio(self) -> None:
        logger.info("Starting %s %s (root=%s)", SERVER_NAME, __version__, self.config.root_dir)

        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)

        while True:
            line = await reader.readline()
            if not line:
                break
            line = line.decode("utf-8").strip()
            if not line:
                continue

            try:
                req = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Parse error: %s", e)
                self._write(jsonrpc_error(None, -32700, "Parse error"))
                continue

            try:
                response = await self.handle_request(req)
            except Exception:
                logger.exception("Handler error")
                continue
            if response:
                self._write(response)

        logger.info("stdin closed, shutting down")

    @staticmethod
    def _write(message: dict) -> None:
        sys.stdout.write(json.dumps(message, ensure_ascii=False) + "\n")
        sys.stdout.flush()
