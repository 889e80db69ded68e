"""MCP tools over the project file store.

These functions are designed to be exposed as tools to an AI agent, giving
it a per-project memory bank of text files with version history.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from membank.store.base import Found

if TYPE_CHECKING:
    from membank.store.base import FileRepository


class ToolError(Exception):
    """A tool call the client should see as failed (bad input, missing file)."""


def _check_name(field: str, value: str) -> str:
    """Reject empty names and anything that could escape the project directory."""
    if not isinstance(value, str) or not value.strip():
        raise ToolError(f"Missing required field: {field}")
    if ".." in value or "/" in value or "\\" in value:
        raise ToolError(f"Invalid {field}: path separators and '..' are not allowed")
    return value


def get_file_tools(repo: FileRepository) -> dict[str, Callable[..., Awaitable[str]]]:
    """Return a dict of tool_name -> async callable for file operations."""

    async def list_projects() -> str:
        """List all projects in the memory bank."""
        projects = await repo.list_projects()
        return "\n".join(projects) or "(no projects)"

    async def list_project_files(project_name: str) -> str:
        """List the current files of a project (versions excluded)."""
        files = await repo.list_files(_check_name("project_name", project_name))
        return "\n".join(files) or "(no files)"

    async def memory_bank_read(project_name: str, file_name: str) -> str:
        """Read the current content of a file."""
        result = await repo.load(
            _check_name("project_name", project_name), _check_name("file_name", file_name)
        )
        if not isinstance(result, Found):
            raise ToolError(f"File {file_name} not found in project {project_name}")
        return result.content

    async def memory_bank_write(project_name: str, file_name: str, content: str) -> str:
        """Create a new file. Fails if it already exists."""
        result = await repo.create(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            content,
        )
        if not isinstance(result, Found):
            raise ToolError(
                f"File {file_name} already exists in project {project_name}; "
                "use memory_bank_update instead"
            )
        return f"File {file_name} created in project {project_name}"

    async def memory_bank_update(project_name: str, file_name: str, content: str) -> str:
        """Overwrite an existing file. The previous content is kept as a version."""
        result = await repo.update(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            content,
        )
        if not isinstance(result, Found):
            raise ToolError(f"File {file_name} not found in project {project_name}")
        return f"File {file_name} updated in project {project_name}"

    async def memory_bank_append(project_name: str, file_name: str, content: str) -> str:
        """Append content on a new line, creating the file if needed."""
        await repo.append(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            content,
        )
        return "Content appended successfully"

    async def memory_bank_log(project_name: str, file_name: str, content: str) -> str:
        """Append a timestamped log entry, creating the file if needed."""
        await repo.log(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            content,
        )
        return "Content logged successfully"

    async def list_file_versions(project_name: str, file_name: str) -> str:
        """List stored versions of a file, newest first, as JSON."""
        versions = await repo.list_versions(
            _check_name("project_name", project_name), _check_name("file_name", file_name)
        )
        return json.dumps(
            [
                {
                    "versionId": v.version_id,
                    "timestamp": v.timestamp.isoformat().replace("+00:00", "Z"),
                    "size": v.size,
                }
                for v in versions
            ],
            indent=2,
        )

    async def get_file_version(project_name: str, file_name: str, version_id: str) -> str:
        """Read the content of one stored version."""
        result = await repo.get_version(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            _check_name("version_id", version_id),
        )
        if not isinstance(result, Found):
            raise ToolError(
                f"Version {version_id} of file {file_name} in project {project_name} not found"
            )
        return result.content

    async def revert_file_version(project_name: str, file_name: str, version_id: str) -> str:
        """Make a stored version current. The replaced content becomes a new version."""
        result = await repo.revert(
            _check_name("project_name", project_name),
            _check_name("file_name", file_name),
            _check_name("version_id", version_id),
        )
        if not isinstance(result, Found):
            # revert needs the current file; say so when only the version survives
            if isinstance(await repo.get_version(project_name, file_name, version_id), Found):
                raise ToolError(f"File {file_name} not found in project {project_name}")
            raise ToolError(
                f"Version {version_id} of file {file_name} in project {project_name} not found"
            )
        return result.content

    return {
        "list_projects": list_projects,
        "list_project_files": list_project_files,
        "memory_bank_read": memory_bank_read,
        "memory_bank_write": memory_bank_write,
        "memory_bank_update": memory_bank_update,
        "memory_bank_append": memory_bank_append,
        "memory_bank_log": memory_bank_log,
        "list_file_versions": list_file_versions,
        "get_file_version": get_file_version,
        "revert_file_version": revert_file_version,
    }
