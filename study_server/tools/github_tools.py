from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from mcp import types

from ..errors import UpstreamError
from ..github_client import DIFF_MEDIA_TYPE, PATCH_MEDIA_TYPE, GitHubClient
from . import ToolRegistry

logger = logging.getLogger(__name__)


def _records(payload: Any) -> List[Dict[str, Any]]:
    """Check that GitHub returned a list of objects, as every list endpoint should."""
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise UpstreamError("Unexpected response body")
    return payload


def _nested(record: Dict[str, Any], key: str, sub: str) -> Any:
    value = record.get(key)
    return value.get(sub) if isinstance(value, dict) else None


def _summarize_pull(pr: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "number": pr.get("number"),
        "title": pr.get("title"),
        "state": pr.get("state"),
        "user": _nested(pr, "user", "login"),
        "created_at": pr.get("created_at"),
        "updated_at": pr.get("updated_at"),
        "html_url": pr.get("html_url"),
        "head": {
            "ref": _nested(pr, "head", "ref"),
            "sha": _nested(pr, "head", "sha"),
        },
        "base": {
            "ref": _nested(pr, "base", "ref"),
            "sha": _nested(pr, "base", "sha"),
        },
        "mergeable": pr.get("mergeable"),
        "merged": pr.get("merged"),
    }


def _summarize_file(file: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "filename": file.get("filename"),
        "status": file.get("status"),
        "additions": file.get("additions"),
        "deletions": file.get("deletions"),
        "changes": file.get("changes"),
        "blob_url": file.get("blob_url"),
        "patch": file.get("patch"),
    }


def _summarize_review(review: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": review.get("id"),
        "user": _nested(review, "user", "login"),
        "state": review.get("state"),
        "body": review.get("body"),
        "submitted_at": review.get("submitted_at"),
        "html_url": review.get("html_url"),
    }


def _dump(items: List[Dict[str, Any]]) -> str:
    return json.dumps(items, indent=2, ensure_ascii=False)


def github_tools(github_client: GitHubClient) -> Dict[str, Any]:
    """
    Factory to produce pull-request handlers with a bound GitHub client.

    Handlers never raise on upstream failure: the error text is returned as
    the tool result so the calling agent can read and react to it.
    """

    async def get_pull_requests(arguments: Dict[str, Any]) -> str:
        try:
            pulls = await github_client.get_json(
                arguments["repo"],
                "/pulls",
                params={
                    "state": arguments["state"],
                    "per_page": arguments["per_page"],
                    "page": arguments["page"],
                },
            )
            summaries = [_summarize_pull(pr) for pr in _records(pulls)]
        except UpstreamError as e:
            logger.warning("Fetching pull requests failed: %s", e)
            return f"Error while fetching pull requests: {e}"
        return _dump(summaries)

    async def add_comment(arguments: Dict[str, Any]) -> str:
        # Pull request conversation comments live on the issues endpoint
        try:
            comment = await github_client.post_json(
                arguments["repo"],
                f"/issues/{int(arguments['pull_number'])}/comments",
                {"body": arguments["body"]},
            )
            if not isinstance(comment, dict):
                raise UpstreamError("Unexpected response body")
        except UpstreamError as e:
            logger.warning("Adding comment failed: %s", e)
            return f"Error while adding comment: {e}"
        return (
            "Comment added successfully. "
            f"Comment ID: {comment.get('id')}, URL: {comment.get('html_url')}"
        )

    async def get_pull_diff(arguments: Dict[str, Any]) -> str:
        accept = PATCH_MEDIA_TYPE if arguments["format"] == "patch" else DIFF_MEDIA_TYPE
        try:
            return await github_client.get_text(
                arguments["repo"],
                f"/pulls/{int(arguments['pull_number'])}",
                accept=accept,
            )
        except UpstreamError as e:
            logger.warning("Fetching diff failed: %s", e)
            return f"Error while fetching diff: {e}"

    async def get_pull_files(arguments: Dict[str, Any]) -> str:
        try:
            files = await github_client.get_json(
                arguments["repo"],
                f"/pulls/{int(arguments['pull_number'])}/files",
                params={"per_page": arguments["per_page"], "page": arguments["page"]},
            )
            summaries = [_summarize_file(f) for f in _records(files)]
        except UpstreamError as e:
            logger.warning("Fetching changed files failed: %s", e)
            return f"Error while fetching changed files: {e}"
        return _dump(summaries)

    async def get_pull_reviews(arguments: Dict[str, Any]) -> str:
        try:
            reviews = await github_client.get_json(
                arguments["repo"],
                f"/pulls/{int(arguments['pull_number'])}/reviews",
                params={"per_page": arguments["per_page"], "page": arguments["page"]},
            )
            summaries = [_summarize_review(r) for r in _records(reviews)]
        except UpstreamError as e:
            logger.warning("Fetching reviews failed: %s", e)
            return f"Error while fetching reviews: {e}"
        return _dump(summaries)

    # JSON Schemas for tool inputs
    repo_prop = {"type": "string", "description": "Repository name"}
    pull_number_prop = {"type": "integer", "description": "Pull request number"}
    per_page_prop = {
        "type": "integer",
        "minimum": 1,
        "maximum": 100,
        "default": 30,
        "description": "Number of results per page",
    }
    page_prop = {
        "type": "integer",
        "minimum": 1,
        "default": 1,
        "description": "Page number",
    }

    pulls_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "repo": repo_prop,
            "state": {
                "type": "string",
                "enum": ["open", "closed", "all"],
                "default": "open",
                "description": "State of pull requests to retrieve",
            },
            "per_page": per_page_prop,
            "page": page_prop,
        },
        "required": ["repo"],
    }

    comment_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "repo": repo_prop,
            "pull_number": pull_number_prop,
            "body": {"type": "string", "description": "Comment body (supports Markdown)"},
        },
        "required": ["repo", "pull_number", "body"],
    }

    diff_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "repo": repo_prop,
            "pull_number": pull_number_prop,
            "format": {
                "type": "string",
                "enum": ["diff", "patch"],
                "default": "diff",
                "description": "Format of the diff (diff or patch)",
            },
        },
        "required": ["repo", "pull_number"],
    }

    paged_pull_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "repo": repo_prop,
            "pull_number": pull_number_prop,
            "per_page": per_page_prop,
            "page": page_prop,
        },
        "required": ["repo", "pull_number"],
    }

    return {
        "github_get_pull_requests": {
            "schema": pulls_schema,
            "handler": get_pull_requests,
            "description": "Get pull requests from a GitHub repository",
        },
        "github_add_comment": {
            "schema": comment_schema,
            "handler": add_comment,
            "description": "Add a comment to a GitHub pull request",
        },
        "github_get_pull_diff": {
            "schema": diff_schema,
            "handler": get_pull_diff,
            "description": "Get the diff of a GitHub pull request",
        },
        "github_get_pull_files": {
            "schema": paged_pull_schema,
            "handler": get_pull_files,
            "description": "Get the list of files changed in a GitHub pull request",
        },
        "github_get_pull_reviews": {
            "schema": paged_pull_schema,
            "handler": get_pull_reviews,
            "description": "Get reviews for a GitHub pull request",
        },
    }


def register_tools(registry: ToolRegistry, github_client: GitHubClient) -> None:
    tool_defs = github_tools(github_client)
    for name, meta in tool_defs.items():
        registry.add_tool(
            types.Tool(
                name=name,
                description=meta["description"],
                inputSchema=meta["schema"],
            ),
            meta["handler"],
        )
