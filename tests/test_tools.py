from __future__ import annotations

import json

import httpx
import pytest

from study_server.errors import ToolValidationError

EXPECTED_TOOLS = [
    "add",
    "address",
    "github_get_pull_requests",
    "github_add_comment",
    "github_get_pull_diff",
    "github_get_pull_files",
    "github_get_pull_reviews",
]

PULL = {
    "number": 7,
    "title": "Fix routing",
    "state": "open",
    "user": {"login": "alice"},
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-02T00:00:00Z",
    "html_url": "https://github.com/octo/demo/pull/7",
    "head": {"ref": "fix-routing", "sha": "abc"},
    "base": {"ref": "main", "sha": "def"},
    "mergeable": None,
    "merged": False,
    "body": "not part of the summary",
}


def test_all_tools_registered(registry):
    assert [t.name for t in registry.list_tools()] == EXPECTED_TOOLS
    for tool in registry.list_tools():
        assert tool.description


# add


@pytest.mark.asyncio
async def test_add(registry):
    assert await registry.invoke("add", {"a": 2, "b": 3}) == "15"


@pytest.mark.asyncio
async def test_add_floats(registry):
    assert await registry.invoke("add", {"a": 1.5, "b": 1}) == "12.5"
    assert await registry.invoke("add", {"a": 0.5, "b": 0.5}) == "11"


@pytest.mark.asyncio
async def test_add_rejects_strings(registry):
    with pytest.raises(ToolValidationError) as exc_info:
        await registry.invoke("add", {"a": "2", "b": 3})
    assert exc_info.value.field == "a"


@pytest.mark.asyncio
async def test_add_rejects_booleans(registry):
    with pytest.raises(ToolValidationError):
        await registry.invoke("add", {"a": True, "b": 3})


# address


@pytest.mark.asyncio
async def test_address_found(registry, upstream):
    upstream.on(
        "/api/search",
        json_body={
            "status": 200,
            "message": None,
            "results": [
                {"address1": "東京都", "address2": "千代田区", "address3": "千代田"},
                {"address1": "ignored", "address2": "", "address3": ""},
            ],
        },
    )
    assert await registry.invoke("address", {"zipcode": "1000001"}) == "東京都千代田区千代田"
    assert upstream.last.url.params["zipcode"] == "1000001"


@pytest.mark.asyncio
async def test_address_not_found(registry, upstream):
    upstream.on("/api/search", json_body={"status": 200, "message": None, "results": None})
    assert await registry.invoke("address", {"zipcode": "0000000"}) == "Address not found (status: 200)"


@pytest.mark.asyncio
async def test_address_upstream_error_status(registry, upstream):
    upstream.on(
        "/api/search",
        json_body={"status": 400, "message": "bad zipcode", "results": None},
    )
    assert await registry.invoke("address", {"zipcode": "9999999"}) == "Address not found (status: 400)"


@pytest.mark.asyncio
async def test_address_transport_failure_is_stringified(registry, upstream):
    upstream.fail("/api/search", httpx.ConnectError("connection refused"))
    result = await registry.invoke("address", {"zipcode": "1000001"})
    assert result == "Error while searching address: connection refused"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "zipcode, constraints",
    [
        ("123456", {"minLength", "pattern"}),
        ("12345678", {"maxLength", "pattern"}),
        ("100-001", {"pattern"}),
        ("100000\n", {"pattern"}),
        ("１０００００１", {"pattern"}),
        ("١٠٠٠٠٠١", {"pattern"}),
    ],
)
async def test_address_validation(registry, upstream, zipcode, constraints):
    with pytest.raises(ToolValidationError) as exc_info:
        await registry.invoke("address", {"zipcode": zipcode})
    assert exc_info.value.field == "zipcode"
    assert exc_info.value.constraint in constraints
    assert upstream.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [["maintenance"], {"status": 200, "results": "x"}, {"status": 200, "results": ["x"]}],
)
async def test_address_malformed_body_is_stringified(registry, upstream, body):
    upstream.on("/api/search", json_body=body)
    result = await registry.invoke("address", {"zipcode": "1000001"})
    assert result == "Error while searching address: Unexpected response body"


# github


@pytest.mark.asyncio
async def test_get_pull_requests_defaults_and_auth(registry, upstream):
    upstream.on("/repos/octo/demo/pulls", json_body=[PULL])
    result = json.loads(await registry.invoke("github_get_pull_requests", {"repo": "demo"}))

    request = upstream.last
    assert request.headers["Authorization"] == "token test-token"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"
    assert dict(request.url.params) == {"state": "open", "per_page": "30", "page": "1"}
    assert result == [
        {
            "number": 7,
            "title": "Fix routing",
            "state": "open",
            "user": "alice",
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-02T00:00:00Z",
            "html_url": "https://github.com/octo/demo/pull/7",
            "head": {"ref": "fix-routing", "sha": "abc"},
            "base": {"ref": "main", "sha": "def"},
            "mergeable": None,
            "merged": False,
        }
    ]


@pytest.mark.asyncio
async def test_get_pull_requests_passes_pagination(registry, upstream):
    upstream.on("/repos/octo/demo/pulls", json_body=[])
    result = await registry.invoke(
        "github_get_pull_requests",
        {"repo": "demo", "state": "all", "per_page": 100, "page": 3},
    )
    assert json.loads(result) == []
    assert dict(upstream.last.url.params) == {"state": "all", "per_page": "100", "page": "3"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "arguments, field, constraint",
    [
        ({"repo": "demo", "per_page": 0}, "per_page", "minimum"),
        ({"repo": "demo", "per_page": 101}, "per_page", "maximum"),
        ({"repo": "demo", "page": 0}, "page", "minimum"),
        ({"repo": "demo", "state": "merged"}, "state", "enum"),
        ({"state": "open"}, "repo", "required"),
    ],
)
async def test_get_pull_requests_validation(registry, upstream, arguments, field, constraint):
    with pytest.raises(ToolValidationError) as exc_info:
        await registry.invoke("github_get_pull_requests", arguments)
    assert exc_info.value.field == field
    assert exc_info.value.constraint == constraint
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_get_pull_requests_upstream_message(registry, upstream):
    upstream.on("/repos/octo/missing/pulls", status_code=404, json_body={"message": "Not Found"})
    result = await registry.invoke("github_get_pull_requests", {"repo": "missing"})
    assert result == "Error while fetching pull requests: Not Found"


@pytest.mark.asyncio
async def test_add_comment(registry, upstream):
    upstream.on(
        "/repos/octo/demo/issues/7/comments",
        status_code=201,
        json_body={"id": 99, "html_url": "https://github.com/octo/demo/pull/7#issuecomment-99"},
    )
    result = await registry.invoke(
        "github_add_comment", {"repo": "demo", "pull_number": 7, "body": "LGTM"}
    )
    assert result == (
        "Comment added successfully. Comment ID: 99, "
        "URL: https://github.com/octo/demo/pull/7#issuecomment-99"
    )
    assert upstream.last.method == "POST"
    assert upstream.last_json() == {"body": "LGTM"}


@pytest.mark.asyncio
async def test_add_comment_requires_body(registry):
    with pytest.raises(ToolValidationError) as exc_info:
        await registry.invoke("github_add_comment", {"repo": "demo", "pull_number": 7})
    assert exc_info.value.field == "body"


@pytest.mark.asyncio
async def test_add_comment_failure(registry, upstream):
    upstream.on(
        "/repos/octo/demo/issues/7/comments",
        status_code=403,
        json_body={"message": "Resource not accessible by integration"},
    )
    result = await registry.invoke(
        "github_add_comment", {"repo": "demo", "pull_number": 7, "body": "hi"}
    )
    assert result == "Error while adding comment: Resource not accessible by integration"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fmt, accept",
    [("diff", "application/vnd.github.v3.diff"), ("patch", "application/vnd.github.v3.patch")],
)
async def test_get_pull_diff(registry, upstream, fmt, accept):
    upstream.on("/repos/octo/demo/pulls/7", text="diff --git a/x b/x\n")
    result = await registry.invoke(
        "github_get_pull_diff", {"repo": "demo", "pull_number": 7, "format": fmt}
    )
    assert result == "diff --git a/x b/x\n"
    assert upstream.last.headers["Accept"] == accept


@pytest.mark.asyncio
async def test_get_pull_diff_defaults_to_diff(registry, upstream):
    upstream.on("/repos/octo/demo/pulls/7", text="")
    await registry.invoke("github_get_pull_diff", {"repo": "demo", "pull_number": 7})
    assert upstream.last.headers["Accept"] == "application/vnd.github.v3.diff"


@pytest.mark.asyncio
async def test_get_pull_diff_timeout_is_stringified(registry, upstream):
    upstream.fail("/repos/octo/demo/pulls/7", httpx.ReadTimeout("timed out"))
    result = await registry.invoke("github_get_pull_diff", {"repo": "demo", "pull_number": 7})
    assert result == "Error while fetching diff: timed out"


@pytest.mark.asyncio
async def test_get_pull_files(registry, upstream):
    upstream.on(
        "/repos/octo/demo/pulls/7/files",
        json_body=[
            {
                "sha": "zzz",
                "filename": "app.py",
                "status": "modified",
                "additions": 3,
                "deletions": 1,
                "changes": 4,
                "blob_url": "https://github.com/octo/demo/blob/abc/app.py",
                "patch": "@@ -1 +1 @@",
            }
        ],
    )
    result = json.loads(
        await registry.invoke(
            "github_get_pull_files", {"repo": "demo", "pull_number": 7, "per_page": 5, "page": 2}
        )
    )
    assert result == [
        {
            "filename": "app.py",
            "status": "modified",
            "additions": 3,
            "deletions": 1,
            "changes": 4,
            "blob_url": "https://github.com/octo/demo/blob/abc/app.py",
            "patch": "@@ -1 +1 @@",
        }
    ]
    assert dict(upstream.last.url.params) == {"per_page": "5", "page": "2"}


@pytest.mark.asyncio
async def test_get_pull_reviews(registry, upstream):
    upstream.on(
        "/repos/octo/demo/pulls/7/reviews",
        json_body=[
            {
                "id": 1,
                "user": {"login": "bob"},
                "state": "APPROVED",
                "body": "",
                "submitted_at": "2024-01-03T00:00:00Z",
                "html_url": "https://github.com/octo/demo/pull/7#pullrequestreview-1",
                "commit_id": "abc",
            }
        ],
    )
    result = json.loads(
        await registry.invoke("github_get_pull_reviews", {"repo": "demo", "pull_number": 7})
    )
    assert result == [
        {
            "id": 1,
            "user": "bob",
            "state": "APPROVED",
            "body": "",
            "submitted_at": "2024-01-03T00:00:00Z",
            "html_url": "https://github.com/octo/demo/pull/7#pullrequestreview-1",
        }
    ]
    assert dict(upstream.last.url.params) == {"per_page": "30", "page": "1"}


@pytest.mark.asyncio
async def test_pull_number_must_be_integer(registry):
    with pytest.raises(ToolValidationError) as exc_info:
        await registry.invoke("github_get_pull_reviews", {"repo": "demo", "pull_number": "7"})
    assert exc_info.value.field == "pull_number"
    assert exc_info.value.constraint == "type"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, path, prefix",
    [
        ("github_get_pull_requests", "/repos/octo/demo/pulls", "Error while fetching pull requests"),
        ("github_get_pull_files", "/repos/octo/demo/pulls/7/files", "Error while fetching changed files"),
        ("github_get_pull_reviews", "/repos/octo/demo/pulls/7/reviews", "Error while fetching reviews"),
    ],
)
@pytest.mark.parametrize("body", [{"message": "x"}, ["x", "y"]])
async def test_list_tools_reject_unexpected_body(registry, upstream, tool, path, prefix, body):
    upstream.on(path, json_body=body)
    result = await registry.invoke(tool, {"repo": "demo", "pull_number": 7})
    assert result == f"{prefix}: Unexpected response body"


@pytest.mark.asyncio
async def test_get_pull_requests_tolerates_odd_nested_fields(registry, upstream):
    upstream.on(
        "/repos/octo/demo/pulls",
        json_body=[{"number": 1, "user": "ghost", "head": None, "base": ["main"]}],
    )
    result = json.loads(await registry.invoke("github_get_pull_requests", {"repo": "demo"}))
    assert result[0]["user"] is None
    assert result[0]["head"] == {"ref": None, "sha": None}
    assert result[0]["base"] == {"ref": None, "sha": None}


@pytest.mark.asyncio
async def test_add_comment_rejects_unexpected_body(registry, upstream):
    upstream.on("/repos/octo/demo/issues/7/comments", status_code=201, json_body=["x"])
    result = await registry.invoke(
        "github_add_comment", {"repo": "demo", "pull_number": 7, "body": "hi"}
    )
    assert result == "Error while adding comment: Unexpected response body"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, arguments, prefix",
    [
        ("github_get_pull_requests", {"repo": "de\x00mo"}, "Error while fetching pull requests: "),
        (
            "github_add_comment",
            {"repo": "de\x00mo", "pull_number": 7, "body": "hi"},
            "Error while adding comment: ",
        ),
        ("github_get_pull_diff", {"repo": "de\x00mo", "pull_number": 7}, "Error while fetching diff: "),
        ("github_get_pull_files", {"repo": "de\nmo", "pull_number": 7}, "Error while fetching changed files: "),
        ("github_get_pull_reviews", {"repo": "de\x7fmo", "pull_number": 7}, "Error while fetching reviews: "),
    ],
)
async def test_unencodable_repo_is_stringified(registry, upstream, tool, arguments, prefix):
    result = await registry.invoke(tool, arguments)
    assert result.startswith(prefix)
    assert upstream.requests == []
