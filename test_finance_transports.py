import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from starlette.testclient import TestClient as StarletteTestClient

from domains.finance.mcp_server import (
    call_tool_content,
    create_mcp_server,
    create_sse_app,
    create_streamable_http_app,
    tool_list,
)
from domains.finance.router import build_router
from domains.finance.server import create_app


def _router():
    retriever = MagicMock()
    retriever.search = AsyncMock(return_value=[])
    return build_router(retriever=retriever)


# ─── JSON HTTP API ──────────────────────────────────────────────

def test_http_health_and_tools() -> None:
    client = TestClient(create_app(_router()))

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["tools"] == 12

    tools = client.get("/tools")
    assert tools.status_code == 200
    names = [tool["name"] for tool in tools.json()]
    assert "portfolio_momentum" in names
    assert all("input_schema" in tool and "required" in tool for tool in tools.json())


def test_http_invoke_success_and_failure_envelopes() -> None:
    client = TestClient(create_app(_router()))

    ok = client.post("/invoke", json={
        "tool": "organic_growth",
        "arguments": {"revenue_prior": 48.7, "revenue_current": 53.0},
    })
    assert ok.status_code == 200
    body = ok.json()
    assert body["status"] == "success"
    assert body["result"]["growth_rating"] == "Moderate"

    failed = client.post("/invoke", json={"tool": "organic_growth", "arguments": {"revenue_prior": 0, "revenue_current": 5}})
    assert failed.status_code == 200
    assert failed.json()["error"]["kind"] == "arithmetic_domain_error"

    not_object = client.post("/invoke", json={"tool": "organic_growth", "arguments": [48.7, 53.0]})
    assert not_object.json()["error"]["kind"] == "invalid_argument"

    unknown = client.post("/invoke", json={"tool": "nope", "arguments": {}})
    assert unknown.json()["error"]["kind"] == "unknown_tool"


# ─── MCP adapter ────────────────────────────────────────────────

def test_mcp_tool_list_mirrors_catalogue() -> None:
    router = _router()
    tools = tool_list(router)
    assert [tool.name for tool in tools] == [d.name for d in router.list_tools()]
    gini = next(tool for tool in tools if tool.name == "gini_coefficient")
    assert gini.inputSchema["required"] == ["revenues"]


def test_mcp_call_renders_envelope_as_json_text() -> None:
    router = _router()
    content, is_error = asyncio.run(call_tool_content(
        router, "operating_leverage", {"revenue_growth_rate": 0.09, "cost_growth_rate": 0.06},
    ))
    assert is_error is False
    envelope = json.loads(content[0].text)
    assert envelope["result"]["operating_leverage"] == 1.5

    content, is_error = asyncio.run(call_tool_content(router, "operating_leverage", None))
    assert is_error is True
    assert json.loads(content[0].text)["error"]["kind"] == "invalid_argument"


def test_mcp_server_and_http_apps_build() -> None:
    router = _router()
    server = create_mcp_server(router)
    assert server.name == "finance-engine"

    for app in (create_sse_app(router), create_streamable_http_app(router)):
        client = StarletteTestClient(app)
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["tools"] == 12
