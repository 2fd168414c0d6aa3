from __future__ import annotations

from types import SimpleNamespace

import agents
import pytest

from config import LLMSettings
from core import ToolkitSession
from intelligence.agents import ToolkitAgentRunner
from intelligence.llm import AnthropicLLM, OpenAILLM, get_llm


def _llm_settings(**kwargs) -> LLMSettings:
    kwargs.setdefault("openai_api_key", "sk")
    kwargs.setdefault("anthropic_api_key", "ak")
    return LLMSettings(**kwargs)


def test_get_llm_defaults_to_configured_openai_model() -> None:
    llm = get_llm(settings=_llm_settings(model_name="gpt-4o-mini", temperature=0.2))
    assert isinstance(llm, OpenAILLM)
    assert llm.model == "gpt-4o-mini"
    assert llm.api_key == "sk"
    assert llm.temperature == 0.2


def test_get_llm_other_provider_uses_its_default_model() -> None:
    llm = get_llm(provider="anthropic", settings=_llm_settings())
    assert isinstance(llm, AnthropicLLM)
    assert llm.model == "claude-3-5-sonnet-latest"


def test_get_llm_rejects_unknown_provider() -> None:
    with pytest.raises(ValueError, match="Unsupported LLM provider"):
        get_llm(provider="nope", settings=_llm_settings())


def test_toolkit_tool_config_points_at_session() -> None:
    session = ToolkitSession(url="https://mcp.example.com/s/1", headers={"x-api-key": "k"}, toolkits=["exa"])
    config = ToolkitAgentRunner.tool_config(session)
    assert config == {
        "type": "mcp",
        "server_label": "tool_router",
        "server_url": "https://mcp.example.com/s/1",
        "require_approval": "never",
        "headers": {"x-api-key": "k"},
    }


@pytest.mark.asyncio
async def test_toolkit_runner_returns_final_output(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    class _Agent:
        def __init__(self, **kwargs):
            captured["agent"] = kwargs

    class _HostedMCPTool:
        def __init__(self, tool_config):
            self.tool_config = tool_config

    class _Runner:
        @staticmethod
        async def run(agent, prompt):
            captured["prompt"] = prompt
            return SimpleNamespace(final_output=None if prompt == "empty" else "done")

    monkeypatch.setattr(agents, "Agent", _Agent)
    monkeypatch.setattr(agents, "HostedMCPTool", _HostedMCPTool)
    monkeypatch.setattr(agents, "Runner", _Runner)

    runner = ToolkitAgentRunner(_llm_settings(model_name="gpt-4o", agent_model="gpt-4.1-mini"))
    session = ToolkitSession(url="https://mcp.example.com/s/2", toolkits=["youtube"])

    assert await runner.run(name="YouTube Scout", instructions="i", prompt="go", session=session) == "done"
    assert captured["agent"]["name"] == "YouTube Scout"
    assert captured["agent"]["model"] == "gpt-4.1-mini"
    assert captured["agent"]["tools"][0].tool_config["server_url"] == "https://mcp.example.com/s/2"

    assert await runner.run(name="x", instructions="i", prompt="empty", session=session) == ""
