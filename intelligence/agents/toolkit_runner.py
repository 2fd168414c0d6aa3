"""Run a hosted-MCP agent against a broker toolkit session."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from config import LLMSettings, get_llm_settings
from core import ToolkitSession


logger = logging.getLogger(__name__)

SERVER_LABEL = "tool_router"


class ToolkitAgentRunner:
    """Builds one OpenAI Agents SDK agent per call, wired to a toolkit session."""

    def __init__(self, settings: Optional[LLMSettings] = None, *, model: Optional[str] = None) -> None:
        self.settings = settings or get_llm_settings()
        self.model = model or self.settings.toolkit_agent_model

    @staticmethod
    def tool_config(session: ToolkitSession) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "type": "mcp",
            "server_label": SERVER_LABEL,
            "server_url": session.url,
            "require_approval": "never",
        }
        if session.headers:
            config["headers"] = dict(session.headers)
        return config

    async def run(
        self,
        *,
        name: str,
        instructions: str,
        prompt: str,
        session: ToolkitSession,
    ) -> str:
        """Run the agent to completion and return its final output ("" when empty)."""
        from agents import Agent, HostedMCPTool, Runner

        agent = Agent(
            name=name,
            instructions=instructions,
            tools=[HostedMCPTool(tool_config=self.tool_config(session))],
            model=self.model,
        )
        logger.debug(f"Running agent {name} on {', '.join(session.toolkits)} (model={self.model})")
        result = await Runner.run(agent, prompt)
        output = result.final_output
        return "" if output is None else str(output)
