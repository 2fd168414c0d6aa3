"""
Intelligence Module
LLM abstraction plus the research, scripting, review and voice agents
"""
from .llm import (
    BaseLLM,
    OpenAILLM,
    AnthropicLLM,
    get_llm,
)
from .agents import (
    AutoApproveReviewer,
    ConsoleReviewer,
    ResearchAgent,
    ScriptAgent,
    ToolkitAgentRunner,
    VoiceAgent,
)

__all__ = [
    # LLM
    "BaseLLM",
    "OpenAILLM",
    "AnthropicLLM",
    "get_llm",
    # Agents
    "AutoApproveReviewer",
    "ConsoleReviewer",
    "ResearchAgent",
    "ScriptAgent",
    "ToolkitAgentRunner",
    "VoiceAgent",
]
