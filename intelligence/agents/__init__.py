"""
Agents Module
One agent per pipeline stage
"""
from .toolkit_runner import ToolkitAgentRunner
from .research_agent import ResearchAgent
from .script_agent import ScriptAgent
from .review_agent import AutoApproveReviewer, ConsoleReviewer
from .voice_agent import VoiceAgent

__all__ = [
    "ToolkitAgentRunner",
    "ResearchAgent",
    "ScriptAgent",
    "AutoApproveReviewer",
    "ConsoleReviewer",
    "VoiceAgent",
]
