"""
Script Agent
Writes a ~30 second vertical-video script from research material.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from core import PipelineState, ResearchData
from intelligence.llm import BaseLLM, get_llm
from utils.exceptions import ScriptGenerationError
from utils.parsing import strip_code_fences


logger = logging.getLogger(__name__)

AGENT_NAME = "Viral Scriptwriter"
SYSTEM_PROMPT = "You are an expert short-form scriptwriter. You hate fluff. You love specific facts."
CALL_TO_ACTION = "Hit follow for more!"

CONTEXT_LIMIT = 5

BANNED_WORDS = (
    "game-changer",
    "mind-blowing",
    "groundbreaking",
    "future is here",
    "reshaping our lives",
    "unleash",
    "unlock",
    "imagine",
)

STYLE_GUIDELINES = f"""[STYLE GUIDELINES]
- STRICTLY NO EMOJIS. Plain text only.
- Tone: Conversational but factual. Write at a 6th-grade reading level.
- Length: about 30 seconds spoken aloud (75-85 words).
- Banned words: {", ".join(BANNED_WORDS)}.
- Cohesion: Pick ONE single news item/trend and tell that specific story.
  Do not combine unrelated sentences or facts from different stories.

[STRUCTURE]
- Sentence 1 & 2: A specific Hook built on a surprising fact or number.
- Sentence 3: The "Bridge" explaining why this matters to the viewer.
- Body: Give concrete details (names, numbers, dates) from the Source Material.
- Final Sentence: EXACTLY "{CALL_TO_ACTION}"

[FORMAT]
- Return ONLY the spoken text.
- NO headers, NO labels, NO markdown, NO stage directions.
- Start directly on the first word of the hook."""


def _video_lines(research: ResearchData) -> List[str]:
    lines = []
    for video in research.videos[:CONTEXT_LIMIT]:
        views = video.view_count or "N/A"
        lines.append(f"- {video.title} (Views: {views})")
    return lines


def _social_lines(research: ResearchData) -> List[str]:
    lines = []
    for post in research.social_insights[:CONTEXT_LIMIT]:
        text = " ".join(post.text.split())
        lines.append(f"- {text} (Likes: {post.likes}, Comments: {post.comments})")
    return lines


def build_source_material(research: ResearchData) -> str:
    """Render research into the prompt's source-material block."""
    sections = [
        "[VIRAL HOOKS FROM YOUTUBE]",
        "\n".join(_video_lines(research)),
        "",
        "[PUBLIC SENTIMENT FROM TWITTER]",
        "\n".join(_social_lines(research)),
        "",
        "[LATEST NEWS / TRENDS]",
        research.trends.strip(),
        "",
        "[PACING REFERENCE]",
        research.raw_transcripts.strip(),
    ]
    return "\n".join(sections)


def build_task(feedback: Optional[str]) -> str:
    if feedback:
        return (
            "[TASK]\n"
            "The previous script was rejected by the editor.\n"
            f'Feedback: "{feedback}"\n'
            "Fix the flow specifically based on the feedback. "
            "Ensure the script tells ONE cohesive story."
        )
    return (
        "[TASK]\n"
        "Write a cohesive, viral script based on the Source Material. "
        "Focus on the single most interesting fact and build the whole script around it."
    )


def build_prompt(topic: str, research: ResearchData, feedback: Optional[str] = None) -> str:
    return "\n\n".join(
        [
            f'TOPIC: "{topic}"',
            "[SOURCE MATERIAL]\n" + build_source_material(research),
            STYLE_GUIDELINES,
            build_task(feedback),
        ]
    )


class ScriptAgent:
    """Scripting stage."""

    def __init__(self, llm: Optional[BaseLLM] = None) -> None:
        self.llm = llm or get_llm()

    async def run(self, state: PipelineState) -> str:
        logger.info("--- STAGE 2: WRITING SCRIPT ---")
        if state.research is None:
            raise ScriptGenerationError("Research data is missing!")

        if state.feedback:
            logger.info(f"Revising script with feedback: {state.feedback}")

        prompt = build_prompt(state.topic, state.research, state.feedback)
        output = await self.llm.achat(prompt, system_prompt=SYSTEM_PROMPT)

        script = strip_code_fences(output)
        if not script:
            raise ScriptGenerationError(f"{AGENT_NAME} failed to generate a response.")
        logger.info(f"Script drafted ({len(script.split())} words)")
        return script
