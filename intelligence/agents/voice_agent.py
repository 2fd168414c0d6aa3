"""
Voice Agent
Turns the approved script into narration audio through a TTS toolkit.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config import ComposioSettings, VoiceSettings, get_settings
from integrations import ComposioBroker, get_broker
from utils.exceptions import AuthenticationRequiredError
from utils.parsing import extract_first_url, is_auth_link

from .toolkit_runner import ToolkitAgentRunner


logger = logging.getLogger(__name__)

TOOLKIT = "elevenlabs"

_VOICE_INSTRUCTIONS = """You are an audio engineer working with ElevenLabs.

GOAL:
Convert the input script into speech with the 'ELEVENLABS_TEXT_TO_SPEECH' tool.

CONFIGURATION:
- Voice ID: "{voice_id}"
- Model ID: "{model_id}"

OUTPUT RULES:
1. Execute the tool.
2. The tool returns a URL for the generated audio.
3. Your Final Output must be **ONLY the raw URL string**.
4. Do NOT use Markdown formatting (no [Link](url)).
5. Do NOT include conversational text.
"""


class VoiceAgent:
    """Audio stage."""

    def __init__(
        self,
        *,
        broker: Optional[ComposioBroker] = None,
        runner: Optional[ToolkitAgentRunner] = None,
        settings: Optional[VoiceSettings] = None,
        composio_settings: Optional[ComposioSettings] = None,
    ) -> None:
        self.broker = broker or get_broker()
        self.runner = runner or ToolkitAgentRunner()
        self.settings = settings or get_settings().voice
        self.composio_settings = composio_settings or self.broker.settings

    async def run(self, script: str) -> str:
        """Return the audio URL, or the raw agent output when it holds no URL."""
        logger.info("--- STAGE 3: AUDIO GENERATION ---")
        session = await asyncio.to_thread(
            self.broker.create_toolkit_session,
            [TOOLKIT], self.composio_settings.auth_config_for(TOOLKIT)
        )

        logger.info(f"Generating speech for script ({len(script)} chars)...")
        output = await self.runner.run(
            name="Voice Director",
            instructions=_VOICE_INSTRUCTIONS.format(
                voice_id=self.settings.voice_id,
                model_id=self.settings.model_id,
            ),
            prompt=f'Generate audio for this script: \n"{script}"',
            session=session,
        )

        url = extract_first_url(output)
        if url is None:
            logger.warning("Voice agent returned no URL")
            return output

        if is_auth_link(url, hosts=(self.composio_settings.connect_host,)):
            logger.error(f"AUTHENTICATION REQUIRED: authenticate {TOOLKIT} here: {url}")
            raise AuthenticationRequiredError(
                f"{TOOLKIT} authentication pending. Authenticate using {url} and restart.",
                auth_url=url,
                toolkit=TOOLKIT,
            )
        return url
