"""Pipeline orchestrator: research, script review loop, audio, video."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from config import Settings, get_settings
from core import PipelineState, ReviewDecision, ScriptRevision, StageName, VideoResult
from intelligence.agents import (
    AutoApproveReviewer,
    ConsoleReviewer,
    ResearchAgent,
    ScriptAgent,
    VoiceAgent,
)
from render import BaseVideoAdapter, HeyGenAdapter, download_files, video_download_path
from utils.exceptions import LLMError, ReviewAbortedError, ScriptGenerationError
from utils.parsing import is_http_url

from .store import RunArtifactStore


logger = logging.getLogger(__name__)


class Reviewer(Protocol):
    def review(self, script: Optional[str]) -> ReviewDecision:
        ...


class PipelineOrchestrator:
    """Runs the four stages for one topic and records every step on disk."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        research_agent: Optional[ResearchAgent] = None,
        script_agent: Optional[ScriptAgent] = None,
        reviewer: Optional[Reviewer] = None,
        voice_agent: Optional[VoiceAgent] = None,
        video_adapter: Optional[BaseVideoAdapter] = None,
        store: Optional[RunArtifactStore] = None,
        max_revisions: Optional[int] = None,
        download: Optional[bool] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.research_agent = research_agent or ResearchAgent(
            settings=self.settings.research, composio_settings=self.settings.composio
        )
        self.script_agent = script_agent or ScriptAgent()
        self.reviewer = reviewer or ConsoleReviewer()
        self.voice_agent = voice_agent or VoiceAgent(
            settings=self.settings.voice, composio_settings=self.settings.composio
        )
        self.video_adapter = video_adapter or HeyGenAdapter(
            settings=self.settings.video, composio_settings=self.settings.composio
        )
        self.store = store or RunArtifactStore(self.settings.output.runs_dir)
        self.max_revisions = max(1, int(max_revisions or self.settings.pipeline.max_revisions))
        self.download = self.settings.output.download_enabled if download is None else bool(download)

    async def run(self, topic: str) -> PipelineState:
        state = PipelineState(topic=(topic or "").strip() or self.settings.pipeline.default_topic)
        state.run_id = self.store.create_run()
        logger.info(f"Run {state.run_id} started for topic: {state.topic}")

        try:
            await self._research(state)
            await self._script_and_review(state)
            await self._audio(state)
            await self._video(state)
        except Exception as exc:
            state.errors.append(str(exc))
            state.advance(StageName.FAILED)
            self.store.save_state(state)
            logger.error(f"Run {state.run_id} failed: {exc}")
            raise

        state.advance(StageName.COMPLETED)
        self.store.save_state(state)
        logger.info(f"Run {state.run_id} completed")
        return state

    async def _research(self, state: PipelineState) -> None:
        state.advance(StageName.RESEARCH)
        state.research = await self.research_agent.run(state.topic)
        self.store.save_research(state.run_id, state.research)
        self.store.save_state(state)

    async def _script_and_review(self, state: PipelineState) -> None:
        for revision in range(1, self.max_revisions + 1):
            state.advance(StageName.SCRIPTING)
            try:
                state.script = await self.script_agent.run(state)
            except (ScriptGenerationError, LLMError) as exc:
                if state.research is None:
                    raise
                logger.error(f"Script draft {revision} failed: {exc}")
                state.errors.append(str(exc))
                state.script = None

            state.advance(StageName.REVIEW)
            decision = self.reviewer.review(state.script)
            draft = ScriptRevision(
                revision=revision,
                script=state.script or "",
                approved=decision.approved,
                feedback=decision.feedback,
            )
            state.revisions.append(draft)
            if state.script:
                self.store.save_script(state.run_id, draft)

            if decision.approved:
                logger.info("Script approved! Proceeding...")
                state.feedback = None
                self.store.save_state(state)
                return

            state.feedback = decision.feedback
            logger.info(f"Feedback recorded: {state.feedback}")
            self.store.save_state(state)

        raise ReviewAbortedError(
            f"No script approved after {self.max_revisions} drafts",
            {"last_feedback": state.feedback},
        )

    async def _audio(self, state: PipelineState) -> None:
        if not state.script:
            logger.warning("No script available, skipping audio generation")
            return
        state.advance(StageName.AUDIO)
        state.audio_url = await self.voice_agent.run(state.script)
        self.store.save_state(state)

    async def _video(self, state: PipelineState) -> None:
        if not is_http_url(state.audio_url):
            logger.warning("No valid audio URL found, skipping video generation")
            return
        state.advance(StageName.VIDEO)
        result = await self.video_adapter.generate(state.audio_url)
        logger.info(f"Video URL: {result.video_url}")

        # persist the remote render before the download can fail
        state.video = result
        self.store.save_result(state.run_id, result)
        self.store.save_state(state)

        if self.download:
            state.video = await self._download(result)
            self.store.save_result(state.run_id, state.video)
            self.store.save_state(state)

    async def _download(self, result: VideoResult) -> VideoResult:
        output = self.settings.output
        target = video_download_path(output.download_dir)
        logger.info(f"Downloading video to {target}...")
        saved = await download_files(
            [(result.video_url, target)],
            timeout_s=output.download_timeout_s,
        )
        path: Path = saved[result.video_url]
        logger.info(f"Video saved to: {path}")
        return result.model_copy(update={"saved_path": str(path)})


def build_orchestrator(
    *,
    auto_approve: bool = False,
    download: Optional[bool] = None,
    max_revisions: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> PipelineOrchestrator:
    """Orchestrator wired with the default agents for CLI use."""
    reviewer: Reviewer = AutoApproveReviewer() if auto_approve else ConsoleReviewer()
    return PipelineOrchestrator(
        settings=settings,
        reviewer=reviewer,
        download=download,
        max_revisions=max_revisions,
    )
