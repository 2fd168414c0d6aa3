"""CLI entrypoint for the shortform video pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from config import get_settings
from intelligence.agents import ResearchAgent
from integrations import get_broker
from orchestrator import build_orchestrator
from render import HeyGenAdapter
from utils.exceptions import ShortformError
from utils.logger import get_logger, setup_logger


def _print(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Shortform Studio CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run research, script review, audio and video")
    run.add_argument("--topic", default=settings.pipeline.default_topic)
    run.add_argument("--auto-approve", action="store_true", help="Approve every valid draft")
    run.add_argument("--no-download", action="store_true", help="Keep the video remote")
    run.add_argument("--max-revisions", type=int, default=None)

    research = sub.add_parser("research", help="Run only the research stage")
    research.add_argument("--topic", default=settings.pipeline.default_topic)

    render = sub.add_parser("render", help="Render an avatar video from a public audio URL")
    render.add_argument("--audio-url", required=True)

    connection = sub.add_parser("connection", help="Show the active connection for a toolkit")
    connection.add_argument("--toolkit", required=True)

    return parser


async def _dispatch(args: argparse.Namespace) -> Dict[str, Any]:
    settings = get_settings()

    if args.command == "run":
        orchestrator = build_orchestrator(
            auto_approve=args.auto_approve,
            download=False if args.no_download else None,
            max_revisions=args.max_revisions,
            settings=settings,
        )
        state = await orchestrator.run(args.topic)
        return {
            "run_id": state.run_id,
            "stage": state.stage.value,
            "script": state.script,
            "audio_url": state.audio_url,
            "video": state.video.model_dump() if state.video else None,
            "output_dir": str(orchestrator.store.run_dir(state.run_id)),
        }

    if args.command == "research":
        agent = ResearchAgent(settings=settings.research, composio_settings=settings.composio)
        research = await agent.run(args.topic)
        return research.model_dump(mode="json")

    if args.command == "render":
        adapter = HeyGenAdapter(settings=settings.video, composio_settings=settings.composio)
        result = await adapter.generate(args.audio_url)
        return result.model_dump()

    if args.command == "connection":
        toolkit = str(args.toolkit).strip().lower()
        connection_id = get_broker().get_active_connection_id(
            toolkit,
            settings.composio.auth_config_for(toolkit),
            newest_first=True,
        )
        return {"toolkit": toolkit, "connection_id": connection_id}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger()

    try:
        get_settings().validate_required()
        payload = asyncio.run(_dispatch(args))
    except ShortformError as exc:
        logger.error(str(exc))
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    _print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
