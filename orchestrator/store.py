"""On-disk artifact store for pipeline runs."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List
from uuid import uuid4

from core import PipelineState, ResearchData, ScriptRevision, VideoResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_run_id() -> str:
    return f"run_{_utcnow().strftime('%Y%m%d_%H%M%S')}_{uuid4().hex[:8]}"


class RunArtifactStore:
    """Writes one directory per run with state, research, drafts and result."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir).expanduser()
        self._lock = Lock()

    def create_run(self) -> str:
        with self._lock:
            run_id = _new_run_id()
            while (self.base_dir / run_id).exists():
                run_id = _new_run_id()
            (self.base_dir / run_id).mkdir(parents=True, exist_ok=False)
            return run_id

    def run_dir(self, run_id: str) -> Path:
        return self.base_dir / run_id

    def save_state(self, state: PipelineState) -> Path:
        return self._write_json(state.run_id, "state.json", state.model_dump(mode="json"))

    def save_research(self, run_id: str, research: ResearchData) -> Path:
        return self._write_json(run_id, "research.json", research.model_dump(mode="json"))

    def save_script(self, run_id: str, revision: ScriptRevision) -> Path:
        return self._write_text(run_id, f"script_v{revision.revision}.md", revision.script)

    def save_result(self, run_id: str, result: VideoResult) -> Path:
        return self._write_json(run_id, "result.json", result.model_dump(mode="json"))

    def list_artifacts(self, run_id: str) -> List[str]:
        path = self.run_dir(run_id)
        if not path.exists():
            return []
        return sorted(item.name for item in path.iterdir() if item.is_file() and not item.name.startswith("."))

    def load_state(self, run_id: str) -> PipelineState:
        raw = (self.run_dir(run_id) / "state.json").read_text(encoding="utf-8")
        return PipelineState.model_validate_json(raw)

    def _write_json(self, run_id: str, name: str, payload: Dict[str, Any]) -> Path:
        return self._write_text(run_id, name, json.dumps(payload, ensure_ascii=False, indent=2))

    def _write_text(self, run_id: str, name: str, text: str) -> Path:
        if not run_id:
            raise ValueError("run_id is required")
        directory = self.run_dir(run_id)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        tmp = directory / f".{name}.{uuid4().hex}.tmp"
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
        return path
