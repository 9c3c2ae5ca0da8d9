import copy
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import uvicorn
import yaml
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.second_brain.dashboard import daily_affirmation, overview
from src.second_brain.intent_responder import classify, effective_input
from src.second_brain.logging_setup import configure_logging, get_logger
from src.second_brain.models import RecordNotFound
from src.second_brain.notes import parse_tags
from src.second_brain.workspace import Workspace, store_from_config

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "default.yaml"

ENV_OVERRIDES = {
    "SECOND_BRAIN_PORT": ("port",),
    "SECOND_BRAIN_STORAGE_BACKEND": ("storage", "backend"),
    "SECOND_BRAIN_STORAGE_PATH": ("storage", "path"),
}


class AssistantReply(BaseModel):
    reply: str


class NoteDraft(BaseModel):
    title: str
    content: str
    tags: Union[List[str], str] = Field(default_factory=list)
    color: Optional[str] = None

    def tag_list(self) -> List[str]:
        return parse_tags(self.tags) if isinstance(self.tags, str) else [t.strip() for t in self.tags]


class TaskDraft(BaseModel):
    title: str
    notes: str = ""
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    priority: str = "medium"


class ReminderDraft(BaseModel):
    title: str
    scheduled_at: str = Field(alias="scheduledAt")
    channel: str = "push"
    notes: str = ""


class FileUpload(BaseModel):
    name: str
    size: int = 0
    type: Optional[str] = None
    data_url: str = Field(default="", alias="dataUrl")


class ChatRequest(BaseModel):
    message: str


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load config/default.yaml, overlay `path` (if given), then env overrides."""
    with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            cfg = _deep_merge(cfg, yaml.safe_load(f) or {})
    for env_name, cfg_path in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        target = cfg
        for part in cfg_path[:-1]:
            target = target.setdefault(part, {})
        target[cfg_path[-1]] = int(value) if cfg_path == ("port",) else value
    return cfg


def build_app(workspace: Workspace) -> FastAPI:
    log = get_logger("service")

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await workspace.hydrate()
        log.info("workspace_hydrated", keys=[c.key for c in workspace.containers])
        yield

    app = FastAPI(title="Aurora Second Brain", lifespan=lifespan)
    app.state.workspace = workspace

    @app.exception_handler(RecordNotFound)
    async def not_found(_request: Request, exc: RecordNotFound):
        return JSONResponse(status_code=404, content={"detail": f"Not found: {exc.args[0]}"})

    @app.exception_handler(ValueError)
    async def invalid(_request: Request, exc: ValueError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/health")
    async def health():
        return {"status": "ok", "hydrated": workspace.hydrated}

    @app.post("/api/ai", response_model=AssistantReply)
    async def assistant(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = None
        prompt = body.get("prompt") if isinstance(body, dict) else None
        result = classify(prompt)
        log.info("assistant_request", kind=result.kind, prompt_length=len(effective_input(prompt)))
        return AssistantReply(reply=result.reply)

    @app.get("/api/dashboard")
    async def dashboard():
        return {
            "affirmation": daily_affirmation(),
            "metrics": overview(
                workspace.notes.list(),
                workspace.tasks_state.read(),
                workspace.reminders_state.read(),
                workspace.files.list(),
            ),
        }

    # -------- Notes --------
    @app.get("/api/notes")
    async def list_notes(q: str = ""):
        return workspace.notes.search(q)

    @app.post("/api/notes", status_code=201)
    async def create_note(draft: NoteDraft):
        return workspace.notes.create(draft.title, draft.content, tags=draft.tag_list(), color=draft.color)

    @app.put("/api/notes/{note_id}")
    async def update_note(note_id: str, draft: NoteDraft):
        return workspace.notes.update(note_id, draft.title, draft.content, tags=draft.tag_list(), color=draft.color)

    @app.delete("/api/notes/{note_id}", status_code=204)
    async def delete_note(note_id: str):
        workspace.notes.delete(note_id)

    # -------- Tasks --------
    @app.get("/api/tasks")
    async def list_tasks(view: str = "all"):
        return {"tasks": workspace.tasks.list(view), "stats": workspace.tasks.stats()}

    @app.post("/api/tasks", status_code=201)
    async def create_task(draft: TaskDraft):
        return workspace.tasks.create(draft.title, notes=draft.notes, due_date=draft.due_date, priority=draft.priority)

    @app.post("/api/tasks/{task_id}/toggle")
    async def toggle_task(task_id: str):
        return workspace.tasks.toggle(task_id)

    @app.delete("/api/tasks/{task_id}", status_code=204)
    async def delete_task(task_id: str):
        workspace.tasks.delete(task_id)

    # -------- Reminders --------
    @app.get("/api/reminders")
    async def list_reminders(show_past: bool = False):
        return workspace.reminders.upcoming(show_past=show_past)

    @app.post("/api/reminders", status_code=201)
    async def create_reminder(draft: ReminderDraft):
        return workspace.reminders.create(draft.title, draft.scheduled_at, channel=draft.channel, notes=draft.notes)

    @app.delete("/api/reminders/{reminder_id}", status_code=204)
    async def delete_reminder(reminder_id: str):
        workspace.reminders.delete(reminder_id)

    # -------- Files --------
    @app.get("/api/files")
    async def list_files(q: str = "", type: str = "all"):
        return workspace.files.list(q, type)

    @app.post("/api/files", status_code=201)
    async def upload_file(upload: FileUpload):
        return workspace.files.add(upload.name, upload.size, mime_type=upload.type, data_url=upload.data_url)

    @app.delete("/api/files/{file_id}", status_code=204)
    async def delete_file(file_id: str):
        workspace.files.delete(file_id)

    # -------- Chat --------
    @app.get("/api/chat")
    async def chat_history():
        return workspace.chat.messages()

    @app.post("/api/chat")
    async def chat(body: ChatRequest):
        answer = workspace.chat.send(body.message)
        return {"reply": answer, "messages": workspace.chat.messages()}

    @app.delete("/api/chat", status_code=204)
    async def clear_chat():
        workspace.chat.clear()

    return app


def default_workspace_from_env(cfg: Optional[Dict[str, Any]] = None) -> Workspace:
    load_dotenv(".env.local")
    load_dotenv()
    cfg = cfg if cfg is not None else load_config(os.getenv("SECOND_BRAIN_CONFIG"))
    store = store_from_config(cfg.get("storage"))
    return Workspace(store)


def main():
    load_dotenv(".env.local")
    load_dotenv()
    cfg = load_config(os.getenv("SECOND_BRAIN_CONFIG"))
    configure_logging(cfg.get("log_file"))
    log = get_logger("service")
    app = build_app(default_workspace_from_env(cfg))
    host = cfg.get("host", "127.0.0.1")
    port = int(cfg.get("port", 8000))
    log.info("starting_service", host=host, port=port, storage=cfg.get("storage", {}).get("backend"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
