"""FastAPI backend for the Local Network Hub."""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.background import BackgroundTask

from dotenv import load_dotenv

load_dotenv()

from hub import upstream
from hub.auth import CredentialVerifier
from hub.backup import create_backup, restore_backup
from hub.categories import CategoryManager
from hub.config import ConfigRegistry
from hub.errors import HubError, ValidationError, require_fields
from hub.links import LinkManager
from hub.models import to_json
from hub.projects import PROJECTS_DIR_NAME, NotesRepository
from hub.store import DATA_DIR, DATA_FILE_NAME, DocumentStore

PUBLIC_DIR = Path(os.getenv("HUB_PUBLIC_DIR", Path(__file__).resolve().parent.parent / "public"))

logger = logging.getLogger(__name__)


# ── Wiring ────────────────────────────────────────────────────────────────


@dataclass
class Hub:
    store: DocumentStore
    categories: CategoryManager
    links: LinkManager
    config: ConfigRegistry
    notes: NotesRepository
    verifier: CredentialVerifier


def build_hub(
    data_dir: Path | None = None,
    verifier: CredentialVerifier | None = None,
    status_checker: Callable[..., bool] | None = None,
) -> Hub:
    """Load the document from data_dir and wire every manager to it."""
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
    store = DocumentStore(data_dir / DATA_FILE_NAME)
    store.load()
    return Hub(
        store=store,
        categories=CategoryManager(store),
        links=LinkManager(store, status_checker),
        config=ConfigRegistry(store),
        notes=NotesRepository(data_dir / PROJECTS_DIR_NAME),
        verifier=verifier or CredentialVerifier.from_env(),
    )


def get_hub(request: Request) -> Hub:
    return request.app.state.hub


def _ok(**data) -> dict:
    return {"success": True, **data}


def _fail(message: str) -> dict:
    return {"success": False, "error": message}


router = APIRouter(prefix="/api")


# ── Schemas ───────────────────────────────────────────────────────────────
# Field names follow the JSON the browser client sends.


class LoginRequest(BaseModel):
    password: Optional[str] = None


class LinkRequest(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    categoryId: Any = None


class StatusRequest(BaseModel):
    url: Optional[str] = None


class CategoryRequest(BaseModel):
    name: Optional[str] = None


class PrivacyRequest(BaseModel):
    private: bool = False


class CategoryOrderEntry(BaseModel):
    id: int
    order: int


class ReorderRequest(BaseModel):
    categoryOrder: Optional[list[CategoryOrderEntry]] = None


class MessageRequest(BaseModel):
    message: Optional[str] = None


class TitleRequest(BaseModel):
    title: Optional[str] = None


class ChatConfigRequest(BaseModel):
    provider: Optional[str] = None
    apiUrl: Optional[str] = None
    chatflowId: Optional[str] = None
    ollamaBaseUrl: Optional[str] = None
    ollamaModel: Optional[str] = None


class FilterConfigRequest(BaseModel):
    enabled: bool = False
    keyword: Optional[str] = None


class ColorConfigRequest(BaseModel):
    primaryColor: Optional[str] = None


class ProjectRequest(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None


# ── Authentication ────────────────────────────────────────────────────────


@router.post("/admin/login")
def api_login(req: LoginRequest, hub: Hub = Depends(get_hub)):
    require_fields({"password": req.password})
    try:
        valid = hub.verifier.verify(req.password)
    except ValueError as e:
        logger.error("login error: %s", e)
        raise HubError("Server error during login") from e
    return {"success": valid}


# ── Links ─────────────────────────────────────────────────────────────────


@router.get("/links")
def api_list_links(hub: Hub = Depends(get_hub)):
    return _ok(links=[to_json(l) for l in hub.links.list()])


@router.post("/links")
def api_create_link(req: LinkRequest, hub: Hub = Depends(get_hub)):
    link = hub.links.create(req.name, req.url, req.categoryId)
    return _ok(link=to_json(link))


@router.put("/links/{link_id}")
def api_update_link(link_id: int, req: LinkRequest, hub: Hub = Depends(get_hub)):
    link = hub.links.update(link_id, req.name, req.url, req.categoryId)
    return _ok(link=to_json(link))


@router.delete("/links/{link_id}")
def api_delete_link(link_id: int, hub: Hub = Depends(get_hub)):
    hub.links.delete(link_id)
    return _ok()


@router.post("/status/{link_id}")
def api_link_status(link_id: int, req: StatusRequest, hub: Hub = Depends(get_hub)):
    """Check the url from the body; link_id only identifies the caller's row."""
    return _ok(online=hub.links.check_status(req.url))


# ── Categories ────────────────────────────────────────────────────────────


@router.get("/categories")
def api_list_categories(hub: Hub = Depends(get_hub)):
    return _ok(categories=[to_json(c) for c in hub.categories.list()])


@router.post("/categories")
def api_create_category(req: CategoryRequest, hub: Hub = Depends(get_hub)):
    return _ok(category=to_json(hub.categories.create(req.name)))


@router.post("/categories/reorder")
def api_reorder_categories(req: ReorderRequest, hub: Hub = Depends(get_hub)):
    require_fields({"categoryOrder": req.categoryOrder})
    cats = hub.categories.reorder((e.id, e.order) for e in req.categoryOrder)
    return _ok(categories=[to_json(c) for c in cats])


@router.delete("/categories/{cat_id}")
def api_delete_category(cat_id: int, hub: Hub = Depends(get_hub)):
    hub.categories.delete(cat_id)
    return _ok()


@router.patch("/categories/{cat_id}/privacy")
def api_set_category_privacy(cat_id: int, req: PrivacyRequest, hub: Hub = Depends(get_hub)):
    return _ok(category=to_json(hub.categories.set_privacy(cat_id, req.private)))


# ── Configuration ─────────────────────────────────────────────────────────


@router.get("/homepage-message")
def api_get_homepage_message(hub: Hub = Depends(get_hub)):
    return _ok(message=hub.config.get("homepageMessage"))


@router.post("/homepage-message")
def api_set_homepage_message(req: MessageRequest, hub: Hub = Depends(get_hub)):
    return _ok(message=hub.config.set("homepageMessage", req.model_dump()))


@router.get("/site-title")
def api_get_site_title(hub: Hub = Depends(get_hub)):
    return _ok(title=hub.config.get("siteTitle"))


@router.post("/site-title")
def api_set_site_title(req: TitleRequest, hub: Hub = Depends(get_hub)):
    return _ok(title=hub.config.set("siteTitle", req.model_dump()))


@router.get("/chat-config")
def api_get_chat_config(hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.get("chatConfig")))


@router.post("/chat-config")
def api_set_chat_config(req: ChatConfigRequest, hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.set("chatConfig", req.model_dump())))


@router.get("/filter-config")
def api_get_filter_config(hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.get("filterConfig")))


@router.post("/filter-config")
def api_set_filter_config(req: FilterConfigRequest, hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.set("filterConfig", req.model_dump())))


@router.get("/color-config")
def api_get_color_config(hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.get("colorConfig")))


@router.post("/color-config")
def api_set_color_config(req: ColorConfigRequest, hub: Hub = Depends(get_hub)):
    return _ok(config=to_json(hub.config.set("colorConfig", req.model_dump())))


# ── Ollama proxy ──────────────────────────────────────────────────────────


@router.get("/ollama-models")
def api_ollama_models(base_url: Optional[str] = Query(None, alias="baseUrl"), hub: Hub = Depends(get_hub)):
    """List models; ?baseUrl= overrides the saved config (admin preview before save)."""
    base_url = base_url or hub.config.get("chatConfig").ollama_base_url
    if not base_url:
        raise ValidationError("Ollama base URL not configured")
    return _ok(models=upstream.fetch_ollama_models(base_url))


@router.post("/ollama-chat")
def api_ollama_chat(req: MessageRequest, hub: Hub = Depends(get_hub)):
    if not req.message or not req.message.strip():
        raise ValidationError("Message is required")
    chat = hub.config.get("chatConfig")
    if not chat.ollama_base_url or not chat.ollama_model:
        raise ValidationError("Ollama not configured")
    return upstream.ollama_chat(chat.ollama_base_url, chat.ollama_model, req.message)


# ── Media proxy ───────────────────────────────────────────────────────────


@router.get("/image-proxy")
def api_image_proxy(request: Request, url: Optional[str] = None):
    if not url:
        raise ValidationError("Missing media URL parameter")
    resp = upstream.open_media(url, request.headers.get("range"))

    headers = {"Cache-Control": "public, max-age=3600", "Accept-Ranges": "bytes"}
    for name in ("Content-Type", "Content-Range"):
        if name in resp.headers:
            headers[name] = resp.headers[name]
    # Content-Length only matches the decoded body when the upstream sent it uncompressed
    if "Content-Length" in resp.headers and "Content-Encoding" not in resp.headers:
        headers["Content-Length"] = resp.headers["Content-Length"]

    return StreamingResponse(
        resp.iter_content(chunk_size=upstream.MEDIA_CHUNK_SIZE),
        status_code=resp.status_code,
        headers=headers,
        background=BackgroundTask(resp.close),
    )


# ── Project files ─────────────────────────────────────────────────────────


@router.get("/projects")
def api_list_projects(hub: Hub = Depends(get_hub)):
    return _ok(files=hub.notes.list())


@router.get("/projects/{name}")
def api_read_project(name: str, hub: Hub = Depends(get_hub)):
    return _ok(content=hub.notes.read(name))


@router.post("/projects")
def api_save_project(req: ProjectRequest, hub: Hub = Depends(get_hub)):
    return _ok(file=hub.notes.write(req.name, req.content))


@router.delete("/projects/{name}")
def api_delete_project(name: str, hub: Hub = Depends(get_hub)):
    hub.notes.delete(name)
    return _ok()


# ── Backup & Restore ──────────────────────────────────────────────────────


@router.get("/backup")
def api_backup(hub: Hub = Depends(get_hub)):
    """Download a ZIP archive of the document and all project files."""
    zip_path = create_backup(hub.store, hub.notes)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return FileResponse(
        zip_path,
        filename=f"hub-backup-{ts}.zip",
        media_type="application/zip",
        background=BackgroundTask(zip_path.unlink, missing_ok=True),
    )


@router.post("/restore")
def api_restore(file: UploadFile, hub: Hub = Depends(get_hub)):
    """Restore from a backup ZIP, replacing the document and project files."""
    if not file.filename or not file.filename.endswith(".zip"):
        raise ValidationError("Please upload a .zip file")

    with tempfile.NamedTemporaryFile(delete=False, suffix=".zip") as tmp:
        shutil.copyfileobj(file.file, tmp)
        tmp_path = Path(tmp.name)

    try:
        summary = restore_backup(tmp_path, hub.store, hub.notes)
    finally:
        tmp_path.unlink(missing_ok=True)

    return _ok(restored=summary, message="Restore complete.")


# ── App ───────────────────────────────────────────────────────────────────


async def _hub_error_handler(request: Request, exc: HubError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_fail(exc.message))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
        problems.append(f"{where}: {err.get('msg')}")
    return JSONResponse(status_code=400, content=_fail(f"Invalid request: {'; '.join(problems)}"))


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=_fail("Server error during request"))


def create_app(hub: Hub | None = None) -> FastAPI:
    """Build the app; with no hub, load data from HUB_DATA_DIR."""
    app = FastAPI(title="Local Network Hub", version="1.0.0")
    app.state.hub = hub or build_hub()
    app.add_exception_handler(HubError, _hub_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)
    app.include_router(router)

    # Serve the browser client if it exists
    if PUBLIC_DIR.is_dir():
        app.mount("/", StaticFiles(directory=str(PUBLIC_DIR), html=True), name="static")

    logger.info("Current chat provider: %s", app.state.hub.config.get("chatConfig").provider)
    return app
