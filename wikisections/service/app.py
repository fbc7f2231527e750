"""FastAPI application exposing pages and their sections."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import WikiConfig, load_config
from ..editor import SectionEditOutcome, SectionEditor, SectionNotFoundError
from ..logging import get_logger
from ..models import Page, Section
from ..sections import build_outline
from ..stores import PageConflictError, PageExistsError, PageNotFoundError

_T = TypeVar("_T")


class HeadingModel(BaseModel):
    id: str
    title: str
    level: int
    anchor: str


class SectionModel(BaseModel):
    id: str
    title: str
    body: str
    last_modified: Optional[str] = None
    author: Optional[str] = None


class SectionDetailModel(SectionModel):
    outline: List[HeadingModel] = []


class PageModel(BaseModel):
    key: str
    content: str
    author: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    sections: List[SectionModel] = []


class PageSummaryModel(BaseModel):
    key: str
    author: Optional[str] = None
    updated_at: Optional[str] = None
    section_count: int


class CreatePageRequest(BaseModel):
    key: str
    content: str = ""
    author: Optional[str] = None


class UpdateBodyRequest(BaseModel):
    body: str
    author: Optional[str] = None
    fallback_title: Optional[str] = None


class RenameRequest(BaseModel):
    title: str
    author: Optional[str] = None


class AppendRequest(BaseModel):
    title: str
    author: Optional[str] = None


class ReorderRequest(BaseModel):
    section_ids: List[str]


class EditResponse(BaseModel):
    section_id: str
    changed: bool
    page: PageModel


class HealthResponse(BaseModel):
    status: str


def create_app(
    editor_factory: Optional[Callable[[], SectionEditor]] = None,
    config: Optional[WikiConfig] = None,
) -> FastAPI:
    """Create the FastAPI application serving section views and edits.

    Without ``editor_factory`` a single editor is built from ``config`` (or the
    ``.wikisections.yml`` of the working directory) and shared by all requests, so
    the per-page locks of its store apply across requests.
    """
    factory = editor_factory
    if factory is None:
        shared = SectionEditor.from_config(config or load_config(Path.cwd()))

        def _shared_editor() -> SectionEditor:
            return shared

        factory = _shared_editor

    logger = get_logger("service")
    app = FastAPI(title="Wiki Sections Service", version=__version__)

    async def get_editor() -> SectionEditor:
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/pages", response_model=List[PageSummaryModel])
    async def list_pages(
        editor: SectionEditor = Depends(get_editor),
    ) -> List[PageSummaryModel]:
        pages = await _run_blocking(editor.list_pages)
        return [
            PageSummaryModel(
                key=page.key,
                author=page.author,
                updated_at=page.updated_at,
                section_count=len(page.sections or []),
            )
            for page in pages
        ]

    @app.post("/pages", response_model=PageModel, status_code=201)
    async def create_page(
        payload: CreatePageRequest,
        editor: SectionEditor = Depends(get_editor),
    ) -> PageModel:
        page = await _run_blocking(
            lambda: editor.create_page(payload.key, payload.content, author=payload.author)
        )
        return _page_model(page)

    @app.get("/pages/{key}", response_model=PageModel)
    async def get_page(key: str, editor: SectionEditor = Depends(get_editor)) -> PageModel:
        page = await _run_blocking(lambda: editor.view(key))
        return _page_model(page)

    @app.get("/pages/{key}/sections", response_model=List[SectionModel])
    async def list_sections(
        key: str, editor: SectionEditor = Depends(get_editor)
    ) -> List[SectionModel]:
        page = await _run_blocking(lambda: editor.view(key))
        return [_section_model(section) for section in page.sections or []]

    @app.get("/pages/{key}/sections/{section_id}", response_model=SectionDetailModel)
    async def get_section(
        key: str, section_id: str, editor: SectionEditor = Depends(get_editor)
    ) -> SectionDetailModel:
        section = await _run_blocking(lambda: editor.get_section(key, section_id))
        outline = [
            HeadingModel(
                id=heading.id, title=heading.title, level=heading.level, anchor=heading.anchor
            )
            for heading in build_outline(section.body, f"{key}-{section.id}")
        ]
        return SectionDetailModel(**_section_model(section).model_dump(), outline=outline)

    @app.put("/pages/{key}/sections/{section_id}", response_model=EditResponse)
    async def update_section_body(
        key: str,
        section_id: str,
        payload: UpdateBodyRequest,
        editor: SectionEditor = Depends(get_editor),
    ) -> EditResponse:
        outcome = await _run_blocking(
            lambda: editor.update_body(
                key,
                section_id,
                payload.body,
                author=payload.author,
                fallback_title=payload.fallback_title,
            )
        )
        return _edit_response(outcome)

    @app.patch("/pages/{key}/sections/{section_id}", response_model=EditResponse)
    async def rename_section(
        key: str,
        section_id: str,
        payload: RenameRequest,
        editor: SectionEditor = Depends(get_editor),
    ) -> EditResponse:
        outcome = await _run_blocking(
            lambda: editor.rename(key, section_id, payload.title, author=payload.author)
        )
        return _edit_response(outcome)

    @app.post("/pages/{key}/sections", response_model=EditResponse, status_code=201)
    async def append_section(
        key: str,
        payload: AppendRequest,
        editor: SectionEditor = Depends(get_editor),
    ) -> EditResponse:
        outcome = await _run_blocking(
            lambda: editor.append(key, payload.title, author=payload.author)
        )
        return _edit_response(outcome)

    @app.delete("/pages/{key}/sections/{section_id}", response_model=EditResponse)
    async def remove_section(
        key: str,
        section_id: str,
        editor: SectionEditor = Depends(get_editor),
    ) -> EditResponse:
        outcome = await _run_blocking(lambda: editor.remove(key, section_id))
        return _edit_response(outcome)

    @app.put("/pages/{key}/order", response_model=PageModel)
    async def reorder_sections(
        key: str,
        payload: ReorderRequest,
        editor: SectionEditor = Depends(get_editor),
    ) -> PageModel:
        page = await _run_blocking(lambda: editor.reorder(key, payload.section_ids))
        return _page_model(page)

    @app.exception_handler(PageNotFoundError)
    async def page_not_found_handler(_: Any, exc: PageNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SectionNotFoundError)
    async def section_not_found_handler(_: Any, exc: SectionNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PageExistsError)
    async def page_exists_handler(_: Any, exc: PageExistsError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PageConflictError)
    async def conflict_handler(_: Any, exc: PageConflictError) -> JSONResponse:
        logger.warning("Rejected stale write: %s", exc)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, config: Optional[WikiConfig] = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def _section_model(section: Section) -> SectionModel:
    return SectionModel(
        id=section.id,
        title=section.title,
        body=section.body,
        last_modified=section.last_modified,
        author=section.author,
    )


def _page_model(page: Page) -> PageModel:
    return PageModel(
        key=page.key,
        content=page.content,
        author=page.author,
        created_at=page.created_at,
        updated_at=page.updated_at,
        sections=[_section_model(section) for section in page.sections or []],
    )


def _edit_response(outcome: SectionEditOutcome) -> EditResponse:
    return EditResponse(
        section_id=outcome.section_id,
        changed=outcome.changed,
        page=_page_model(outcome.page),
    )
