"""
Custom Pages API Server

FastAPI server exposing the custom pages use cases as a JSON API:
classify URLs, list pages, add, delete, restore, clear, move and save the
order.

Usage:
    python pages_server.py
    # or: python -m uvicorn pages_server:app --host 127.0.0.1 --port 8082

Environment variables:
    PAGES_SITES_DIR   - Directory with site YAML files (default: ./sites)
    PAGES_STORAGE_DIR - Directory for stored page lists
    PAGES_HOST / PAGES_PORT - Listen address (default: 127.0.0.1:8082)
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, field_validator

import pages_config
from classifiers import InvalidDomain, Valid
from page_models import CustomPage, Error, ErrorKind
from site_registry import SiteAdapter, SiteRegistry

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.DOMAIN_REJECTED: 400,
    ErrorKind.PATH_REJECTED: 400,
    ErrorKind.OUT_OF_RANGE: 400,
    ErrorKind.DUPLICATE_ENTRY: 409,
    ErrorKind.PERSISTENCE_FAILURE: 500,
}


# --- Request/Response models ---


class ClassifyRequest(BaseModel):
    url: str
    site: Optional[str] = None


class ClassifyResponse(BaseModel):
    site: Optional[str]
    status: str  # valid, invalid_domain, invalid_path
    path: Optional[str] = None
    label: Optional[str] = None


class AddPageRequest(BaseModel):
    url: str
    label: str = ""


class MovePageRequest(BaseModel):
    from_index: int
    to_index: int


class SaveOrderRequest(BaseModel):
    pages: list[CustomPage]

    @field_validator("pages")
    @classmethod
    def _paths_distinct(cls, pages: list[CustomPage]) -> list[CustomPage]:
        paths = [page.path for page in pages]
        if len(set(paths)) != len(paths):
            raise ValueError("page paths must be distinct")
        return pages


class RestorePageRequest(BaseModel):
    page: CustomPage
    index: int


class PagesResponse(BaseModel):
    site: str
    pages: list[CustomPage]


# --- Helpers ---


def _adapter(request: Request, site: str) -> SiteAdapter:
    registry: SiteRegistry = request.app.state.registry
    try:
        return registry.get(site)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown site: {site}")


def _respond(adapter: SiteAdapter, result) -> PagesResponse:
    if isinstance(result, Error):
        raise HTTPException(status_code=ERROR_STATUS[result.kind], detail=result.message)
    return PagesResponse(site=adapter.name, pages=result.data)


async def _current_pages(adapter: SiteAdapter) -> list[CustomPage]:
    result = await adapter.crud.load_pages()
    if isinstance(result, Error):
        raise HTTPException(status_code=ERROR_STATUS[result.kind], detail=result.message)
    return result.data


def create_app(registry: Optional[SiteRegistry] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        registry: Site registry to serve (None = load from pages_config at startup)
    """

    @asynccontextmanager
    async def lifespan(app):
        if registry is None:
            app.state.registry = SiteRegistry.from_directory(
                pages_config.SITES_DIR, pages_config.STORAGE_DIR
            )
        else:
            app.state.registry = registry
        yield

    app = FastAPI(
        title="Custom Pages API",
        description="Manage per-site custom navigation pages",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "sites": len(request.app.state.registry),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/sites")
    async def list_sites(request: Request):
        return [
            {"name": adapter.name, "domain": adapter.site.domain, "routes": len(adapter.site.routes)}
            for adapter in request.app.state.registry
        ]

    @app.post("/api/classify", response_model=ClassifyResponse)
    async def classify(req: ClassifyRequest, request: Request):
        """Classify a URL against one site, or against whichever site owns its host."""
        registry: SiteRegistry = request.app.state.registry
        if req.site:
            adapter = _adapter(request, req.site)
        else:
            adapter = registry.find_for_url(req.url)
            if adapter is None:
                return ClassifyResponse(site=None, status="invalid_domain")

        result = adapter.classifier.classify(req.url)
        if isinstance(result, Valid):
            return ClassifyResponse(site=adapter.name, status="valid", path=result.path, label=result.label)
        if isinstance(result, InvalidDomain):
            return ClassifyResponse(site=adapter.name, status="invalid_domain")
        return ClassifyResponse(site=adapter.name, status="invalid_path")

    @app.get("/api/sites/{site}/pages", response_model=PagesResponse)
    async def get_pages(site: str, request: Request):
        adapter = _adapter(request, site)
        return _respond(adapter, await adapter.crud.load_pages())

    @app.post("/api/sites/{site}/pages", response_model=PagesResponse)
    async def add_page(site: str, req: AddPageRequest, request: Request):
        adapter = _adapter(request, site)
        async with adapter.lock:
            pages = await _current_pages(adapter)
            result = await adapter.crud.add_page(req.url, req.label, pages)
        if isinstance(result, Error):
            logger.info(f"[{site}] Rejected {req.url}: {result.message}")
        return _respond(adapter, result)

    @app.delete("/api/sites/{site}/pages/{index}", response_model=PagesResponse)
    async def delete_page(site: str, index: int, request: Request):
        adapter = _adapter(request, site)
        async with adapter.lock:
            pages = await _current_pages(adapter)
            result = await adapter.crud.delete_page(index, pages)
        return _respond(adapter, result)

    @app.delete("/api/sites/{site}/pages", response_model=PagesResponse)
    async def clear_pages(site: str, request: Request):
        adapter = _adapter(request, site)
        async with adapter.lock:
            result = await adapter.crud.clear_all()
        return _respond(adapter, result)

    @app.post("/api/sites/{site}/pages/move", response_model=PagesResponse)
    async def move_page(site: str, req: MovePageRequest, request: Request):
        adapter = _adapter(request, site)
        async with adapter.lock:
            pages = await _current_pages(adapter)
            result = await adapter.order.reorder_pages(req.from_index, req.to_index, pages)
        return _respond(adapter, result)

    @app.put("/api/sites/{site}/pages", response_model=PagesResponse)
    async def save_order(site: str, req: SaveOrderRequest, request: Request):
        adapter = _adapter(request, site)
        async with adapter.lock:
            result = await adapter.order.save_order(req.pages)
        return _respond(adapter, result)

    @app.post("/api/sites/{site}/pages/restore", response_model=PagesResponse)
    async def restore_page(site: str, req: RestorePageRequest, request: Request):
        """Undo a delete: put the page back near its old index."""
        adapter = _adapter(request, site)
        async with adapter.lock:
            pages = await _current_pages(adapter)
            result = await adapter.order.restore_page(req.page, req.index, pages)
        return _respond(adapter, result)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=pages_config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    )
    uvicorn.run(app, host=pages_config.HOST, port=pages_config.PORT)
