"""HTTP query surface for the index registry.

Routes:
    GET    /health                              registry summary
    GET    /metrics                             Prometheus exposition
    GET    /indexes                             index names
    GET    /indexes/{name}/search               ?q=&fields=a,b&limit=&offset=&fuzzy=
    GET    /indexes/{name}/stats                404 when unknown
    POST   /indexes/{name}/documents            one document or a JSON list
    DELETE /indexes/{name}/documents/{doc_id}
    POST   /indexes/{name}/rebuild              optional JSON body: new IndexConfig
    GET    /indexes/{name}/export               404 when unknown
    PUT    /indexes/{name}/import               raw snapshot body

Search always answers 200, with an empty result list for unknown indexes.
Registry calls run in worker threads so a locked or rebuilding index never
stalls the event loop.

Usage:
    python -m search_indexing.app
"""

from __future__ import annotations

from functools import partial
import logging
from typing import Any

from anyio import to_thread
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from search_indexing.config import Settings
from search_indexing.defaults import create_default_registry
from search_indexing.errors import SearchIndexError
from search_indexing.observability.context import generate_span_id, set_trace_context
from search_indexing.observability.logging import configure_logging
from search_indexing.observability.metrics import get_metrics, get_metrics_content_type
from search_indexing.observability.tracing import init_tracing
from search_indexing.registry import IndexRegistry


logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


def _parse_int(raw: str | None, default: int, *, minimum: int = 0, maximum: int | None = None) -> int:
    if raw is None or raw == "":
        return default
    value = int(raw)
    if value < minimum:
        raise ValueError(f"must be >= {minimum}, got {value}")
    if maximum is not None:
        value = min(value, maximum)
    return value


def _bind_trace(request: Request) -> None:
    trace_id = request.headers.get("x-trace-id")
    if trace_id:
        set_trace_context(trace_id, generate_span_id())


def create_app(registry: IndexRegistry | None = None, settings: Settings | None = None) -> Starlette:
    """Create the ASGI application around ``registry``.

    Args:
        registry: Registry to serve; a default registry is built when omitted.
        settings: Settings for paging limits and defaults.
    """
    settings = settings or Settings()
    if registry is None:
        registry = create_default_registry(settings)

    def _health_sync() -> dict[str, Any]:
        indexes = {}
        for name in registry.get_index_names():
            stats = registry.get_index_stats(name)
            if stats is not None:
                indexes[name] = {"documents": stats.document_count, "terms": stats.term_count}
        return {"status": "healthy", "index_count": len(indexes), "indexes": indexes}

    async def health(_: Request) -> JSONResponse:
        return JSONResponse(await to_thread.run_sync(_health_sync))

    async def metrics(_: Request) -> Response:
        return Response(content=get_metrics(), media_type=get_metrics_content_type())

    async def list_indexes(_: Request) -> JSONResponse:
        return JSONResponse({"indexes": registry.get_index_names()})

    async def search(request: Request) -> JSONResponse:
        _bind_trace(request)
        name = request.path_params["name"]
        params = request.query_params
        try:
            limit = _parse_int(
                params.get("limit"), settings.default_search_limit, minimum=0, maximum=settings.max_search_limit
            )
            offset = _parse_int(params.get("offset"), 0)
        except ValueError as exc:
            return _error(f"Invalid paging parameter: {exc}", 400)

        fields_param = params.get("fields")
        fields = [f.strip() for f in fields_param.split(",") if f.strip()] if fields_param else None
        fuzzy = params.get("fuzzy", "false").lower() in _TRUE_VALUES
        query = params.get("q", "")

        # Lock waits and fuzzy scans block; keep them off the event loop.
        hits = await to_thread.run_sync(
            partial(registry.search_with_scores, name, query, fields=fields, limit=limit, offset=offset, fuzzy=fuzzy)
        )
        return JSONResponse(
            {
                "index": name,
                "query": query,
                "limit": limit,
                "offset": offset,
                "results": [
                    {"score": hit.score, "document": hit.document.model_dump(mode="json", by_alias=True)}
                    for hit in hits
                ],
            }
        )

    async def stats(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        index_stats = await to_thread.run_sync(registry.get_index_stats, name)
        if index_stats is None:
            return _error(f"Index '{name}' not found", 404)
        return JSONResponse(index_stats.model_dump(mode="json"))

    async def add_documents(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        if name not in registry:
            return _error(f"Index '{name}' not found", 404)
        try:
            body: Any = await request.json()
        except ValueError:
            return _error("Request body must be JSON", 400)
        documents = body if isinstance(body, list) else [body]
        try:
            await to_thread.run_sync(registry.add_documents, name, documents)
        except ValidationError as exc:
            return _error(f"Invalid document: {exc}", 400)
        return JSONResponse({"success": True, "indexed": len(documents)}, status_code=201)

    async def remove_document(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        if name not in registry:
            return _error(f"Index '{name}' not found", 404)
        await to_thread.run_sync(registry.remove_document, name, request.path_params["doc_id"])
        return JSONResponse({"success": True})

    async def rebuild(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        if name not in registry:
            return _error(f"Index '{name}' not found", 404)
        raw = await request.body()
        try:
            config = await request.json() if raw else None
            await to_thread.run_sync(registry.rebuild_index, name, config)
        except ValueError as exc:
            return _error(f"Rebuild rejected: {exc}", 400)
        return JSONResponse({"success": True})

    async def export(request: Request) -> Response:
        name = request.path_params["name"]
        payload = await to_thread.run_sync(registry.export_index, name)
        if payload is None:
            return _error(f"Index '{name}' not found", 404)
        return Response(content=payload, media_type="application/json")

    async def import_(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        body = await request.body()
        try:
            await to_thread.run_sync(registry.import_index, name, body)
        except SearchIndexError as exc:
            return _error(str(exc), 400)
        return JSONResponse({"success": True})

    routes = [
        Route("/health", endpoint=health, methods=["GET"]),
        Route("/metrics", endpoint=metrics, methods=["GET"]),
        Route("/indexes", endpoint=list_indexes, methods=["GET"]),
        Route("/indexes/{name}/search", endpoint=search, methods=["GET"]),
        Route("/indexes/{name}/stats", endpoint=stats, methods=["GET"]),
        Route("/indexes/{name}/documents", endpoint=add_documents, methods=["POST"]),
        Route("/indexes/{name}/documents/{doc_id}", endpoint=remove_document, methods=["DELETE"]),
        Route("/indexes/{name}/rebuild", endpoint=rebuild, methods=["POST"]),
        Route("/indexes/{name}/export", endpoint=export, methods=["GET"]),
        Route("/indexes/{name}/import", endpoint=import_, methods=["PUT"]),
    ]

    app = Starlette(debug=settings.log_level.lower() == "debug", routes=routes)
    app.state.registry = registry
    app.state.settings = settings
    return app


def main() -> None:
    """Run the HTTP surface under uvicorn."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level, json_output=settings.log_json, service_name=settings.service_name)
    init_tracing(settings.service_name)

    app = create_app(settings=settings)

    logger.info("Starting %s on %s:%d", settings.service_name, settings.http_host, settings.http_port)
    uvicorn.run(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Don't let uvicorn override our logging config
    )


if __name__ == "__main__":
    main()
