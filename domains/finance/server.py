"""
Finance Engine HTTP Server — JSON API over the dispatch router.

Endpoints:
- GET  /health  liveness + catalogue size
- GET  /tools   tool descriptors (name, description, input_schema, required)
- POST /invoke  {tool, arguments} → ToolResponse envelope

Failures of a tool call are returned as failure envelopes with HTTP 200;
the envelope status is the outcome.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from domains.finance.config import (
    ENGINE_NAME,
    ENGINE_VERSION,
    load_enabled_tools,
    load_retriever_settings,
)
from domains.finance.router import ToolRouter, build_router
from shared.models import InvocationRequest, ToolDescriptor, ToolResponse

logger = logging.getLogger("finance_server")


def create_app(router: ToolRouter | None = None) -> FastAPI:
    """Build the FastAPI app; without a router one is assembled from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Finance Engine HTTP server...")
        if getattr(app.state, "router", None) is None:
            app.state.router = build_router(
                retriever_settings=load_retriever_settings(),
                enabled_tools=load_enabled_tools(),
            )
        yield
        logger.info("Shutting down Finance Engine HTTP server...")

    app = FastAPI(title="Finance Engine", version=ENGINE_VERSION, lifespan=lifespan)
    app.state.router = router

    def _router(request: Request) -> ToolRouter:
        current = request.app.state.router
        if current is None:
            raise HTTPException(status_code=503, detail="Router not initialized")
        return current

    @app.get("/health")
    def health(request: Request) -> dict:
        return {
            "status": "ok",
            "service": ENGINE_NAME,
            "version": ENGINE_VERSION,
            "tools": len(_router(request).catalog),
        }

    @app.get("/tools", response_model=list[ToolDescriptor])
    def list_tools(request: Request) -> list[ToolDescriptor]:
        return _router(request).list_tools()

    @app.post("/invoke", response_model=ToolResponse)
    async def invoke(invocation: InvocationRequest, request: Request) -> ToolResponse:
        return await _router(request).dispatch(invocation.tool, invocation.arguments)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from domains.finance.config import load_server_settings

    settings = load_server_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
