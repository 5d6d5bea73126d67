"""
Gemini Chatbot - FastAPI backend

Streams Gemini chat exchanges (with local tool calls) to a single-page client.
"""

from contextlib import asynccontextmanager
from pathlib import Path
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import runtime_config
from errors import ChatbotError, error_response
from logging_config import setup_logging
from routers import chat
from tools.registry import ToolCategory, ToolRegistry, register_all_tools

setup_logging(runtime_config.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    register_all_tools()
    for category in ToolCategory:
        names = [t.name for t in ToolRegistry.get_tools_by_category(category)]
        if names:
            logger.info(f"Tools registered ({category.value}): {', '.join(names)}")

    if not runtime_config.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set - chat requests will fail until it is configured")
    logger.info(f"Runtime config: {runtime_config.to_dict()}")

    yield

    logger.info("Shutting down")


app = FastAPI(
    title="Gemini Chatbot",
    description="Streaming Gemini chat with local tools",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ChatbotError)
async def chatbot_error_handler(request: Request, exc: ChatbotError):
    """Errors raised before a response stream starts."""
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=400, content=error_response(exc))


app.include_router(chat.router, tags=["chat"])


@app.get("/api/health")
async def health():
    """Health check - reports configuration, no upstream call."""
    return {
        "status": "ok",
        "model": runtime_config.default_model,
        "api_key_configured": bool(runtime_config.gemini_api_key),
        "tools": list(ToolRegistry.get_all_tools()),
    }


# Static client last so API routes take precedence
_static_dir = Path(runtime_config.static_dir)
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
else:
    logger.warning(f"Static directory not found: {_static_dir} - client not served")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=runtime_config.host, port=runtime_config.port)
