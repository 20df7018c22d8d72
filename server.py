"""
FastAPI Server for the Yojana Assistant
Provides the health check and chat endpoints
"""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yojana_assistant import __version__
from yojana_assistant.config import settings, setup_logging
from yojana_assistant.agent import ChatAgent, ChatProcessingError
from yojana_assistant.llm import LLMClientFactory
from yojana_assistant.memory import InMemorySessionStore, SessionSweeper
from yojana_assistant.schemas import ChatRequest, ChatResponse, ErrorResponse
from yojana_assistant.tools import create_scheme_source_from_settings

logger = logging.getLogger("yojana_assistant.server")


# Initialize FastAPI app
app = FastAPI(
    title="Divyang Portal Yojana Assistant",
    description="Chat assistant for Divyang Portal login, registration and yojana queries",
    version=__version__
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_origin_regex=settings.allowed_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global components
session_store = InMemorySessionStore.from_settings()
sweeper = SessionSweeper(session_store, interval_seconds=settings.session_sweep_seconds)
_agent: Optional[ChatAgent] = None


def get_agent() -> ChatAgent:
    """Build the chat agent on first use"""
    global _agent
    if _agent is None:
        _agent = ChatAgent(
            llm_client=LLMClientFactory.create_from_settings(),
            scheme_source=create_scheme_source_from_settings(),
            session_store=session_store
        )
    return _agent


def _error_body(message: str) -> dict:
    return ChatResponse(message=message).to_wire()


@app.on_event("startup")
async def startup_event():
    setup_logging()
    sweeper.start()
    logger.info("Server running on port %s", settings.port)


@app.on_event("shutdown")
async def shutdown_event():
    await sweeper.stop()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content=_error_body("Internal server error"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message="Invalid request", errors=errors).model_dump()
    )


# REST Endpoints
@app.get("/api/health")
async def health():
    """Health check endpoint"""
    return {"ok": True}


@app.post("/api/chat")
async def chat(request: ChatRequest, agent: ChatAgent = Depends(get_agent)):
    """Main chat endpoint"""
    try:
        response = await agent.handle(request)
        return response.to_wire()
    except ChatProcessingError as e:
        return JSONResponse(status_code=500, content=_error_body(e.apology))
    except Exception:
        logger.exception("Unhandled error in /api/chat")
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))


def run_server():
    """Run the FastAPI server"""
    import uvicorn
    uvicorn.run(
        "server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run_server()
