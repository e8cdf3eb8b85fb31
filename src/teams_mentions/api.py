"""
FastAPI backend for composing and sending Teams messages with @mentions.

Provides REST endpoints for:
- Composing a message body with Teams mention markup
- Sending messages to channels and chats
- Searching users and suggesting mentions
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Annotated, Any, Literal

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from teams_mentions import __version__
from teams_mentions.composer import ComposedMessage, compose_message
from teams_mentions.config import ConfigurationError, GraphConfig
from teams_mentions.graph.client import GraphClient, GraphError
from teams_mentions.graph.directory import UserDirectory, UserInfo
from teams_mentions.graph.messages import (
    send_channel_message,
    send_channel_reply,
    send_chat_message,
)
from teams_mentions.mentions.parser import parse_mentions
from teams_mentions.mentions.validation import MalformedMentionError, MentionInputList

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Teams Mentions API")
    yield
    logger.info("Shutting down Teams Mentions API")


app = FastAPI(
    title="Teams Mentions API",
    description="API for composing Microsoft Teams messages with user and channel @mentions",
    version=__version__,
    lifespan=lifespan,
)


# ============== Dependencies ==============


def get_graph_config() -> GraphConfig:
    """Graph settings from the environment."""
    return GraphConfig.from_env()


def get_graph_transport() -> httpx.AsyncBaseTransport | None:
    """Transport override hook; None means the real network."""
    return None


GraphConfigDep = Annotated[GraphConfig, Depends(get_graph_config)]
GraphTransportDep = Annotated[httpx.AsyncBaseTransport | None, Depends(get_graph_transport)]


# ============== Error Handlers ==============


@app.exception_handler(MalformedMentionError)
async def malformed_mention_handler(request: Request, exc: MalformedMentionError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "mention": exc.mention})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(GraphError)
async def graph_error_handler(request: Request, exc: GraphError):
    logger.warning(f"Graph request failed: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "graph_status": exc.status_code},
    )


# ============== Request/Response Models ==============


class MessageRequest(BaseModel):
    """Request model for composing or sending a message."""

    message: str = Field(..., description="Message content")
    format: Literal["text", "markdown"] = Field("text", description="Message format (text or markdown)")
    importance: Literal["normal", "high", "urgent"] = Field("normal", description="Message importance")
    mentions: MentionInputList | None = Field(
        None,
        description="Array of mentions - each must specify either userId (for user mentions) or channelId (for channel mentions)",
    )


class ComposeRequest(MessageRequest):
    """Request model for the compose endpoint."""

    resolve_names: bool = Field(
        False, description="Look up user display names in Microsoft Graph"
    )


class MentionWarningInfo(BaseModel):
    mention: str
    kind: str
    message: str


class ComposeResponse(BaseModel):
    """Response model for the compose endpoint."""

    content: str = Field(..., description="Message body with <at> mention markup")
    content_type: str = Field(..., description="Body content type (text or html)")
    importance: str
    mentions: list[dict[str, Any]] = Field(default_factory=list, description="Graph mention records")
    warnings: list[MentionWarningInfo] = Field(default_factory=list)
    payload: dict[str, Any] = Field(..., description="Graph chatMessage request body")


class SendMessageResponse(BaseModel):
    """Response model for the send endpoints."""

    id: str = Field(..., description="Id of the created message")
    web_url: str | None = None
    mentions: list[str] = Field(default_factory=list, description="Mention texts included")
    warnings: list[MentionWarningInfo] = Field(default_factory=list)


class UserInfoModel(BaseModel):
    id: str
    display_name: str
    user_principal_name: str | None = None


class UserSearchResponse(BaseModel):
    users: list[UserInfoModel]
    total: int


class ParseMentionsRequest(BaseModel):
    text: str = Field(..., description="Message text containing @mentions")


class MentionCandidatesModel(BaseModel):
    mention: str
    users: list[UserInfoModel] = Field(default_factory=list)


class ParseMentionsResponse(BaseModel):
    mentions: list[MentionCandidatesModel]


def _user_model(user: UserInfo) -> UserInfoModel:
    return UserInfoModel(
        id=user.id,
        display_name=user.display_name,
        user_principal_name=user.user_principal_name,
    )


def _warning_models(message: ComposedMessage) -> list[MentionWarningInfo]:
    return [
        MentionWarningInfo(mention=w.mention, kind=w.kind, message=w.message)
        for w in message.warnings
    ]


async def _compose_with_directory(
    request: MessageRequest,
    client: GraphClient,
    allow_channel_mentions: bool = True,
) -> ComposedMessage:
    return await compose_message(
        request.message,
        format=request.format,
        importance=request.importance,
        mentions=list(request.mentions or []),
        directory=UserDirectory(client),
        allow_channel_mentions=allow_channel_mentions,
        timeout=client.config.timeout,
        max_concurrent=client.config.max_concurrent_lookups,
    )


# ============== API Endpoints ==============


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "teams-mentions-api"}


@app.post("/api/messages/compose", response_model=ComposeResponse)
async def compose(request: ComposeRequest, config: GraphConfigDep, transport: GraphTransportDep):
    """
    Compose a message body with Teams mention markup without sending it.

    User display names are only looked up when ``resolve_names`` is set;
    otherwise the mention text is used.
    """
    if request.resolve_names:
        async with GraphClient(config, transport=transport) as client:
            composed = await _compose_with_directory(request, client)
    else:
        composed = await compose_message(
            request.message,
            format=request.format,
            importance=request.importance,
            mentions=list(request.mentions or []),
        )

    return ComposeResponse(
        content=composed.content,
        content_type=composed.content_type,
        importance=composed.importance,
        mentions=[m.to_graph() for m in composed.mentions],
        warnings=_warning_models(composed),
        payload=composed.to_payload(),
    )


@app.post(
    "/api/teams/{team_id}/channels/{channel_id}/messages",
    response_model=SendMessageResponse,
)
async def send_to_channel(
    team_id: str,
    channel_id: str,
    request: MessageRequest,
    config: GraphConfigDep,
    transport: GraphTransportDep,
):
    """Send a message to a team channel. Supports user and channel mentions."""
    async with GraphClient(config, transport=transport) as client:
        composed = await _compose_with_directory(request, client)
        sent = await send_channel_message(client, team_id, channel_id, composed)

    return SendMessageResponse(
        id=sent.id,
        web_url=sent.web_url,
        mentions=[m.mention_text for m in composed.mentions],
        warnings=_warning_models(composed),
    )


@app.post(
    "/api/teams/{team_id}/channels/{channel_id}/messages/{message_id}/replies",
    response_model=SendMessageResponse,
)
async def reply_to_channel_message(
    team_id: str,
    channel_id: str,
    message_id: str,
    request: MessageRequest,
    config: GraphConfigDep,
    transport: GraphTransportDep,
):
    """Reply to a channel message. Supports user and channel mentions."""
    async with GraphClient(config, transport=transport) as client:
        composed = await _compose_with_directory(request, client)
        sent = await send_channel_reply(client, team_id, channel_id, message_id, composed)

    return SendMessageResponse(
        id=sent.id,
        web_url=sent.web_url,
        mentions=[m.mention_text for m in composed.mentions],
        warnings=_warning_models(composed),
    )


@app.post("/api/chats/{chat_id}/messages", response_model=SendMessageResponse)
async def send_to_chat(
    chat_id: str,
    request: MessageRequest,
    config: GraphConfigDep,
    transport: GraphTransportDep,
):
    """Send a message to a chat. Only user mentions are supported in chats."""
    async with GraphClient(config, transport=transport) as client:
        composed = await _compose_with_directory(request, client, allow_channel_mentions=False)
        sent = await send_chat_message(client, chat_id, composed)

    return SendMessageResponse(
        id=sent.id,
        web_url=sent.web_url,
        mentions=[m.mention_text for m in composed.mentions],
        warnings=_warning_models(composed),
    )


@app.get("/api/users/search", response_model=UserSearchResponse)
async def search_users(
    config: GraphConfigDep,
    transport: GraphTransportDep,
    q: Annotated[str, Query(min_length=1, description="Name or email prefix")],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
):
    """Search users by display name or email prefix."""
    async with GraphClient(config, transport=transport) as client:
        users = await UserDirectory(client).search_users(q, limit)

    return UserSearchResponse(users=[_user_model(u) for u in users], total=len(users))


@app.post("/api/mentions/parse", response_model=ParseMentionsResponse)
async def parse_message_mentions(
    request: ParseMentionsRequest,
    config: GraphConfigDep,
    transport: GraphTransportDep,
):
    """Find @mentions in text and suggest matching users for each."""
    async with GraphClient(config, transport=transport) as client:
        candidates = await parse_mentions(request.text, UserDirectory(client))

    return ParseMentionsResponse(
        mentions=[
            MentionCandidatesModel(
                mention=c.mention,
                users=[_user_model(u) for u in c.users],
            )
            for c in candidates
        ]
    )


# ============== Server Entry Point ==============


def main():
    """Run the API server."""
    import uvicorn

    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("API_PORT", "8000"))
    reload = os.environ.get("API_RELOAD", "false").lower() == "true"

    print(f"Starting Teams Mentions API on http://{host}:{port}")
    print(f"API Documentation: http://{host}:{port}/docs")

    uvicorn.run(
        "teams_mentions.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
