# The module is to define the API router for the application.
# Date: 2026-10-17
# Version: 0.1.0

from fastapi import APIRouter
from switchboard.api.v1.endpoints import agents, chat

api_router = APIRouter()

# Include the chat router with a '/chat' prefix
api_router.include_router(chat.router, prefix="/chat", tags=["Conversation"])

# Include the agents router with an '/agents' prefix
api_router.include_router(agents.router, prefix="/agents", tags=["Agents"])
