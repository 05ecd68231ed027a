# The module is to define the API endpoints for the agent catalog and manual routing.
# Date: 2026-10-17
# Version: 0.1.0

from fastapi import APIRouter, Depends, HTTPException

from switchboard.core.agents import AGENTS
from switchboard.core.chat import ChatSession, get_chat_session
from switchboard.models.api_models import AgentInfo, AgentOverrideRequest, AgentsResponse

router = APIRouter()


def _agents_response(session: ChatSession) -> AgentsResponse:
    return AgentsResponse(
        agents=[
            AgentInfo(
                id=agent.id.value,
                display_name=agent.display_name,
                description=agent.description,
                tools=list(agent.tool_names),
            )
            for agent in AGENTS.values()
        ],
        active_agent_id=session.active_agent_id.value,
        manual_agent_id=session.manual_agent_id.value if session.manual_agent_id else None,
    )


@router.get("/", response_model=AgentsResponse)
def list_agents(session: ChatSession = Depends(get_chat_session)):
    """Lists the agents and shows which one is active."""
    return _agents_response(session)


@router.put("/override", response_model=AgentsResponse)
def set_agent_override(request: AgentOverrideRequest, session: ChatSession = Depends(get_chat_session)):
    """Forces an agent for the following turns, or returns to automatic routing with null."""
    try:
        session.set_agent(request.agent_id)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown agent: {request.agent_id}")
    return _agents_response(session)
