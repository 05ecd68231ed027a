# The module is to define the orchestrator that routes each user turn to an agent.
# Date: 2026-10-17
# Version: 0.1.0

from typing import Optional, Sequence, Union

from switchboard.core.agents import AGENTS, DEFAULT_AGENT_ID, AgentId
from switchboard.core.config import get_settings
from switchboard.models.common import Turn
from switchboard.services.llm_connector import ModelProvider, get_provider
from switchboard.utils.logger import console

ORCHESTRATOR_PROMPT = """You are the Orchestrator. Your job is to route the user's request to the best specialized agent.

Agents:
{agent_descriptions}
{recent_context}
User Request: "{user_message}"
"""

EXCERPT_LENGTH = 200


def _recent_context(prior_turns: Sequence[Turn], limit: int) -> str:
    if limit <= 0:
        return ""
    lines = []
    for turn in list(prior_turns)[-limit:]:
        text = " ".join(turn.content.split())
        if len(text) > EXCERPT_LENGTH:
            text = text[:EXCERPT_LENGTH] + "..."
        if text:
            lines.append(f"- {turn.role}: {text}")
    if not lines:
        return ""
    return "\nRecent conversation:\n" + "\n".join(lines) + "\n"


def build_routing_prompt(user_message: str, prior_turns: Sequence[Turn] = ()) -> str:
    """Builds the classification prompt from the catalog's routing descriptions."""
    agent_descriptions = "\n".join(f"- {agent.id.value}: {agent.description}" for agent in AGENTS.values())
    return ORCHESTRATOR_PROMPT.format(
        agent_descriptions=agent_descriptions,
        recent_context=_recent_context(prior_turns, get_settings().ROUTER_HISTORY_TURNS),
        user_message=user_message,
    )


async def select_agent(
    user_message: str,
    prior_turns: Sequence[Turn],
    manual_override: Optional[Union[AgentId, str]] = None,
    provider: Optional[ModelProvider] = None,
) -> AgentId:
    """
    Resolves the agent for a user turn.

    A manual override is returned as-is without contacting the model. Otherwise a
    single classification request picks one of the catalog's ids. Routing is best
    effort: any failure falls back to the default agent and is never raised.
    """
    if manual_override:
        return AgentId(manual_override)

    try:
        provider = provider or get_provider()
        prompt = build_routing_prompt(user_message, prior_turns)
        choice = await provider.classify(prompt, [agent_id.value for agent_id in AgentId])
        agent_id = AgentId(choice)
    except Exception as e:
        console.warning(f"Orchestration failed, defaulting to '{DEFAULT_AGENT_ID.value}': {e}")
        return DEFAULT_AGENT_ID

    console.info(f"Orchestrator routed the request to '{agent_id.value}'.")
    return agent_id
