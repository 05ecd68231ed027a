# The module is to define the static catalog of agents the orchestrator routes to.
# Date: 2026-10-17
# Version: 0.1.0

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict

from switchboard.core.tool_registry import ExecutableFunction, ToolRegistry, tool_registry
from switchboard.models.common import ToolDeclaration


class AgentId(str, Enum):
    GENERALIST = "generalist"
    RESEARCHER = "researcher"
    ANALYST = "analyst"
    CODER = "coder"
    CAR_SPECIALIST = "car_specialist"


DEFAULT_AGENT_ID = AgentId.GENERALIST


class Agent(BaseModel):
    """
    A named configuration of instruction text and permitted tools for one LLM session.
    Attributes:
        id (AgentId): The agent's identity.
        display_name (str): Human-facing name.
        description (str): Routing hint shown to the orchestrator.
        system_instruction (str): The system prompt of the agent's sessions.
        tool_declarations (Tuple[ToolDeclaration, ...]): Tools the model is told about.
        executable_functions (Mapping[str, ExecutableFunction]): Tool name to async implementation.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: AgentId
    display_name: str
    description: str
    system_instruction: str
    tool_declarations: Tuple[ToolDeclaration, ...] = ()
    executable_functions: Mapping[str, ExecutableFunction] = MappingProxyType({})

    @property
    def tool_names(self) -> Tuple[str, ...]:
        return tuple(declaration.name for declaration in self.tool_declarations)


_PROFILES = {
    AgentId.GENERALIST: {
        "display_name": "Assistant",
        "description": "For casual conversation, greetings, creative writing, or anything that doesn't fit the others.",
        "system_instruction": "You are a helpful and concise AI assistant. Answer user questions directly.",
        "tools": (),
    },
    AgentId.RESEARCHER: {
        "display_name": "Researcher",
        "description": "For questions about current events, news, facts requiring web search.",
        "system_instruction": (
            "You are a researcher. You have access to a web search tool. Always provide up-to-date "
            "information, news, or facts when asked, and cite the sources you used."
        ),
        "tools": ("search_web",),
    },
    AgentId.ANALYST: {
        "display_name": "Analyst",
        "description": "For math problems, calculations, logic puzzles involving numbers.",
        "system_instruction": (
            "You are a data analyst and mathematician. You MUST use the calculator tool for ANY "
            "arithmetic or math problem to ensure 100% precision. Do not calculate mentally."
        ),
        "tools": ("calculator",),
    },
    AgentId.CODER: {
        "display_name": "Engineer",
        "description": "For writing code, debugging, explaining programming concepts, or software architecture.",
        "system_instruction": (
            "You are a senior software engineer. Write clean, performant, and well-documented code. "
            "When providing code snippets, use the appropriate markdown language tags. Prefer modern best practices."
        ),
        "tools": (),
    },
    AgentId.CAR_SPECIALIST: {
        "display_name": "Auto Expert",
        "description": (
            "For queries related to buying cars, searching for vehicles, checking car prices, or specific "
            'car models (e.g. "Find me a Renault Clio", "Price of BMW").'
        ),
        "system_instruction": (
            "You are a helpful car sales assistant. You have access to a tool to search for real cars for "
            "sale in France. When finding cars, ALWAYS display the image for each car using markdown "
            "`![Title](imageUrl)`. Present the details (Title, Price, Mileage, Year, Location) in a clean, "
            "structured list or table below each image. If the results are labelled as demonstration data, "
            "say so. Be helpful and suggest relevant options."
        ),
        "tools": ("search_cars",),
    },
}


def build_agents(registry: ToolRegistry) -> Mapping[AgentId, Agent]:
    """Creates the read-only agent table, resolving each agent's tools against the registry."""
    agents: Dict[AgentId, Agent] = {}
    for agent_id in AgentId:
        profile = _PROFILES[agent_id]
        tool_names = profile["tools"]
        agents[agent_id] = Agent(
            id=agent_id,
            display_name=profile["display_name"],
            description=profile["description"],
            system_instruction=profile["system_instruction"],
            tool_declarations=tuple(registry.get_declarations(tool_names)),
            executable_functions=MappingProxyType({name: registry.bind(name) for name in tool_names}),
        )
    return MappingProxyType(agents)


AGENTS = build_agents(tool_registry)


def get_agent(agent_id: Union[AgentId, str]) -> Agent:
    """Total over AgentId. Any other value is a programming error and raises ValueError."""
    return AGENTS[AgentId(agent_id)]
