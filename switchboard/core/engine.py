# The module is to define the turn execution engine. It streams model output into a placeholder
# turn and runs the tool-calling loop until the model answers without pending calls.
# Date: 2026-10-17
# Version: 0.1.0

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from switchboard.core.agents import Agent, AgentId, get_agent
from switchboard.core.config import Settings, get_settings
from switchboard.core.exceptions import TurnNotFoundError
from switchboard.core.orchestrator import select_agent
from switchboard.models.common import CallResult, Chunk, FunctionCall, Part, ToolResult, Turn
from switchboard.services.conversation_store import ConversationStore
from switchboard.services.llm_connector import ModelProvider, ModelSession, get_provider
from switchboard.utils.logger import console

ERROR_NOTICE = "[Error generating response. Please try again.]"
MAX_ROUNDS_NOTICE = "[Stopped after {rounds} tool rounds without a final answer.]"

T = TypeVar("T")


class TurnState(str, Enum):
    ROUTING = "routing"
    STREAMING = "streaming"
    TOOL_PENDING = "tool_pending"
    TOOL_EXECUTING = "tool_executing"
    FINALIZED = "finalized"
    ERRORED = "errored"


class RoundAccumulator(BaseModel):
    """Text and distinct tool calls collected while one round streams."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    calls: Tuple[FunctionCall, ...] = ()


def apply_chunk(accumulator: RoundAccumulator, chunk: Chunk) -> RoundAccumulator:
    """
    Folds one chunk into the round state. Calls are keyed by id: a repeated id
    merges its arguments into the first occurrence and keeps its position.
    """
    calls = list(accumulator.calls)
    positions = {call.id: index for index, call in enumerate(calls)}
    for call in chunk.function_calls:
        if call.id in positions:
            existing = calls[positions[call.id]]
            calls[positions[call.id]] = existing.model_copy(
                update={"arguments": {**existing.arguments, **call.arguments}}
            )
        else:
            positions[call.id] = len(calls)
            calls.append(call)
    return RoundAccumulator(text=accumulator.text + (chunk.text or ""), calls=tuple(calls))


class TurnOutcome(BaseModel):
    """Summary of one engine invocation."""
    turn_id: str
    agent_id: AgentId
    state: TurnState = TurnState.ROUTING
    rounds: int = 0
    call_results: List[CallResult] = Field(default_factory=list)
    cancelled: bool = False


def _is_cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class TurnEngine:
    """
    Runs one conversation turn at a time: routing, streaming, tool execution and
    finalization. The placeholder turn always ends with is_streaming set to False.
    """

    def __init__(
        self,
        store: ConversationStore,
        provider: Optional[ModelProvider] = None,
        agent_lookup: Callable[[AgentId], Agent] = get_agent,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self._store = store
        self._provider = provider or get_provider()
        self._agent_lookup = agent_lookup
        self._max_tool_rounds = settings.MAX_TOOL_ROUNDS
        self._round_timeout = settings.ROUND_TIMEOUT_SECONDS

    async def append(
        self,
        user_turn: Turn,
        manual_override: Optional[Union[AgentId, str]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> TurnOutcome:
        """Adds the user turn to the conversation and produces the model's answer to it."""
        if manual_override:
            manual_override = AgentId(manual_override)
        history = [turn for turn in self._store.list() if not turn.is_streaming]
        self._store.append(user_turn)

        agent_id = await select_agent(user_turn.content, history, manual_override, provider=self._provider)
        agent = self._agent_lookup(agent_id)

        placeholder = self._store.append(Turn(role="model", is_streaming=True, agent_id=agent_id.value))
        outcome = TurnOutcome(turn_id=placeholder.id, agent_id=agent_id)
        console.routed(agent.display_name, "manual" if manual_override else "automatic")

        try:
            await self._run_rounds(agent, history, user_turn, placeholder.id, outcome, cancel_event)
            outcome.state = TurnState.FINALIZED
        except TurnNotFoundError:
            # The conversation was cleared under the running turn.
            console.warning(f"Turn {placeholder.id} was removed from the conversation; stopping it.")
            outcome.cancelled = True
            outcome.state = TurnState.FINALIZED
        except Exception as e:
            console.exception(f"Turn {placeholder.id} failed while in state '{outcome.state.value}'.")
            console.display_error_panel("Turn failed", f"{type(e).__name__}: {e}")
            outcome.state = TurnState.ERRORED
            self._append_notice(placeholder.id, ERROR_NOTICE)
        finally:
            self._finalize(placeholder.id)

        if outcome.state is TurnState.FINALIZED:
            console.success(f"Turn {placeholder.id} finalized after {outcome.rounds} round(s).")
        return outcome

    async def _run_rounds(
        self,
        agent: Agent,
        history: Sequence[Turn],
        user_turn: Turn,
        turn_id: str,
        outcome: TurnOutcome,
        cancel_event: Optional[asyncio.Event],
    ):
        session = self._provider.create_session(
            agent.system_instruction,
            agent.tool_declarations,
            [turn.to_content() for turn in history],
        )
        parts = user_turn.to_parts()

        while True:
            outcome.rounds += 1
            outcome.state = TurnState.STREAMING
            console.rule(f"Round {outcome.rounds} ({agent.id.value})")

            accumulator = await self._bounded(self._stream_round(session, parts, turn_id, cancel_event))
            if _is_cancelled(cancel_event):
                console.warning(f"Turn {turn_id} was cancelled.")
                outcome.cancelled = True
                return
            if not accumulator.calls:
                return

            outcome.state = TurnState.TOOL_PENDING
            if outcome.rounds >= self._max_tool_rounds:
                console.warning(f"Turn {turn_id} reached the limit of {self._max_tool_rounds} tool rounds.")
                self._append_notice(turn_id, MAX_ROUNDS_NOTICE.format(rounds=outcome.rounds))
                return

            outcome.state = TurnState.TOOL_EXECUTING
            results = await self._bounded(self._execute_calls(agent, accumulator.calls))
            outcome.call_results.extend(results)
            parts = [result.to_part() for result in results]

    async def _stream_round(
        self,
        session: ModelSession,
        parts: List[Part],
        turn_id: str,
        cancel_event: Optional[asyncio.Event],
    ) -> RoundAccumulator:
        accumulator = RoundAccumulator()
        stream = session.send_streaming(parts)
        try:
            async for chunk in stream:
                accumulator = apply_chunk(accumulator, chunk)
                if chunk.text:
                    self._store.append_content(turn_id, chunk.text)
                if _is_cancelled(cancel_event):
                    break
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        return accumulator

    async def _execute_calls(self, agent: Agent, calls: Sequence[FunctionCall]) -> List[CallResult]:
        """Runs every call of the round concurrently; the round completes as a whole."""
        console.info(f"Executing {len(calls)} tool call(s): {[call.name for call in calls]}")
        results = list(await asyncio.gather(*(self._execute_call(agent, call) for call in calls)))
        console.tool_results(
            (r.call_id, r.tool_name, r.result.ok, str(r.result.value if r.result.ok else r.result.error))
            for r in results
        )
        return results

    async def _execute_call(self, agent: Agent, call: FunctionCall) -> CallResult:
        function = agent.executable_functions.get(call.name)
        if function is None:
            console.warning(f"Agent '{agent.id.value}' has no tool named '{call.name}'.")
            result = ToolResult.failure(f"Tool '{call.name}' is not available to this agent.")
        else:
            try:
                result = await function(call.arguments)
                if not isinstance(result, ToolResult):
                    result = ToolResult.success(result)
            except Exception as e:
                console.exception(f"Error executing tool '{call.name}'")
                result = ToolResult.failure(str(e) or type(e).__name__)
        return CallResult(call_id=call.id, tool_name=call.name, result=result)

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        if self._round_timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self._round_timeout)

    def _append_notice(self, turn_id: str, notice: str):
        try:
            current = self._store.get(turn_id)
            separator = "\n\n" if current.content else ""
            self._store.append_content(turn_id, separator + notice)
        except TurnNotFoundError:
            console.warning(f"Turn {turn_id} disappeared before the notice could be added.")

    def _finalize(self, turn_id: str):
        try:
            self._store.finalize(turn_id)
        except TurnNotFoundError:
            console.warning(f"Turn {turn_id} disappeared before it could be finalized.")
