# The module is to define the error taxonomy shared by the orchestration layer.
# Date: 2026-10-17
# Version: 0.1.0


class SwitchboardError(Exception):
    """Base class for all errors raised by Switchboard."""


class RoutingError(SwitchboardError):
    """The routing classification failed or returned an unusable value."""


class ToolExecutionError(SwitchboardError):
    """A tool rejected its input or could not complete."""


class StreamError(SwitchboardError):
    """The model provider failed while opening or consuming a stream."""


class TurnNotFoundError(SwitchboardError, KeyError):
    """No turn with the requested id exists in the conversation store."""


class TurnFinalizedError(SwitchboardError):
    """A finalized turn was asked to change."""


class TurnInProgressError(SwitchboardError):
    """A new turn was submitted while another one is still running."""
