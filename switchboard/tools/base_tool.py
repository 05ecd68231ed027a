# The module is to define the base class for all tools in the application.
# Date: 2026-10-17
# Version: 0.1.0

from abc import ABC, abstractmethod
from pydantic import BaseModel
from typing import Any, Type

from switchboard.models.common import ToolDeclaration


class BaseTool(ABC):
    """
    Abstract Base Class for all tools.

    This class defines a standard interface that all tools must implement.
    Attributes:
        name (str): The name of the tool, used for identification.
        description (str): A brief description of what the tool does.
        args_schema (Type[BaseModel]): A Pydantic model defining the arguments
            that the tool accepts, which will be validated before execution.
    """
    name: str
    description: str
    args_schema: Type[BaseModel]

    @abstractmethod
    async def execute(self, **kwargs) -> Any:
        """
        The core logic of the tool. This method must be implemented by all subclasses.

        Args:
            **kwargs: The arguments for the tool, validated against args_schema.

        Returns:
            A JSON-serialisable value describing the result.

        Raises:
            ToolExecutionError: When the input is rejected or the work cannot be done.
        """

    def get_declaration(self) -> ToolDeclaration:
        """Returns the declaration the model sees for this tool."""
        return ToolDeclaration(
            name=self.name,
            description=self.description,
            parameters=self.args_schema.model_json_schema(),
        )
