# The module is to define the SearchWebTool that uses the Tavily AI Search API.
# Date: 2026-10-17
# Version: 0.1.0

import asyncio
from pydantic import BaseModel, Field
from typing import Dict, Optional, Type

from tavily import TavilyClient

from .base_tool import BaseTool
from switchboard.core.config import get_settings
from switchboard.utils.logger import console

MAX_RESULTS = 5
UNAVAILABLE_NOTICE = (
    "Note: Live web search is unavailable right now (demonstration notice). "
    "No live results were retrieved; answer from existing knowledge and tell the user "
    "that the information may not be up to date."
)


class SearchWebInput(BaseModel):
    """
    Input model for the SearchWebTool.
    Attributes:
        query (str): The search query to look up on the web.
    """
    query: str = Field(..., description="The search query to look up on the web. Be specific and descriptive.")


class SearchWebTool(BaseTool):
    """
    Uses the Tavily AI Search API to find up-to-date information. When no API key is
    configured or the search fails, a labelled notice is returned instead of an error.
    """
    name: str = "search_web"
    description: str = "Searches the web for a given query to find up-to-date information, news and facts."
    args_schema: Type[BaseModel] = SearchWebInput

    _tavily_client: Optional[TavilyClient]

    def __init__(self, client: Optional[TavilyClient] = None):
        settings = get_settings()
        if client is None and settings.TAVILY_API_KEY:
            client = TavilyClient(api_key=settings.TAVILY_API_KEY)
        self._tavily_client = client

    async def execute(self, query: str) -> str:
        console.info(f"Executing tool '{self.name}' with query: '{query}'")
        if self._tavily_client is None:
            console.warning("TAVILY_API_KEY is not set. Returning the search unavailable notice.")
            return UNAVAILABLE_NOTICE

        try:
            # The Tavily client is synchronous; keep the event loop free while it runs.
            response = await asyncio.to_thread(
                self._tavily_client.search,
                query=query,
                search_depth="advanced",
                max_results=MAX_RESULTS,
            )
        except Exception as e:
            console.warning(f"Tavily search failed for query '{query}': {e!r}. Returning the search unavailable notice.")
            return UNAVAILABLE_NOTICE

        console.success(f"Tool '{self.name}' executed successfully.")
        return self._format_results(response)

    def _format_results(self, response: Dict) -> str:
        """
        Formats the JSON response from Tavily into a string.
        """
        results = response.get("results", [])
        if not results:
            return "No search results found."

        formatted_string = ""
        for result in results:
            formatted_string += f"Title: {result.get('title', 'N/A')}\n"
            formatted_string += f"URL: {result.get('url', 'N/A')}\n"
            formatted_string += f"Content Snippet: {result.get('content', 'N/A')}\n---\n"

        return formatted_string.strip()
