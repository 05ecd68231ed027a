# The module is to define the configuration settings for the application.
# Date: 2026-10-17
# Version: 0.1.0

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    """
    The Settings class is used to define the configuration settings for the application.
    It inherits from BaseSettings, which allows it to load environment variables
    and provides type validation for the settings.
    Attributes:
        LLM_PROVIDER (str): The name of the LLM provider to use for agent sessions.
        <PROVIDER>_API_KEY / _MODEL / _BASE_URL: Credentials and endpoint of each
            OpenAI-compatible provider (CHATGPT, CLAUDE, GEMINI, DEEPSEEK_CHAT, DEEPSEEK_REASONER).
        ROUTER_MODEL (str): Model used for the routing classification. Defaults to the provider model.
        ROUTER_HISTORY_TURNS (int): How many recent turns are quoted in the routing prompt.
        MAX_TOOL_ROUNDS (int): Upper bound on tool-calling rounds within one turn.
        ROUND_TIMEOUT_SECONDS (float): Wall-clock limit for each streaming or tool phase. None disables it.
        TAVILY_API_KEY (str): API key for the Tavily web search tool.
        CAR_SEARCH_API_URL (str): Endpoint of the car listings search API.
        CAR_SEARCH_TIMEOUT_SECONDS (float): HTTP timeout for the car listings search.
        LOG_LEVEL (str): Level of the application logger.
    """
    # LLM Provider Switch
    LLM_PROVIDER: str = "GEMINI"

    # CHATGPT
    CHATGPT_API_KEY: Optional[str] = None
    CHATGPT_MODEL: str = "gpt-4o-mini"
    CHATGPT_BASE_URL: str = "https://api.openai.com/v1"

    # Claude
    CLAUDE_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-5"
    CLAUDE_BASE_URL: str = "https://api.anthropic.com/v1/"

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"

    # DEEPSEEK_CHAT
    DEEPSEEK_CHAT_API_KEY: Optional[str] = None
    DEEPSEEK_CHAT_MODEL: str = "deepseek-chat"
    DEEPSEEK_CHAT_BASE_URL: str = "https://api.deepseek.com"

    # DEEPSEEK_REASONER
    DEEPSEEK_REASONER_API_KEY: Optional[str] = None
    DEEPSEEK_REASONER_MODEL: str = "deepseek-reasoner"
    DEEPSEEK_REASONER_BASE_URL: str = "https://api.deepseek.com"

    # Routing
    ROUTER_MODEL: Optional[str] = None
    ROUTER_HISTORY_TURNS: int = 4

    # Turn execution
    MAX_TOOL_ROUNDS: int = 10
    ROUND_TIMEOUT_SECONDS: Optional[float] = 120.0

    # TAVILY_SEARCH
    TAVILY_API_KEY: Optional[str] = None

    # CAR_SEARCH_SERVICE
    CAR_SEARCH_API_URL: str = "https://api.iautos.fr/api/v1/cars/search"
    CAR_SEARCH_TIMEOUT_SECONDS: float = 15.0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"

# lru_cache to cache the settings instance.
@lru_cache
def get_settings():
    return Settings()
