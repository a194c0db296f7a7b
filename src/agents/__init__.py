"""AI Agents package."""

from src.agents.ai_agents import (
    APOLOGY_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    AdvisorInterface,
    GeminiFinancialAdvisor,
)

__all__ = [
    "APOLOGY_MESSAGE",
    "NOT_CONFIGURED_MESSAGE",
    "AdvisorInterface",
    "GeminiFinancialAdvisor",
]
