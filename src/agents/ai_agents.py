"""
AI Financial Advisor for Family Ledger

DESIGN DECISION: The advisor is a boundary, not part of the core.
It reads a summary snapshot and returns text. It never touches the
ledger and it never raises: failures become a fixed apology string.

CRITICAL BOUNDARIES:
- CAN: Comment on the totals and the category breakdown it is given
- CANNOT: See individual transactions beyond the summary
- CANNOT: Change any data

The LLM is a COMMENTATOR on numbers computed deterministically by
the aggregator. It does not compute totals itself.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Sequence

import google.generativeai as genai

from src.config import GeminiSettings, get_settings
from src.log import get_logger
from src.models.ledger import Category, TransactionType
from src.models.summary import FinancialSummary


NOT_CONFIGURED_MESSAGE = (
    "The financial advisor is not configured. "
    "Set the GEMINI_API_KEY environment variable to enable it."
)
APOLOGY_MESSAGE = (
    "Sorry, something went wrong while analysing your finances. "
    "Check your connection or try again later."
)
EMPTY_RESPONSE_MESSAGE = "It wasn't possible to generate an analysis right now."

SYSTEM_INSTRUCTION = (
    "You are a personal financial assistant focused on helping "
    "families prosper financially."
)


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


class AdvisorInterface(ABC):
    """Summarize-and-advise port. Implementations must never raise."""

    @abstractmethod
    async def generate_insights(
        self,
        summary: FinancialSummary,
        categories: Sequence[Category],
        month_label: str,
    ) -> str:
        pass


class GeminiFinancialAdvisor(AdvisorInterface):
    """
    Narrative monthly analysis using Gemini.

    RESPONSIBILITIES:
    - Assess the month's financial health
    - Point out the largest spending areas
    - Give three practical tips for next month
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._logger = get_logger(__name__)
        self._model = None
        if self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
            system_instruction=SYSTEM_INSTRUCTION,
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    def build_prompt(
        self,
        summary: FinancialSummary,
        categories: Sequence[Category],
        month_label: str,
    ) -> str:
        """The prompt sent to the model. Public so it can be inspected."""
        category_lines = "\n".join(
            f"- {c.name}: {_money(c.value)}" for c in summary.by_category
        ) or "- No expenses recorded"

        income_categories = ", ".join(
            c.name for c in categories if c.type == TransactionType.INCOME
        ) or "none"

        return f"""You are an expert, empathetic family finance advisor.
Analyse the financial data below for {month_label}.

Summary (planned, all transactions):
- Total income: {_money(summary.total_income)}
- Total expenses: {_money(summary.total_expense)}
- Balance: {_money(summary.balance)}

Realized (completed transactions only):
- Income received: {_money(summary.realized_income)}
- Expenses paid: {_money(summary.realized_expense)}
- Balance: {_money(summary.realized_balance)}

Spending by category:
{category_lines}

Income sources tracked: {income_categories}

Please provide:
1. A brief analysis of this month's financial health.
2. Where the biggest expenses are.
3. Three practical, actionable tips to save or invest better next month.

If the balance is negative, be encouraging but firm about the need to cut back.
If it is positive, suggest how to invest the surplus.
Keep the answer concise and use Markdown formatting."""

    async def generate_insights(
        self,
        summary: FinancialSummary,
        categories: Sequence[Category],
        month_label: str,
    ) -> str:
        if not self.is_configured:
            return NOT_CONFIGURED_MESSAGE

        prompt = self.build_prompt(summary, categories, month_label)
        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            self._logger.error(
                "advisor_request_failed",
                error=str(e),
                model=self._settings.model_name,
                month=month_label,
            )
            return APOLOGY_MESSAGE

        if not text:
            return EMPTY_RESPONSE_MESSAGE

        self._logger.info("advisor_insights_generated", month=month_label, chars=len(text))
        return text
