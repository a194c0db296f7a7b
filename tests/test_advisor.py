"""Tests for the financial advisor boundary (no real API calls)."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from src.agents import APOLOGY_MESSAGE, NOT_CONFIGURED_MESSAGE, GeminiFinancialAdvisor
from src.agents.ai_agents import EMPTY_RESPONSE_MESSAGE
from src.config import GeminiSettings
from src.models import CategoryTotal, FinancialSummary


class StubModel:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def summary():
    return FinancialSummary(
        total_income=Decimal("5000"),
        total_expense=Decimal("1234.5"),
        realized_income=Decimal("5000"),
        realized_expense=Decimal("1000"),
        by_category=[CategoryTotal(name="Food", value=Decimal("1234.5"), color="#f97316")],
    )


@pytest.fixture
def advisor():
    return GeminiFinancialAdvisor(GeminiSettings(api_key=None))


class TestGeminiFinancialAdvisor:

    @pytest.mark.asyncio
    async def test_without_key_returns_configuration_message(self, advisor, summary, categories):
        assert not advisor.is_configured
        assert await advisor.generate_insights(summary, categories, "March 2024") == NOT_CONFIGURED_MESSAGE

    def test_prompt_carries_the_numbers(self, advisor, summary, categories):
        prompt = advisor.build_prompt(summary, categories, "March 2024")
        assert "March 2024" in prompt
        assert "5,000.00" in prompt
        assert "1,234.50" in prompt
        assert "3,765.50" in prompt
        assert "- Food: 1,234.50" in prompt
        assert "Income sources tracked: Salary" in prompt

    def test_prompt_for_empty_month(self, advisor, categories):
        prompt = advisor.build_prompt(FinancialSummary(), categories, "April 2024")
        assert "- No expenses recorded" in prompt

    @pytest.mark.asyncio
    async def test_returns_model_text(self, advisor, summary, categories):
        advisor._model = StubModel(text="  **Healthy month.**  ")
        result = await advisor.generate_insights(summary, categories, "March 2024")
        assert result == "**Healthy month.**"
        assert "March 2024" in advisor._model.prompts[0]

    @pytest.mark.asyncio
    async def test_failure_becomes_apology(self, advisor, summary, categories):
        advisor._model = StubModel(error=RuntimeError("quota exceeded"))
        assert await advisor.generate_insights(summary, categories, "March 2024") == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_response(self, advisor, summary, categories):
        advisor._model = StubModel(text="")
        assert await advisor.generate_insights(summary, categories, "March 2024") == EMPTY_RESPONSE_MESSAGE
