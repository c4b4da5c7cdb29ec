"""Tests for the rule-based advice dispatcher."""

import asyncio
import random

import pytest

from finova.agents import (
    TERM_RULES,
    AdviceDispatcher,
    AnswerKind,
    RuleBasedAssistant,
    extract_topic,
)
from finova.agents import knowledge
from finova.models.finance import Demographic, DemographicType, FinancialData, User
from finova.models.insights import AdviceContext, ResponseSource


@pytest.fixture
def dispatcher():
    return AdviceDispatcher(rng=random.Random(7))


@pytest.fixture
def student_ctx(snapshot):
    student = User(
        email="sam@example.com",
        full_name="Sam Lee",
        demographic=Demographic(type=DemographicType.STUDENT),
    )
    return AdviceContext.build(student, snapshot)


class TestTotality:
    """The dispatcher answers everything."""

    @pytest.mark.parametrize("message", ["", "   ", "qwerty", "?", "!!!", None, "what is"])
    def test_always_answers(self, dispatcher, ctx, message):
        result = dispatcher.dispatch(message, ctx)
        assert result.content.strip()

    def test_unknown_text_asks_for_detail(self, dispatcher, ctx):
        result = dispatcher.dispatch("this is nice", ctx)
        assert result.kind == AnswerKind.GENERAL
        assert "Could you be more specific?" in result.content


class TestTermTable:
    """First match in declared order wins."""

    def test_mutual_fund(self, dispatcher, ctx):
        result = dispatcher.dispatch("I want to open a mutual fund", ctx)
        assert result.rule == "mutual fund"
        assert result.content == knowledge.explain_mutual_fund(ctx)

    def test_term_matches_at_word_start_only(self, dispatcher, ctx):
        """Test "rd" does not fire inside "card"."""
        result = dispatcher.dispatch("tell me about my credit card", ctx)
        assert result.rule == "credit card"

    def test_declared_order(self, dispatcher, ctx):
        """Test "insurance" is listed before "life insurance"."""
        result = dispatcher.dispatch("life insurance", ctx)
        assert result.rule == "insurance"

    def test_term_table_is_large(self):
        assert len(TERM_RULES) > 50

    def test_tax_uses_real_figures(self, dispatcher, ctx):
        result = dispatcher.dispatch("tax planning", ctx)
        assert "As a professional" in result.content

    def test_debt_uses_real_figures(self, dispatcher, ctx):
        result = dispatcher.dispatch("debt", ctx)
        assert "$1,500.00 available monthly" in result.content


class TestTopicExtraction:
    """Tests for "what is X" handling."""

    def test_extract_topic(self):
        assert extract_topic("what is a hedge fund?") == "hedge fund"
        assert extract_topic("explain compounding.") == "compounding"
        assert extract_topic("how are you") == ""

    def test_topic_completes_a_longer_term(self, dispatcher, ctx):
        result = dispatcher.dispatch("explain mutual", ctx)
        assert result.rule == "mutual fund"

    def test_category_explanation(self, dispatcher, ctx):
        result = dispatcher.dispatch("what is a hedge fund?", ctx)
        assert result.rule == "category_explanation"
        assert result.content.startswith("Regarding hedge fund:")
        assert "related to investing" in result.content

    def test_category_without_family_falls_through(self, dispatcher, ctx):
        result = dispatcher.dispatch("what is a blockchain market?", ctx)
        assert result.kind == AnswerKind.GENERAL


class TestDataQuestions:
    """Direct questions about the user's own figures."""

    def test_spending(self, dispatcher, ctx):
        result = dispatcher.dispatch("How much do I spend?", ctx)
        assert result.kind == AnswerKind.DATA
        assert result.content == "You are currently spending $500.00 per month."

    def test_income(self, dispatcher, ctx):
        result = dispatcher.dispatch("how much do i earn", ctx)
        assert result.content == "Your monthly income is $2,000.00."

    def test_savings_amount_without_income(self, dispatcher, user):
        ctx = AdviceContext.build(user, FinancialData(monthly_expenses=100))
        result = dispatcher.dispatch("how much do i save?", ctx)
        assert result.content == "You are saving -$100.00 per month."

    def test_balance_uses_currency(self, dispatcher, user, snapshot):
        ctx = AdviceContext.build(user, snapshot, currency="INR")
        result = dispatcher.dispatch("What is my balance?", ctx)
        assert result.content == "Your current balance is ₹10,000.00."

    def test_savings_rate(self, dispatcher, ctx):
        result = dispatcher.dispatch("what is my savings rate?", ctx)
        assert result.content.startswith("Your savings rate is 75.0%.")
        assert "optimal" in result.content

    def test_savings_rate_without_income(self, dispatcher, user):
        ctx = AdviceContext.build(user, FinancialData(monthly_expenses=100))
        result = dispatcher.dispatch("what is my savings rate?", ctx)
        assert "n/a" in result.content


class TestStrategies:
    """Strategy phrases tried after the term table."""

    def test_savings_strategy_has_suggestions(self, dispatcher, ctx):
        result = dispatcher.dispatch("how can i save more?", ctx)
        assert result.rule == "savings_strategy"
        assert "Consider high-yield savings accounts" in result.suggestions

    def test_investment_needs_emergency_fund(self, dispatcher, user):
        ctx = AdviceContext.build(
            user,
            FinancialData(total_balance=1000, monthly_income=2000, monthly_expenses=500),
        )
        result = dispatcher.dispatch("where should i invest", ctx)
        assert "building your emergency fund first" in result.content

    def test_financial_health(self, dispatcher, ctx):
        result = dispatcher.dispatch("am i on track?", ctx)
        assert result.rule == "financial_health"
        assert "Great emergency fund" in result.content

    def test_spending_insights(self, dispatcher, ctx):
        result = dispatcher.dispatch("give me spending insights", ctx)
        assert result.rule == "spending_insights"


class TestConversation:
    """Canned conversational replies."""

    def test_greeting_uses_first_name(self, dispatcher, ctx):
        result = dispatcher.dispatch("hello there", ctx)
        assert ", Asha!" in result.content

    def test_casual_greeting(self, student_ctx):
        dispatcher = AdviceDispatcher(rng=random.Random(1))
        result = dispatcher.dispatch("hey", student_ctx)
        assert result.content.split(",")[0] in ("Hey!", "Hi there!", "What is up?")

    def test_thanks(self, dispatcher, ctx):
        assert dispatcher.dispatch("thanks a lot", ctx).content.startswith("You are welcome!")

    def test_help(self, dispatcher, ctx):
        assert "Try asking me" in dispatcher.dispatch("help", ctx).content


class TestRuleBasedAssistant:
    """Tests for the async wrapper and its attachments."""

    def test_budget_reply_attaches_summary(self, rules, ctx):
        reply = rules.reply("show my budget", ctx)
        assert reply.source == ResponseSource.RULES
        assert reply.budget_summary is not None
        assert reply.budget_summary.savings_rate == "75.0"
        assert reply.content.startswith("Here is your budget summary:")

    def test_general_reply_has_no_attachments(self, rules, ctx):
        reply = rules.reply("hello, show me an overview", ctx)
        assert reply.budget_summary is None

    def test_generate(self, ctx):
        assistant = RuleBasedAssistant(thinking_delay_seconds=0)
        reply = asyncio.run(assistant.generate("what is a mutual fund?", ctx))
        assert reply.content == knowledge.explain_mutual_fund(ctx)
