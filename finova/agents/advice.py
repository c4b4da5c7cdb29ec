"""
Advice Dispatcher

DESIGN DECISION: Matching is an ORDERED list of (matcher, handler)
rules evaluated top to bottom. The first rule that matches answers.
There is no ranking and no overlap resolution, so the order of the
tables below IS the behavior ("mutual fund" is listed before anything
that could also match a fund question).

Dispatch order for one message:
1. Direct questions about the user's own figures ("how much do I spend")
2. The finance term table
3. "what is / explain X": the term table again against the extracted topic
4. Strategy phrases (invest, save, budget, spending, financial health)
5. A generic explanation for finance-sounding "what is X" questions
6. Conversational replies (greeting, thanks, help, continuation, clarify)

The dispatcher is TOTAL: every string, including "" and whitespace,
gets a non-empty reply and nothing raises.
"""

import asyncio
import random
import re
from enum import Enum
from typing import Callable, NamedTuple, Optional

import structlog

from finova.agents import knowledge, reports
from finova.analytics import aggregator
from finova.models.insights import (
    AdviceContext,
    AssistantResponse,
    ResponseSource,
)


logger = structlog.get_logger(__name__)

Matcher = Callable[[str], bool]
Handler = Callable[[AdviceContext], str]


class AdviceRule(NamedTuple):
    """One entry of an ordered dispatch table."""
    name: str
    matches: Matcher
    respond: Handler
    suggest: Optional[Callable[[AdviceContext], list[str]]] = None


def word_start(term: str) -> Matcher:
    """Match ``term`` only where a word begins, so "rd" skips "card"."""
    pattern = re.compile(r"\b" + re.escape(term))
    return lambda text: pattern.search(text) is not None


def any_phrase(*phrases: str) -> Matcher:
    return lambda text: any(phrase in text for phrase in phrases)


def _term(term: str, handler: Handler) -> AdviceRule:
    return AdviceRule(term, word_start(term), handler)


# =============================================================================
# TERM TABLE (order is significant)
# =============================================================================

TERM_RULES: list[AdviceRule] = [
    # Investment
    _term("sip", knowledge.explain_sip),
    _term("systematic investment plan", knowledge.explain_sip),
    _term("mutual fund", knowledge.explain_mutual_fund),
    _term("mutual funds", knowledge.explain_mutual_fund),
    _term("equity", knowledge.explain_equity),
    _term("stocks", knowledge.explain_stocks),
    _term("stock market", knowledge.explain_stock_market),
    _term("portfolio", knowledge.explain_portfolio),
    _term("diversification", knowledge.explain_diversification),
    _term("diversify", knowledge.explain_diversification),
    _term("etf", knowledge.explain_etf),
    _term("exchange traded fund", knowledge.explain_etf),
    _term("index fund", knowledge.explain_index_fund),
    _term("bond", knowledge.explain_bond),
    _term("bonds", knowledge.explain_bond),
    _term("fixed deposit", knowledge.explain_fixed_deposit),
    _term("fd", knowledge.explain_fixed_deposit),
    _term("recurring deposit", knowledge.explain_recurring_deposit),
    _term("rd", knowledge.explain_recurring_deposit),
    _term("ppf", knowledge.explain_ppf),
    _term("public provident fund", knowledge.explain_ppf),
    _term("nsc", knowledge.explain_nsc),
    _term("national savings certificate", knowledge.explain_nsc),

    # Banking and credit
    _term("credit score", knowledge.explain_credit_score),
    _term("credit card", knowledge.explain_credit_card),
    _term("emi", knowledge.explain_emi),
    _term("equated monthly installment", knowledge.explain_emi),
    _term("interest rate", knowledge.explain_interest_rate),
    _term("compound interest", knowledge.explain_compound_interest),
    _term("simple interest", knowledge.explain_simple_interest),
    _term("credit", knowledge.explain_credit),
    _term("debit", knowledge.explain_debit),

    # Insurance
    _term("insurance", knowledge.explain_insurance),
    _term("life insurance", knowledge.explain_life_insurance),
    _term("health insurance", knowledge.explain_health_insurance),
    _term("term insurance", knowledge.explain_term_insurance),
    _term("premium", knowledge.explain_premium),

    # Tax
    _term("tax", reports.tax_advice),
    _term("income tax", knowledge.explain_income_tax),
    _term("gst", knowledge.explain_gst),
    _term("deduction", knowledge.explain_deduction),
    _term("tax deduction", knowledge.explain_deduction),
    _term("80c", knowledge.explain_80c),
    _term("section 80c", knowledge.explain_80c),
    _term("itr", knowledge.explain_itr),
    _term("income tax return", knowledge.explain_itr),

    # Retirement
    _term("retirement", reports.retirement_advice),
    _term("401k", knowledge.explain_401k),
    _term("ira", knowledge.explain_ira),
    _term("pension", knowledge.explain_pension),
    _term("epf", knowledge.explain_epf),
    _term("employee provident fund", knowledge.explain_epf),

    # Real estate
    _term("home loan", knowledge.explain_home_loan),
    _term("mortgage", knowledge.explain_home_loan),
    _term("real estate", knowledge.explain_real_estate),
    _term("property", knowledge.explain_real_estate),

    # Savings and goals
    _term("emergency fund", knowledge.explain_emergency_fund),
    _term("savings account", knowledge.explain_savings_account),
    _term("current account", knowledge.explain_current_account),
    _term("financial goal", reports.goals_advice),

    # Debt
    _term("debt", reports.debt_advice),
    _term("loan", knowledge.explain_loan),
    _term("personal loan", knowledge.explain_personal_loan),
    _term("education loan", knowledge.explain_education_loan),

    # Planning
    _term("budget", reports.budget_report),
    _term("financial planning", knowledge.explain_financial_planning),
    _term("asset allocation", knowledge.explain_asset_allocation),
    _term("risk", knowledge.explain_risk),
    _term("inflation", knowledge.explain_inflation),
]


# =============================================================================
# STRATEGY PHRASES (tried after the term table)
# =============================================================================

STRATEGY_RULES: list[AdviceRule] = [
    AdviceRule(
        "investment_strategy",
        any_phrase("where should i invest", "where to invest", "how to invest"),
        reports.investment_advice,
    ),
    AdviceRule(
        "savings_strategy",
        any_phrase("how to save", "how can i save", "save more"),
        reports.savings_advice,
        reports.savings_suggestions,
    ),
    AdviceRule(
        "budget_report",
        any_phrase("show my budget", "my budget", "budget summary"),
        reports.budget_report,
    ),
    AdviceRule(
        "spending_insights",
        any_phrase("spending", "where does my money go", "spending insights"),
        reports.insights_report,
    ),
    AdviceRule(
        "financial_health",
        any_phrase("financial health", "how am i doing", "am i on track"),
        reports.health_check,
    ),
]


QUESTION_MARKERS = (
    "?", "how", "what", "why", "when", "where", "which",
    "can i", "should i", "do i", "explain", "tell me about",
)

EXPLAIN_MARKERS = ("what is", "what are", "explain", "tell me about")

TOPIC_PATTERNS = [
    re.compile(r"what is (?:a |an |the )?([a-z\s]+?)(?:\?|$|\.)"),
    re.compile(r"what are (?:a |an |the )?([a-z\s]+?)(?:\?|$|\.)"),
    re.compile(r"explain ([a-z\s]+?)(?:\?|$|\.)"),
    re.compile(r"tell me about ([a-z\s]+?)(?:\?|$|\.)"),
]

# Shorter topics ("it", "me") are too vague to complete into a term
MIN_TOPIC_LENGTH = 3

GREETING = re.compile(r"\b(hello|hi|hey)\b")

CASUAL_GREETINGS = ("Hey!", "Hi there!", "What is up?")
FORMAL_GREETINGS = ("Hello!", "Greetings!", "Good day!")

BUDGET_ATTACHMENT_WORDS = ("budget", "summary", "overview")
INSIGHT_ATTACHMENT_WORDS = ("spending", "expense", "insight")


def extract_topic(message: str) -> str:
    """Pull X out of "what is X" / "explain X"; "" when there is none."""
    for pattern in TOPIC_PATTERNS:
        match = pattern.search(message)
        if match and match.group(1).strip():
            return match.group(1).strip().lower()
    return ""


def is_question(message: str) -> bool:
    return any(marker in message for marker in QUESTION_MARKERS)


class AnswerKind(str, Enum):
    DATA = "data"
    KNOWLEDGE = "knowledge"
    GENERAL = "general"


class DispatchResult(NamedTuple):
    content: str
    kind: AnswerKind
    rule: Optional[str] = None
    suggestions: tuple[str, ...] = ()


class AdviceDispatcher:
    """
    Keyword-driven reply selection.

    Usage:
        dispatcher = AdviceDispatcher()
        result = dispatcher.dispatch("what is a mutual fund?", ctx)
    """

    def __init__(
        self,
        term_rules: Optional[list[AdviceRule]] = None,
        strategy_rules: Optional[list[AdviceRule]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._term_rules = term_rules if term_rules is not None else TERM_RULES
        self._strategy_rules = strategy_rules if strategy_rules is not None else STRATEGY_RULES
        self._rng = rng or random.Random()

    @property
    def term_rules(self) -> list[AdviceRule]:
        return self._term_rules

    def dispatch(self, message: Optional[str], ctx: AdviceContext) -> DispatchResult:
        text = (message or "").lower().strip()

        if is_question(text) and ("how much" in text or "what is my" in text or "my" in text):
            answer = reports.answer_data_question(text, ctx)
            if answer:
                return DispatchResult(answer, AnswerKind.DATA, "data_question")

        found = self._knowledge_answer(text, ctx)
        if found is not None:
            return found

        return DispatchResult(self.general_response(text, ctx), AnswerKind.GENERAL)

    def _respond(self, rule: AdviceRule, ctx: AdviceContext) -> DispatchResult:
        suggestions = tuple(rule.suggest(ctx)) if rule.suggest else ()
        return DispatchResult(rule.respond(ctx), AnswerKind.KNOWLEDGE, rule.name, suggestions)

    def _first_match(self, rules: list[AdviceRule], text: str) -> Optional[AdviceRule]:
        return next((rule for rule in rules if rule.matches(text)), None)

    def _knowledge_answer(self, text: str, ctx: AdviceContext) -> Optional[DispatchResult]:
        rule = self._first_match(self._term_rules, text)
        if rule:
            return self._respond(rule, ctx)

        asks_explanation = any(marker in text for marker in EXPLAIN_MARKERS)
        topic = extract_topic(text) if asks_explanation else ""

        if len(topic) >= MIN_TOPIC_LENGTH:
            for rule in self._term_rules:
                # Topic names the term, or is the start of a longer term
                if rule.matches(topic) or word_start(topic)(rule.name):
                    return self._respond(rule, ctx)

        rule = self._first_match(self._strategy_rules, text)
        if rule:
            return self._respond(rule, ctx)

        if topic and knowledge.is_finance_related(text, topic):
            explanation = knowledge.explain_category(topic, ctx)
            if explanation:
                return DispatchResult(explanation, AnswerKind.KNOWLEDGE, "category_explanation")

        return None

    def general_response(self, text: str, ctx: AdviceContext) -> str:
        greeting = self._rng.choice(CASUAL_GREETINGS if ctx.is_casual else FORMAL_GREETINGS)
        bullet = knowledge.BULLET

        if GREETING.search(text):
            name = f", {ctx.user.first_name}" if ctx.user and ctx.user.first_name else ""
            response = f"{greeting}{name}! I am FINOVA, your personal financial assistant.\n\n"
            response += "I can help you with:\n"
            for topic in (
                "Budget planning and summaries",
                "Savings strategies and goals",
                "Investment advice",
                "Tax planning",
                "Spending insights and analysis",
                "Debt management",
                "Retirement planning",
            ):
                response += f"{bullet} {topic}\n"
            response += "\nWhat would you like to know about your finances today?"
            return response

        if "thank" in text:
            return (
                "You are welcome! I am here anytime you need financial advice. "
                "Is there anything else I can help you with?"
            )

        if "help" in text:
            response = "I can help you with various financial topics!\n\n"
            response += "Try asking me:\n"
            for example in (
                '"Show me my budget summary"',
                '"How much am I spending?"',
                '"How can I save more money?"',
                '"What should I invest in?"',
                '"Give me spending insights"',
                '"How is my financial health?"',
            ):
                response += f"{bullet} {example}\n"
            response += "\nOr ask me any specific financial question!"
            return response

        recent_topics = " ".join(m.content.lower() for m in ctx.history[-3:])
        if ctx.history and recent_topics.strip():
            response = f"{greeting} "
            if "budget" in recent_topics or "summary" in recent_topics:
                response += "Continuing on your budget discussion. "
            elif "save" in recent_topics or "saving" in recent_topics:
                response += "Regarding savings, "
            elif "invest" in recent_topics:
                response += "About investments, "
            elif "spending" in recent_topics or "expense" in recent_topics:
                response += "On spending, "
            response += (
                "I can help you with various financial topics. Could you be more "
                "specific? For example:\n"
            )
            response += f'{bullet} "Show my budget"\n'
            response += f'{bullet} "How can I save more?"\n'
            response += f'{bullet} "Investment advice"\n'
            response += f'{bullet} "Spending analysis"'
            return response

        response = f"{greeting} I am here to help with your financial questions!\n\n"
        response += (
            "I want to make sure I give you the best answer. Could you be more "
            "specific? For example:\n\n"
        )
        response += (
            f'{bullet} Ask about your budget: "Show my budget summary" or '
            '"How much am I spending?"\n'
        )
        response += (
            f'{bullet} Get savings advice: "How can I save more money?" or '
            '"What is a good savings rate?"\n'
        )
        response += (
            f'{bullet} Investment help: "Where should I invest?" or '
            '"Investment advice for beginners"\n'
        )
        response += (
            f'{bullet} Spending analysis: "Show my spending insights" or '
            '"Where does my money go?"\n'
        )
        response += (
            f'{bullet} Financial health: "How am I doing financially?" or '
            '"Am I on track?"\n\n'
        )
        response += "What specific financial topic can I help you with?"
        return response


class RuleBasedAssistant:
    """
    Async front of the dispatcher, shaped like the remote assistant.

    Waits ``thinking_delay_seconds`` before answering and attaches the
    budget summary / spending insights when a knowledge answer mentions
    them.
    """

    def __init__(
        self,
        dispatcher: Optional[AdviceDispatcher] = None,
        thinking_delay_seconds: float = 0.8,
    ):
        self._dispatcher = dispatcher or AdviceDispatcher()
        self._delay = thinking_delay_seconds

    @property
    def dispatcher(self) -> AdviceDispatcher:
        return self._dispatcher

    def reply(self, message: Optional[str], ctx: AdviceContext) -> AssistantResponse:
        """Answer immediately, without the thinking delay."""
        result = self._dispatcher.dispatch(message, ctx)
        text = (message or "").lower()

        budget = None
        insights = None
        if result.kind == AnswerKind.KNOWLEDGE:
            if any(word in text for word in BUDGET_ATTACHMENT_WORDS):
                budget = aggregator.budget_summary(ctx.data)
            if any(word in text for word in INSIGHT_ATTACHMENT_WORDS):
                insights = aggregator.spending_insights(ctx.data)

        logger.debug("rules_answered", kind=result.kind.value, rule=result.rule)
        return AssistantResponse(
            content=result.content,
            suggestions=list(result.suggestions),
            budget_summary=budget,
            insights=insights,
            source=ResponseSource.RULES,
        )

    async def generate(self, message: Optional[str], ctx: AdviceContext) -> AssistantResponse:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        return self.reply(message, ctx)
