"""
Remote Assistant Adapter

Builds a chat-template prompt from the user's profile, financial
snapshot and recent turns, sends it to the hosted model and returns the
cleaned text.

CRITICAL: This adapter NEVER raises. Any failure (loading model after
the one retry, non-2xx, malformed body, too-short text, network error,
even a bug while building the prompt) degrades to the rule-based
assistant with the same inputs, and its reply is returned unchanged.
"""

from typing import Callable, Optional

import structlog

from finova.agents.advice import RuleBasedAssistant
from finova.analytics import aggregator
from finova.models.finance import ChatRole
from finova.models.insights import AdviceContext, AssistantResponse, ResponseSource
from finova.services.inference import HuggingFaceInferenceClient


logger = structlog.get_logger(__name__)

FailureHook = Callable[[str, str], None]

BUDGET_KEYWORDS = ("budget", "summary", "income", "expense", "spending", "balance")
INSIGHT_KEYWORDS = ("insight", "spending", "expense", "analysis", "recommendation")


def _mentions(keywords: tuple[str, ...], *texts: str) -> bool:
    lowered = [t.lower() for t in texts]
    return any(k in text for k in keywords for text in lowered)


def build_prompt(message: str, ctx: AdviceContext, history_window: int = 5) -> str:
    """Instruction-format prompt for chat-tuned models."""
    prompt = "<|system|>\n"
    prompt += (
        "You are FINOVA, an expert personal finance assistant. Provide "
        "personalized, accurate financial advice.\n\n"
    )

    user = ctx.user
    if user:
        prompt += "User Profile:\n"
        prompt += f"- Name: {user.full_name}\n"
        if user.demographic:
            prompt += f"- Demographic: {user.demographic.type.value}"
            if user.demographic.age:
                prompt += f", Age {user.demographic.age}"
            if user.demographic.occupation:
                prompt += f", {user.demographic.occupation}"
            prompt += "\n"
        if user.financial_goals:
            prompt += f"- Goals: {', '.join(user.financial_goals)}\n"

    data = ctx.data
    prompt += "\nFinancial Situation:\n"
    prompt += f"- Monthly Income: {aggregator.format_money(data.monthly_income, ctx.currency)}\n"
    prompt += f"- Monthly Expenses: {aggregator.format_money(data.monthly_expenses, ctx.currency)}\n"
    prompt += f"- Total Balance: {aggregator.format_money(data.total_balance, ctx.currency)}\n"
    prompt += f"- Savings Rate: {aggregator.format_rate(aggregator.savings_rate(data))}%\n"

    recent = ctx.history[-history_window:] if history_window > 0 else []
    if recent:
        prompt += "\nRecent Conversation:\n"
        for turn in recent:
            speaker = "User" if turn.role == ChatRole.USER else "FINOVA"
            prompt += f"{speaker}: {turn.content}\n"

    prompt += f"\nCommunication Style: {ctx.tone.value}, {ctx.complexity.value} level\n"
    prompt += f"<|user|>\n{message}\n<|assistant|>\n"
    return prompt


class RemoteAssistant:
    """
    Hosted-model assistant with a rule-based safety net.

    Usage:
        assistant = RemoteAssistant(client, RuleBasedAssistant())
        reply = await assistant.generate("How can I save more?", ctx)
    """

    def __init__(
        self,
        client: HuggingFaceInferenceClient,
        fallback: RuleBasedAssistant,
        history_window: int = 5,
        on_failure: Optional[FailureHook] = None,
    ):
        self._client = client
        self._fallback = fallback
        self._history_window = history_window
        self._on_failure = on_failure

    @property
    def fallback(self) -> RuleBasedAssistant:
        return self._fallback

    async def generate(self, message: str, ctx: AdviceContext) -> AssistantResponse:
        try:
            prompt = build_prompt(message, ctx, self._history_window)
            result = await self._client.agenerate(prompt)

            budget = None
            insights = None
            if _mentions(BUDGET_KEYWORDS, message, result.text):
                budget = aggregator.budget_summary(ctx.data)
            if _mentions(INSIGHT_KEYWORDS, message, result.text):
                insights = aggregator.spending_insights(ctx.data)

            return AssistantResponse(
                content=result.text,
                budget_summary=budget,
                insights=insights,
                source=ResponseSource.REMOTE,
                model=result.model,
            )
        except Exception as e:
            logger.warning(
                "remote_model_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            self._notify_failure(getattr(e, "model", None), str(e))

        logger.info("falling_back_to_rules")
        return await self._fallback.generate(message, ctx)

    def _notify_failure(self, model: Optional[str], error_message: str) -> None:
        """Report the model that actually failed; the primary when unknown."""
        if not self._on_failure:
            return
        try:
            self._on_failure(model or self._client.settings.primary_model, error_message)
        except Exception as e:
            logger.error("remote_failure_hook_failed", error=str(e))
