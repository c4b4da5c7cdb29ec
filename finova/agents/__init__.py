"""
Assistant Agents Package

Contains the rule-based Advice Dispatcher, its knowledge tables and the
Remote Assistant Adapter that prefers a hosted model and falls back to
the rules.
"""

from finova.agents.advice import (
    STRATEGY_RULES,
    TERM_RULES,
    AdviceDispatcher,
    AdviceRule,
    AnswerKind,
    DispatchResult,
    RuleBasedAssistant,
    extract_topic,
)
from finova.agents.remote import RemoteAssistant, build_prompt

__all__ = [
    "STRATEGY_RULES",
    "TERM_RULES",
    "AdviceDispatcher",
    "AdviceRule",
    "AnswerKind",
    "DispatchResult",
    "RuleBasedAssistant",
    "extract_topic",
    "RemoteAssistant",
    "build_prompt",
]
