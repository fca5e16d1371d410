"""Core business logic components.

This module exports the main business logic classes:
- Bot: Lifecycle, concurrency control, and shutdown
- BotContext: Immutable configuration and collaborators
- RequestOrchestrator: Handles one mention end to end
- IntentClassifier: Turns mention text into a command
- RecordMatcher: Finds records by title fragment or id
- EffectRunner: Executes chat and store effects
"""

from helper_bot.core.bot import Bot, create_bot
from helper_bot.core.classifier import IntentClassifier
from helper_bot.core.context import BotContext
from helper_bot.core.effects import EffectRunner
from helper_bot.core.matcher import RecordMatcher
from helper_bot.core.orchestrator import RequestOrchestrator

__all__ = [
    "Bot",
    "BotContext",
    "EffectRunner",
    "IntentClassifier",
    "RecordMatcher",
    "RequestOrchestrator",
    "create_bot",
]
