"""Decision making for computer-controlled seats."""

from .context import DecisionContext, build_context, render_prompt
from .engine import DecisionConfig, DecisionEngine
from .memory import MemoryEntry, OpponentMemory
from .profiles import LEGACY_STRATEGIES, PRESETS, StrategyProfile
from .provider import DecisionProvider, WebSocketDecisionProvider, parse_decision
from .rules import Decision, RuleBasedStrategy, Thresholds

__all__ = [
    "DecisionContext",
    "build_context",
    "render_prompt",
    "DecisionConfig",
    "DecisionEngine",
    "MemoryEntry",
    "OpponentMemory",
    "LEGACY_STRATEGIES",
    "PRESETS",
    "StrategyProfile",
    "DecisionProvider",
    "WebSocketDecisionProvider",
    "parse_decision",
    "Decision",
    "RuleBasedStrategy",
    "Thresholds",
]
