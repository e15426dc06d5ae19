from .agent import ChoreAgent, LoopOutcome, LoopResult
from .openai_client import CompletionClient

__all__ = ["ChoreAgent", "CompletionClient", "LoopOutcome", "LoopResult"]
