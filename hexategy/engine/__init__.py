"""Game engine components."""

from .combat import resolve_combat, resolve_round
from .map_generator import generate_map
from .production import ProductionEngine
from .round_orchestrator import RoundOrchestrator
from .victory import VictoryEvaluator

__all__ = [
    "generate_map",
    "ProductionEngine",
    "resolve_combat",
    "resolve_round",
    "RoundOrchestrator",
    "VictoryEvaluator",
]
