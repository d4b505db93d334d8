"""Request routing: classify, rank, record, cache."""

from cipher.orchestration.orchestrator import OrchestrationStats, Orchestrator

__all__ = ["OrchestrationStats", "Orchestrator"]
