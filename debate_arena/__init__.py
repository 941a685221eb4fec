"""AI Debate Arena engine: turn orchestration, resilient inference and heuristic scoring."""

__version__ = "0.1.0"
