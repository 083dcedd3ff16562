"""Presentation layer for the Agent Lounge engine.

Public API
----------
- :class:`ConsoleDashboard` -- rich console tables for session snapshots
"""

from agent_lounge.presentation.console import ConsoleDashboard

__all__ = [
    "ConsoleDashboard",
]
