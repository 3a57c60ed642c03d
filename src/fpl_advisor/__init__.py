"""
FPL Advisor - Fantasy Premier League squad optimization engine.

Scores players over an upcoming fixture horizon, searches legal transfer
plans, picks the best lineup and drafts full squads under budget.
"""

__version__ = "0.1.0"

from .config import EngineSettings, Settings, get_settings

__all__ = ["EngineSettings", "Settings", "get_settings", "__version__"]
