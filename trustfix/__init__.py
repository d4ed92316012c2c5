"""
Evaluate a machine health snapshot, score it, and recommend remediations.
"""

__all__ = ["diagnostics", "system_state", "report", "cli"]
__version__ = "0.1.0"
