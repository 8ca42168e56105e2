"""
Standalone SQL showcases that sit next to the fetch strategies.
"""

from src.queries.join_types import JOIN_EXAMPLES

__all__ = ["JOIN_EXAMPLES"]
