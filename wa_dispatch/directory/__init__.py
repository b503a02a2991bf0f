"""
Target directory — saved broadcast recipients grouped by category.
"""

from wa_dispatch.directory.store import Base, Target, TargetDirectory

__all__ = [
    "Base",
    "Target",
    "TargetDirectory",
]
