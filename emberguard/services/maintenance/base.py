"""
EmberGuard - Maintenance Task Base Class
========================================

Base class for all maintenance tasks.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from emberguard.engine import ModerationEngine


class MaintenanceTask(ABC):
    """
    Abstract base class for maintenance tasks.

    Tasks are maintenance, not synchronization: any run may be skipped
    or delayed and the next one must still leave state correct.
    """

    # Task name for logging (override in subclass)
    name: str = "Unknown Task"

    # Whether this task is enabled by default
    enabled_by_default: bool = True

    def __init__(self, engine: "ModerationEngine") -> None:
        self.engine = engine

    async def should_run(self) -> bool:
        """Override to add preconditions."""
        return self.enabled_by_default

    @abstractmethod
    async def run(self) -> Dict[str, Any]:
        """
        Execute the maintenance task.

        Returns:
            Dict with task results for logging. Should include at minimum:
            - "success": bool
            - Any other relevant stats (e.g., "cleaned": 5, "expired": 1)
        """
        pass

    def format_result(self, result: Dict[str, Any]) -> str:
        """
        Format the task result for the summary log.

        Returns:
            Short string describing the result (e.g., "3 cleaned")
        """
        if not result.get("success", False):
            return "failed"

        for key in ("cleaned", "reset", "expired", "saved", "pruned"):
            if key in result:
                return f"{result[key]} {key}"

        return "done"


__all__ = ["MaintenanceTask"]
