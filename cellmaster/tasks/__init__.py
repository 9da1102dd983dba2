"""Contracts and the contract pool."""

from cellmaster.tasks.task import Requirement, Task, TaskPenalty, TaskReward, TaskStatus
from cellmaster.tasks.task_manager import TaskManager, TaskUpdate

__all__ = [
    "Requirement",
    "Task",
    "TaskManager",
    "TaskPenalty",
    "TaskReward",
    "TaskStatus",
    "TaskUpdate",
]
