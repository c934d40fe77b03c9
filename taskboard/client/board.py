"""
Local view of a project's task board.

Moves are optimistic: the task is shown in its new column at once, the
server is asked to confirm, and the old column is restored if it refuses.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol

from taskboard.core.logging import get_logger

logger = get_logger(__name__)


class TaskGateway(Protocol):
    """The subset of TaskBoardClient the board needs."""

    async def get_tasks(self, project_id: Optional[int] = None) -> List[Dict]: ...

    async def create_task(self, task: Dict) -> Dict: ...

    async def update_task(self, task_id: int, updates: Dict) -> Dict: ...

    async def delete_task(self, task_id: int) -> Any: ...


class TaskBoard:
    def __init__(self, gateway: TaskGateway, project_id: int):
        self.gateway = gateway
        self.project_id = project_id
        self.tasks: List[Dict] = []

    async def load(self) -> List[Dict]:
        self.tasks = list(await self.gateway.get_tasks(self.project_id))
        logger.debug(f"Loaded {len(self.tasks)} tasks for project {self.project_id}")
        return self.tasks

    def get_task(self, task_id: int) -> Optional[Dict]:
        for task in self.tasks:
            if task["id"] == task_id:
                return task
        return None

    def tasks_by_status(self, status: str) -> List[Dict]:
        """Tasks shown in one column, in board order."""
        column = [t for t in self.tasks if t["status"] == status]
        return sorted(column, key=lambda t: (t.get("order_index", 0), t["id"]))

    def _set_local_status(self, task_id: int, status: str):
        self.tasks = [
            {**t, "status": status} if t["id"] == task_id else t
            for t in self.tasks
        ]

    async def move_task(self, task_id: int, new_status: str) -> Dict:
        """
        Move a task to another column.

        The local view changes before the server call. If the call fails or is
        cancelled the previous status is restored and the error is re-raised.

        Returns:
            The task as confirmed by the server (or unchanged for a no-op)

        Raises:
            KeyError: task is not on this board
        """
        task = self.get_task(task_id)
        if task is None:
            raise KeyError(task_id)

        old_status = task["status"]
        if old_status == new_status:
            return task

        self._set_local_status(task_id, new_status)
        try:
            confirmed = await self.gateway.update_task(task_id, {"status": new_status})
        except (Exception, asyncio.CancelledError):
            logger.warning(f"Moving task {task_id} to {new_status} failed; restoring {old_status}")
            self._set_local_status(task_id, old_status)
            raise

        self.tasks = [confirmed if t["id"] == task_id else t for t in self.tasks]
        return confirmed

    async def add_task(self, title: str, status: str = "backlog", priority: str = "medium") -> Dict:
        created = await self.gateway.create_task(
            {"title": title, "status": status, "projectId": self.project_id, "priority": priority}
        )
        self.tasks.append(created)
        return created

    async def delete_task(self, task_id: int):
        """Remove a task once the server confirmed the deletion."""
        await self.gateway.delete_task(task_id)
        self.tasks = [t for t in self.tasks if t["id"] != task_id]
