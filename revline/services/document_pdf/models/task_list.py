"""
Mechanic task list model
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class TaskItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "-"
    done: bool = False

    @property
    def checklist_line(self) -> str:
        return f"{'[x]' if self.done else '[   ]'} {self.name}"


class TaskOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: Optional[str] = None
    customer_name: str = "-"
    items: Tuple[TaskItem, ...] = ()

    @property
    def checklist(self) -> str:
        return "\n\n".join(item.checklist_line for item in self.items)


class TaskList(BaseModel):
    model_config = ConfigDict(frozen=True)

    orders: Tuple[TaskOrder, ...] = Field(min_length=1)
