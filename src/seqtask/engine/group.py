# src/seqtask/engine/group.py
from __future__ import annotations

from typing import Any, Iterable, Iterator

from seqtask.domain.states import StepStatus

from .step import Step

GROUP_TYPE = "group"


class StepGroup:
    """
    Fixed, ordered bundle of steps occupying one position in a task.

    A group has no status of its own: reading reports the highest-ranked
    member status, writing broadcasts to every member. Tasks flatten groups
    into their members for execution, event listening and rollback.
    """

    def __init__(self, steps: Iterable[Step]) -> None:
        self.steps: tuple[Step, ...] = tuple(steps)
        if not self.steps:
            raise ValueError("step group must contain at least one step")

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def status(self) -> StepStatus:
        return max((s.status for s in self.steps), key=lambda st: st.rank)

    @status.setter
    def status(self, status: StepStatus | str) -> None:
        for step in self.steps:
            step.status = status

    def is_done(self) -> bool:
        return all(s.is_done() for s in self.steps)

    async def action(self) -> list[Any]:
        """
        Runs members in declared order. The first failure propagates and the
        remaining members are not started.
        """
        results: list[Any] = []
        for step in self.steps:
            results.append(await step.action())
        return results

    async def cancel(self) -> bool:
        """
        Cancels members in reverse order.

        Returns True only if every member fully compensated. A member
        returning False does not stop the pass; a member raising does.
        """
        compensated = True
        for step in reversed(self.steps):
            if not await step.cancel():
                compensated = False
        return compensated

    def to_json(self) -> dict[str, Any]:
        return {"type": GROUP_TYPE, "steps": [s.to_json() for s in self.steps]}

    def __repr__(self) -> str:
        return f"StepGroup(steps={list(self.steps)!r})"
