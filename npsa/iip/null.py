"""Work-conserving policy: never inserts idle time."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from npsa.model import INFINITY, Time

from .kinds import IIPKind

if TYPE_CHECKING:
    from npsa.core.lookup import JobTables


class NullIIP:
    """Dispatch the highest-priority pending job as soon as the core is free."""

    kind: ClassVar[IIPKind] = IIPKind.NONE
    can_block: ClassVar[bool] = False

    def __init__(self, tables: JobTables) -> None:
        self._tables = tables

    def latest_start(self, job_index: int, t: Time, scheduled: frozenset[int]) -> Time:  # noqa: ARG002
        return INFINITY
