"""IIP registry and factory."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, Union

from npsa.model import Time

from .critical_window import CriticalWindowIIP
from .kinds import IIPKind
from .null import NullIIP
from .precautious_rm import PrecautiousRMIIP

if TYPE_CHECKING:
    from npsa.core.lookup import JobTables


class IdleTimePolicy(Protocol):
    """Shape shared by every policy; the set of policies is closed."""

    kind: IIPKind
    can_block: bool

    def latest_start(self, job_index: int, t: Time, scheduled: frozenset[int]) -> Time:
        """Latest time the job may be dispatched when it is the top pending job at ``t``.

        Must be piecewise constant between consecutive arrival bounds of the workload.
        """


IIPFactory = Callable[["JobTables"], IdleTimePolicy]


_REGISTRY: dict[IIPKind, IIPFactory] = {
    IIPKind.NONE: NullIIP,
    IIPKind.PRECAUTIOUS_RM: PrecautiousRMIIP,
    IIPKind.CRITICAL_WINDOW: CriticalWindowIIP,
}

_ALIASES: dict[str, IIPKind] = {
    "none": IIPKind.NONE,
    "null": IIPKind.NONE,
    "wc": IIPKind.NONE,
    "work_conserving": IIPKind.NONE,
    "p_rm": IIPKind.PRECAUTIOUS_RM,
    "prm": IIPKind.PRECAUTIOUS_RM,
    "precautious_rm": IIPKind.PRECAUTIOUS_RM,
    "cw": IIPKind.CRITICAL_WINDOW,
    "cw_edf": IIPKind.CRITICAL_WINDOW,
    "critical_window": IIPKind.CRITICAL_WINDOW,
}


def resolve_iip_kind(name: Union[IIPKind, str]) -> IIPKind:
    if isinstance(name, IIPKind):
        return name
    key = name.strip().lower().replace("-", "_")
    kind = _ALIASES.get(key)
    if kind is None:
        raise ValueError(f"unknown idle-time insertion policy {name}")
    return kind


def create_iip(name: Union[IIPKind, str], tables: JobTables) -> IdleTimePolicy:
    return _REGISTRY[resolve_iip_kind(name)](tables)
