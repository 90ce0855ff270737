"""Idle-time insertion policy exports."""

from .critical_window import CriticalWindowIIP
from .kinds import IIPKind
from .null import NullIIP
from .precautious_rm import PrecautiousRMIIP
from .registry import IdleTimePolicy, create_iip, resolve_iip_kind

__all__ = [
    "CriticalWindowIIP",
    "IIPKind",
    "IdleTimePolicy",
    "NullIIP",
    "PrecautiousRMIIP",
    "create_iip",
    "resolve_iip_kind",
]
