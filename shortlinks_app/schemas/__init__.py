from .link import (
    DeactivationReason,
    LinkInfo,
    LinkStatus,
    RedirectResult,
    RedirectStatus,
    SweepReport,
)

__all__ = [
    "DeactivationReason",
    "LinkInfo",
    "LinkStatus",
    "RedirectResult",
    "RedirectStatus",
    "SweepReport",
]
