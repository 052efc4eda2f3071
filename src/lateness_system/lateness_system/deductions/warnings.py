from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from ..core.enums import WarningCode
from .model import ResolvedDeduction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionWarning:
    code: WarningCode
    message: str
    count: int


def collect_warnings(resolved: Iterable[ResolvedDeduction]) -> List[ResolutionWarning]:
    """Count non-fatal resolution conditions for one request and log each kind once."""

    unconfigured = 0
    conflicts = 0
    missing_packages: dict[str, int] = {}

    for r in resolved:
        if r.is_unconfigured:
            unconfigured += 1
        if r.tier_conflict:
            conflicts += 1
        if r.base_amount_defaulted:
            name = r.package_name or "(none)"
            missing_packages[name] = missing_packages.get(name, 0) + 1

    warnings: List[ResolutionWarning] = []
    if conflicts:
        warnings.append(
            ResolutionWarning(
                code=WarningCode.TIER_CONFLICT,
                message=f"{conflicts} event(s) matched more than one tier; the lowest tier number was used",
                count=conflicts,
            )
        )
    if unconfigured:
        warnings.append(
            ResolutionWarning(
                code=WarningCode.UNCONFIGURED,
                message=f"{unconfigured} event(s) fall outside every configured tier and carry no deduction",
                count=unconfigured,
            )
        )
    if missing_packages:
        total = sum(missing_packages.values())
        names = ", ".join(sorted(missing_packages))
        warnings.append(
            ResolutionWarning(
                code=WarningCode.MISSING_PACKAGE_BASE_AMOUNT,
                message=f"{total} event(s) used the default base amount (packages without configuration: {names})",
                count=total,
            )
        )

    for w in warnings:
        logger.warning("%s: %s", w.code.value, w.message)
    return warnings
