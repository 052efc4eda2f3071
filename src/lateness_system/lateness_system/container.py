from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from .analytics.aggregator import EventAggregator
from .analytics.service import AnalyticsService
from .core.constants import (
    DEFAULT_ABSENCE_BASE_AMOUNT,
    DEFAULT_ANALYTICS_MAX_DAYS,
    DEFAULT_ANALYTICS_MAX_WORKERS,
    DEFAULT_ANALYTICS_TIMEOUT_SECONDS,
    DEFAULT_CURRENCY,
    DEFAULT_LATENESS_BASE_AMOUNT,
)
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_source import MySQLEventSource
from .events.source import EventSource
from .packages.mysql_package_repository import MySQLPackageBaseAmountRepository
from .packages.repository import PackageBaseAmountRepository
from .packages.service import PackageBaseAmountService
from .tiers.mysql_tier_repository import MySQLTierRepository
from .tiers.repository import TierRepository
from .tiers.service import TierConfigService
from .waivers.mysql_waiver_repository import MySQLWaiverRepository
from .waivers.repository import WaiverRepository
from .waivers.service import DeductionWaiverService


@dataclass(frozen=True)
class AppSettings:
    """Runtime knobs read from the active config module."""

    currency: str = DEFAULT_CURRENCY
    default_lateness_amount: Decimal = DEFAULT_LATENESS_BASE_AMOUNT
    default_absence_amount: Decimal = DEFAULT_ABSENCE_BASE_AMOUNT
    analytics_max_workers: int = DEFAULT_ANALYTICS_MAX_WORKERS
    analytics_timeout_seconds: Optional[float] = DEFAULT_ANALYTICS_TIMEOUT_SECONDS
    analytics_max_days: int = DEFAULT_ANALYTICS_MAX_DAYS

    @classmethod
    def from_module(cls, settings: Any) -> "AppSettings":
        timeout = getattr(settings, "ANALYTICS_TIMEOUT_SECONDS", DEFAULT_ANALYTICS_TIMEOUT_SECONDS)
        return cls(
            currency=str(getattr(settings, "CURRENCY", DEFAULT_CURRENCY)),
            default_lateness_amount=Decimal(
                str(getattr(settings, "DEFAULT_LATENESS_BASE_AMOUNT", DEFAULT_LATENESS_BASE_AMOUNT))
            ),
            default_absence_amount=Decimal(
                str(getattr(settings, "DEFAULT_ABSENCE_BASE_AMOUNT", DEFAULT_ABSENCE_BASE_AMOUNT))
            ),
            analytics_max_workers=max(int(getattr(settings, "ANALYTICS_MAX_WORKERS", DEFAULT_ANALYTICS_MAX_WORKERS)), 1),
            # 0 or negative disables the deadline.
            analytics_timeout_seconds=float(timeout) if timeout and float(timeout) > 0 else None,
            analytics_max_days=max(int(getattr(settings, "ANALYTICS_MAX_DAYS", DEFAULT_ANALYTICS_MAX_DAYS)), 1),
        )


@dataclass(frozen=True)
class Container:
    settings: AppSettings

    tiers_repo: TierRepository
    packages_repo: PackageBaseAmountRepository
    event_source: EventSource
    waivers_repo: WaiverRepository

    tier_service: TierConfigService
    package_service: PackageBaseAmountService
    analytics_service: AnalyticsService
    waiver_service: DeductionWaiverService


def wire_container(
    *,
    tiers_repo: TierRepository,
    packages_repo: PackageBaseAmountRepository,
    event_source: EventSource,
    waivers_repo: WaiverRepository,
    settings: Optional[AppSettings] = None,
) -> Container:
    settings = settings or AppSettings()

    tier_service = TierConfigService(tiers_repo)
    package_service = PackageBaseAmountService(packages_repo)
    analytics_service = AnalyticsService(
        event_source,
        tiers_repo,
        packages_repo,
        aggregator=EventAggregator(max_workers=settings.analytics_max_workers),
        default_lateness_amount=settings.default_lateness_amount,
        default_absence_amount=settings.default_absence_amount,
        max_workers=settings.analytics_max_workers,
        timeout_seconds=settings.analytics_timeout_seconds,
        waivers=waivers_repo,
        max_days=settings.analytics_max_days,
    )
    waiver_service = DeductionWaiverService(waivers_repo, analytics_service)

    return Container(
        settings=settings,
        tiers_repo=tiers_repo,
        packages_repo=packages_repo,
        event_source=event_source,
        waivers_repo=waivers_repo,
        tier_service=tier_service,
        package_service=package_service,
        analytics_service=analytics_service,
        waiver_service=waiver_service,
    )


def build_container(*, db_config: dict, settings: Optional[AppSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        tiers_repo=MySQLTierRepository(conn),
        packages_repo=MySQLPackageBaseAmountRepository(conn),
        event_source=MySQLEventSource(conn),
        waivers_repo=MySQLWaiverRepository(conn),
        settings=settings,
    )
