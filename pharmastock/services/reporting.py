"""Dashboard aggregates computed from lot and distribution snapshots."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional

from ..utils.timezone_utils import TimezoneUtils
from .status_classifier import DEFAULT_POLICY, ClassificationPolicy, StatusTag, classify

_BELOW_THRESHOLD_TAGS = frozenset({StatusTag.LOW_STOCK, StatusTag.TO_REORDER})


@dataclass(slots=True)
class DashboardMetrics:
    total_lots: int
    low_stock_count: int
    nearing_expiry_count: int
    recent_distribution_count: int

    def to_dict(self) -> dict:
        return asdict(self)


def is_recent(distribution, today: date, days: int = 7) -> bool:
    """True when the distribution falls on one of the last ``days`` calendar days, today included."""
    when = TimezoneUtils.local_date(distribution.date)
    if when is None:
        return False
    return today - timedelta(days=days) < when <= today


def dashboard_metrics(
    lots: Iterable,
    distributions: Iterable,
    today: date,
    *,
    policy: ClassificationPolicy = DEFAULT_POLICY,
    recent_days: int = 7,
) -> DashboardMetrics:
    total = low = nearing = 0
    for lot in lots:
        total += 1
        tags = classify(lot, today, policy)
        if _BELOW_THRESHOLD_TAGS.intersection(tags):
            low += 1
        if StatusTag.NEARING_EXPIRY in tags:
            nearing += 1

    recent = sum(1 for entry in distributions if is_recent(entry, today, recent_days))
    return DashboardMetrics(
        total_lots=total,
        low_stock_count=low,
        nearing_expiry_count=nearing,
        recent_distribution_count=recent,
    )


def distribution_totals_by_service(services: Iterable, distributions: Iterable) -> dict[str, int]:
    """Sum distributed quantities per service name.

    Every known service appears, starting at zero. Entries whose service id is no
    longer known are bucketed under the service name they recorded.
    """
    totals: dict[str, int] = {}
    names_by_id: dict[Any, str] = {}
    for service in services:
        names_by_id[service.id] = service.name
        totals.setdefault(service.name, 0)

    for entry in distributions:
        name = names_by_id.get(entry.service_id, entry.service_name)
        totals[name] = totals.get(name, 0) + (entry.quantity_distributed or 0)
    return totals


def top_distributed_items(distributions: Iterable, n: int = 5) -> list[tuple[str, int]]:
    """The ``n`` items with the largest distributed quantity; ties keep first-seen order."""
    if n <= 0:
        return []
    totals: dict[str, int] = {}
    for entry in distributions:
        totals[entry.item_name] = totals.get(entry.item_name, 0) + (entry.quantity_distributed or 0)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]


def build_dashboard(
    lots: list,
    services: list,
    distributions: list,
    today: date,
    config: Optional[Mapping[str, Any]] = None,
) -> dict:
    config = config or {}
    policy = ClassificationPolicy.from_config(config)
    metrics = dashboard_metrics(
        lots,
        distributions,
        today,
        policy=policy,
        recent_days=int(config.get('RECENT_DISTRIBUTION_DAYS', 7)),
    )
    recent_limit = int(config.get('RECENT_DISTRIBUTIONS_LIMIT', 10))
    top_limit = int(config.get('TOP_DISTRIBUTED_ITEMS', 5))
    latest = sorted(distributions, key=lambda entry: (entry.date, entry.id), reverse=True)[:recent_limit]

    return {
        'today': today.isoformat(),
        'metrics': metrics.to_dict(),
        'totals_by_service': [
            {'service_name': name, 'total': total}
            for name, total in distribution_totals_by_service(services, distributions).items()
        ],
        'top_items': [
            {'item_name': name, 'total': total}
            for name, total in top_distributed_items(distributions, top_limit)
        ],
        'recent_distributions': [entry.to_dict() for entry in latest],
    }
