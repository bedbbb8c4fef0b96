"""Repairs drift between business records and their index buckets."""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Set

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.search import keys
from directory_index.services.index_maintainer import index_keys
from directory_index.services.query_planner import gather_limited, load_businesses


@dataclass
class ReconcileReport:
    """Differences found between stored records and index buckets.

    Attributes:
        businesses: Number of business records scanned
        stale_ids: Indexed ids with no record behind them
        removed: Bucket key -> ids that were members but should not be
        added: Bucket key -> ids that should be members but were not
        recency_removed: Ids dropped from the recency set
        recency_added: Ids stamped into the recency set
        dry_run: True when nothing was written
    """

    businesses: int = 0
    stale_ids: Set[str] = field(default_factory=set)
    removed: Dict[str, Set[str]] = field(default_factory=dict)
    added: Dict[str, Set[str]] = field(default_factory=dict)
    recency_removed: Set[str] = field(default_factory=set)
    recency_added: Set[str] = field(default_factory=set)
    dry_run: bool = False

    @property
    def total(self) -> int:
        """Total number of membership changes."""
        return (
            sum(len(ids) for ids in self.removed.values())
            + sum(len(ids) for ids in self.added.values())
            + len(self.recency_removed)
            + len(self.recency_added)
        )


class ReconcileService:
    """Rebuilds index memberships from the business records.

    Records are the source of truth. Every ``index:*`` bucket and the business
    list are compared with the memberships the records imply, and the
    difference is applied in one atomic unit.
    """

    def __init__(self, entity_store: EntityStore, clock: Callable[[], float] = time.time):
        self.entity_store = entity_store
        self.clock = clock

    async def _expected(self) -> tuple[Dict[str, Set[str]], Set[str]]:
        business_keys = await self.entity_store.keys_matching(f"{keys.BUSINESS_PREFIX}:*")
        loaded = await load_businesses(
            self.entity_store, [keys.business_id_from_key(key) for key in business_keys]
        )

        expected: Dict[str, Set[str]] = defaultdict(set)
        for business in loaded.businesses:
            expected[keys.BUSINESS_LIST_KEY].add(business.id)
            for key in index_keys(business):
                expected[key].add(business.id)
        return expected, {business.id for business in loaded.businesses}

    async def _actual(self) -> Dict[str, Set[str]]:
        bucket_keys = await self.entity_store.keys_matching(f"{keys.INDEX_PREFIX}:*")
        bucket_keys.append(keys.BUSINESS_LIST_KEY)
        members = await gather_limited(self.entity_store.members_of(key) for key in bucket_keys)
        return {key: set(ids) for key, ids in zip(bucket_keys, members) if ids}

    async def reconcile(self, dry_run: bool = False) -> ReconcileReport:
        expected, record_ids = await self._expected()
        actual = await self._actual()
        recency = set(await self.entity_store.scored_members(keys.RECENCY_KEY))

        report = ReconcileReport(businesses=len(record_ids), dry_run=dry_run)
        for key in sorted(set(expected) | set(actual)):
            want = expected.get(key, set())
            have = actual.get(key, set())
            if have - want:
                report.removed[key] = have - want
            if want - have:
                report.added[key] = want - have
            report.stale_ids |= have - record_ids

        report.recency_removed = recency - record_ids
        report.recency_added = record_ids - recency

        if report.stale_ids:
            logger.warning(f"Found {len(report.stale_ids)} stale index references")

        if dry_run or not report.total:
            logger.info(f"Reconcile finished: {report.total} changes, dry_run={dry_run}")
            return report

        score = float(int(self.clock() * 1000))
        async with self.entity_store.atomic() as store:
            for key, ids in report.removed.items():
                await store.remove_from_set(key, *sorted(ids))
            for key, ids in report.added.items():
                await store.add_to_set(key, *sorted(ids))
            if report.recency_removed:
                await store.remove_scored(keys.RECENCY_KEY, *sorted(report.recency_removed))
            for business_id in sorted(report.recency_added):
                await store.add_scored(keys.RECENCY_KEY, score, business_id)

        logger.info(
            f"Reconcile applied {report.total} changes across "
            f"{len(report.removed) + len(report.added)} buckets"
        )
        return report
