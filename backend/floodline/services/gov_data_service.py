"""
Government Data Reconciliation.

Pulls the flood and shelter feeds and aligns stored records with them:
1. Fetch the feed (bearer auth, bounded timeout). Failures end the run for
   that collection and are reported in the summary, never raised.
2. Parse every element at the boundary into a record or a Rejected.
3. Match by natural key: (title, lat, lng) for floods, (name, lat, lng)
   for shelters. Exact equality only.
4. Found: coalesce-merge (only non-empty feed values overwrite).
   Not found: create with defaults.
5. One record failing never stops the rest of the batch.

No state is kept between runs, so a run can always be repeated.
"""

from collections import Counter
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from floodline.core.config import settings
from floodline.core.exceptions import FeedFormatInvalid, FeedUnavailable
from floodline.db.session import AsyncSessionLocal
from floodline.models.flood import Flood, FloodSeverity, FloodStatus
from floodline.models.shelter import Shelter, ShelterStatus
from floodline.schemas.gov_feed import (
    GovFloodRecord,
    GovShelterRecord,
    Rejected,
    parse_flood_record,
    parse_shelter_record,
)
from floodline.schemas.sync import SyncResponse, SyncStatus, SyncSummary
from floodline.services.gov_mock_data import MOCK_FLOODS, MOCK_SHELTERS

logger = structlog.get_logger()

FLOODS = "floods"
SHELTERS = "shelters"

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


def _coalesce(target: Any, candidates: Dict[str, Any]) -> None:
    """Overwrite a field only when the candidate value is present and non-empty."""
    for field, value in candidates.items():
        if value is None or value == "":
            continue
        if getattr(target, field) != value:
            setattr(target, field, value)


def _snapshot(target: Any, fields: Tuple[str, ...]) -> Tuple[Any, ...]:
    return tuple(getattr(target, f) for f in fields)


class GovDataService:
    """
    Reconciliation engine for the government flood/shelter feeds.
    """

    # Overridden in tests with httpx.MockTransport
    _transport: Optional[httpx.AsyncBaseTransport] = None

    # Collections with a run in progress in this process
    _in_flight: Set[str] = set()

    FLOOD_MERGE_FIELDS = ("description", "severity", "status")
    SHELTER_MERGE_FIELDS = ("capacity", "facilities", "contact", "status")

    @classmethod
    async def _fetch_feed(cls, url: str) -> List[Any]:
        headers = {
            "Authorization": f"Bearer {settings.GOV_API_KEY}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(transport=cls._transport, timeout=settings.GOV_API_TIMEOUT) as client:
                response = await client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FeedUnavailable(f"Feed request timed out after {settings.GOV_API_TIMEOUT:g}s") from e
        except httpx.HTTPError as e:
            raise FeedUnavailable(f"Feed request failed: {type(e).__name__}") from e

        if not response.is_success:
            logger.error("gov_feed_http_error", url=url, status=response.status_code, body=response.text[:500])
            raise FeedUnavailable(f"Feed responded with HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise FeedFormatInvalid("Feed response is not valid JSON") from e

        if not isinstance(data, list):
            raise FeedFormatInvalid("Feed response is not a list of records")
        return data

    @classmethod
    async def _upsert_flood(cls, session: AsyncSession, record: GovFloodRecord) -> str:
        stmt = (
            select(Flood)
            .where(Flood.title == record.title, Flood.lat == record.lat, Flood.lng == record.lng)
            .limit(1)
        )
        existing = (await session.execute(stmt)).scalars().first()

        if existing is None:
            session.add(Flood(
                title=record.title,
                description=record.description or "",
                severity=record.severity or FloodSeverity.LOW,
                lat=record.lat,
                lng=record.lng,
                status=record.status or FloodStatus.ACTIVE,
            ))
            await session.commit()
            return CREATED

        before = _snapshot(existing, cls.FLOOD_MERGE_FIELDS)
        _coalesce(existing, {
            "description": record.description,
            "severity": record.severity,
            "status": record.status,
        })
        if _snapshot(existing, cls.FLOOD_MERGE_FIELDS) == before:
            return UNCHANGED
        await session.commit()
        return UPDATED

    @classmethod
    async def _upsert_shelter(cls, session: AsyncSession, record: GovShelterRecord) -> str:
        stmt = (
            select(Shelter)
            .where(Shelter.name == record.name, Shelter.lat == record.lat, Shelter.lng == record.lng)
            .limit(1)
        )
        existing = (await session.execute(stmt)).scalars().first()

        if existing is None:
            shelter = Shelter(
                name=record.name,
                capacity=record.capacity or 0,
                current_occupancy=0,
                facilities=record.facilities or "",
                contact=record.contact or "",
                lat=record.lat,
                lng=record.lng,
                status=record.status or ShelterStatus.AVAILABLE,
            )
            shelter.refresh_status(revert_full=False)
            session.add(shelter)
            await session.commit()
            return CREATED

        before = _snapshot(existing, cls.SHELTER_MERGE_FIELDS)
        _coalesce(existing, {
            # A capacity of 0 from the feed means "unknown", not "no room"
            "capacity": record.capacity or None,
            "facilities": record.facilities,
            "contact": record.contact,
            "status": record.status,
        })
        # The feed's status stands unless the shelter is already at capacity
        existing.refresh_status(revert_full=False)
        if _snapshot(existing, cls.SHELTER_MERGE_FIELDS) == before:
            return UNCHANGED
        await session.commit()
        return UPDATED

    @classmethod
    async def _reconcile(
        cls,
        collection: str,
        raw_records: List[Any],
        parse: Callable[[Any], Any],
        upsert: Callable[[AsyncSession, Any], Awaitable[str]],
        session_factory: async_sessionmaker,
    ) -> SyncSummary:
        counts: Counter = Counter()

        async with session_factory() as session:
            for index, raw in enumerate(raw_records):
                record = parse(raw)
                if isinstance(record, Rejected):
                    counts["skipped"] += 1
                    logger.warning("gov_record_skipped", collection=collection, index=index, reason=record.reason)
                    continue

                try:
                    outcome = await upsert(session, record)
                except Exception as e:
                    await session.rollback()
                    counts["failed"] += 1
                    logger.error(
                        "gov_record_failed",
                        collection=collection,
                        index=index,
                        key=record.natural_key,
                        error=str(e),
                    )
                    continue

                counts[outcome] += 1
                logger.debug("gov_record_" + outcome, collection=collection, key=record.natural_key)

        summary = SyncSummary(
            collection=collection,
            status=SyncStatus.COMPLETED,
            received=len(raw_records),
            created=counts[CREATED],
            updated=counts[UPDATED],
            unchanged=counts[UNCHANGED],
            skipped=counts["skipped"],
            failed=counts["failed"],
        )
        summary.message = (
            f"Received {summary.received} {collection} records: {summary.created} created, "
            f"{summary.updated} updated, {summary.unchanged} unchanged, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return summary

    @classmethod
    async def _run(
        cls,
        collection: str,
        url: str,
        parse: Callable[[Any], Any],
        upsert: Callable[[AsyncSession, Any], Awaitable[str]],
        session_factory: Optional[async_sessionmaker] = None,
        records: Optional[List[Any]] = None,
    ) -> SyncSummary:
        """
        Never raises: every failure ends up in the returned summary.
        `records` bypasses the feed (mock seeding).
        """
        session_factory = session_factory or AsyncSessionLocal

        if records is None and not url:
            logger.info("gov_sync_not_configured", collection=collection)
            return SyncSummary(
                collection=collection,
                status=SyncStatus.NOT_CONFIGURED,
                message=f"Government {collection} API URL not configured",
            )

        if collection in cls._in_flight:
            logger.warning("gov_sync_already_running", collection=collection)
            return SyncSummary(
                collection=collection,
                status=SyncStatus.ALREADY_RUNNING,
                message=f"A {collection} sync is already running",
            )

        cls._in_flight.add(collection)
        try:
            if records is None:
                logger.info("gov_sync_started", collection=collection)
                records = await cls._fetch_feed(url)
                logger.info("gov_feed_received", collection=collection, count=len(records))
            summary = await cls._reconcile(collection, records, parse, upsert, session_factory)
        except FeedUnavailable as e:
            logger.error("gov_feed_unavailable", collection=collection, error=str(e))
            summary = SyncSummary(collection=collection, status=SyncStatus.FEED_UNAVAILABLE, message=str(e))
        except FeedFormatInvalid as e:
            logger.error("gov_feed_format_invalid", collection=collection, error=str(e))
            summary = SyncSummary(collection=collection, status=SyncStatus.FEED_FORMAT_INVALID, message=str(e))
        except Exception as e:
            logger.error("gov_sync_failed", collection=collection, error=str(e))
            summary = SyncSummary(
                collection=collection,
                status=SyncStatus.FAILED,
                message=f"Unexpected error while syncing {collection}",
            )
        finally:
            cls._in_flight.discard(collection)

        logger.info(
            "gov_sync_completed",
            collection=collection,
            status=summary.status.value,
            created=summary.created,
            updated=summary.updated,
            unchanged=summary.unchanged,
            skipped=summary.skipped,
            failed=summary.failed,
        )
        return summary

    @classmethod
    async def sync_floods(cls, session_factory: Optional[async_sessionmaker] = None) -> SyncSummary:
        return await cls._run(
            FLOODS, settings.GOV_FLOOD_API_URL, parse_flood_record, cls._upsert_flood, session_factory
        )

    @classmethod
    async def sync_shelters(cls, session_factory: Optional[async_sessionmaker] = None) -> SyncSummary:
        return await cls._run(
            SHELTERS, settings.GOV_SHELTER_API_URL, parse_shelter_record, cls._upsert_shelter, session_factory
        )

    @classmethod
    async def sync_all(cls, session_factory: Optional[async_sessionmaker] = None) -> SyncResponse:
        """Floods then shelters; the shelter run happens whatever the flood outcome."""
        floods = await cls.sync_floods(session_factory)
        shelters = await cls.sync_shelters(session_factory)
        success = floods.success and shelters.success
        if success:
            message = "Government data synced successfully"
        else:
            message = (
                f"Government data sync finished with errors "
                f"(floods: {floods.status.value}, shelters: {shelters.status.value})"
            )
        return SyncResponse(success=success, message=message, floods=floods, shelters=shelters)

    @classmethod
    async def seed_mock_data(cls, session_factory: Optional[async_sessionmaker] = None) -> SyncResponse:
        floods = await cls._run(
            FLOODS, "", parse_flood_record, cls._upsert_flood, session_factory, records=MOCK_FLOODS
        )
        shelters = await cls._run(
            SHELTERS, "", parse_shelter_record, cls._upsert_shelter, session_factory, records=MOCK_SHELTERS
        )
        success = floods.success and shelters.success
        message = "Mock flood and shelter data seeded" if success else "Mock seed failed"
        return SyncResponse(success=success, message=message, floods=floods, shelters=shelters)
