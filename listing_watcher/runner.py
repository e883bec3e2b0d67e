import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol, Sequence

import httpx

from . import templates
from .config import Settings
from .exchanges import base as exchanges_base
from .exchanges import build_exchanges
from .listings import detect_new_listings, prune_listings
from .state import (
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    ExchangeSnapshot,
    JsonStateStore,
    ListingEvent,
    ListingLog,
    RunStatus,
    now_utc,
)

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class StateStore(Protocol):
    def read_snapshot(self) -> ExchangeSnapshot: ...
    def write_snapshot(self, snapshot: ExchangeSnapshot) -> None: ...
    def read_listing_log(self) -> ListingLog: ...
    def write_listing_log(self, listing_log: ListingLog) -> None: ...
    def read_status(self) -> RunStatus: ...
    def write_status(self, status: RunStatus) -> None: ...


@dataclass(slots=True)
class RunReport:
    status: RunStatus
    snapshot: ExchangeSnapshot
    listing_log: ListingLog
    new_listings: List[ListingEvent] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        return self.status.errors


@asynccontextmanager
async def http_client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    timeout = httpx.Timeout(settings.request_timeout)
    headers = {
        "User-Agent": "cex-listings-watcher/1.0",
        "Accept": "application/json,text/plain,*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
    }
    async with httpx.AsyncClient(timeout=timeout, headers=headers, proxy=settings.http_proxy, http2=True) as client:
        yield client


def overall_status(error_count: int, exchange_count: int) -> str:
    if error_count == 0:
        return STATUS_SUCCESS
    if error_count < exchange_count:
        return STATUS_PARTIAL
    return STATUS_FAILED


async def _poll_exchange(
    exchange: exchanges_base.Exchange,
    previous: Optional[List[str]],
    *,
    client: httpx.AsyncClient,
    clock: Clock,
    seed_empty: bool,
) -> tuple[List[str], List[ListingEvent]]:
    """Fetch one exchange and diff it against its previous symbols. Fetch errors propagate."""

    log.info("Fetching %s listings...", exchange.name)
    try:
        current = list(await exchange.fetch(client))
    except Exception as exc:
        log.warning("✗ %s fetch failed: %s", exchange.name, exc)
        raise
    log.info("✓ %s: %d trading pairs", exchange.name, len(current))

    if not previous and seed_empty:
        log.info("Initial snapshot stored for %s (%d pairs)", exchange.name, len(current))
        return current, []
    events = detect_new_listings(previous or [], current, exchange.name, detected_at=clock())
    if events:
        log.info(templates.format_detected(exchange.name, events))
        for event in events:
            log.info(templates.format_listing(event))
    return current, events


async def update_listings(
    store: StateStore,
    exchanges: Sequence[exchanges_base.Exchange],
    client: httpx.AsyncClient,
    *,
    retention_days: int = 30,
    seed_empty: bool = False,
    clock: Clock = now_utc,
) -> RunReport:
    """Run one update: poll every exchange, record new listings and the run status.

    A failing exchange keeps its previous symbols and is reported in the status
    errors. Any other failure writes a ``failed`` status and is re-raised.
    """

    started = clock()
    errors: List[str] = []
    previous_status: Optional[RunStatus] = None

    for line in templates.format_banner("Starting CEX Listings Update"):
        log.info(line)

    try:
        old_snapshot = store.read_snapshot()
        old_log = store.read_listing_log()
        previous_status = store.read_status()

        symbols: Dict[str, List[str]] = {key: list(value) for key, value in old_snapshot.exchanges.items()}
        new_listings: List[ListingEvent] = []

        for exchange in exchanges:
            previous = old_snapshot.exchanges.get(exchange.key)
            try:
                current, events = await _poll_exchange(
                    exchange, previous, client=client, clock=clock, seed_empty=seed_empty
                )
            except Exception as exc:  # noqa: BLE001
                errors.append(f"{exchange.name}: {exc}")
                symbols[exchange.key] = list(previous or [])
                continue
            symbols[exchange.key] = current
            new_listings.extend(events)

        snapshot = ExchangeSnapshot(last_updated=clock(), exchanges=symbols)
        store.write_snapshot(snapshot)

        checked = clock()
        listing_log = ListingLog(
            last_checked=checked,
            listings=prune_listings([*old_log.listings, *new_listings], retention_days, checked),
        )
        store.write_listing_log(listing_log)

        status = RunStatus(
            last_run=started,
            last_successful_run=started if not errors else previous_status.last_successful_run,
            status=overall_status(len(errors), len(exchanges)),
            errors=errors,
        )
        store.write_status(status)

        for line in templates.format_summary(len(new_listings), errors):
            log.info(line)
        return RunReport(status=status, snapshot=snapshot, listing_log=listing_log, new_listings=new_listings)
    except Exception as exc:
        log.error("✗ Critical error: %s", exc)
        store.write_status(
            RunStatus(
                last_run=started,
                last_successful_run=_carried_success(store, previous_status),
                status=STATUS_FAILED,
                errors=[f"Critical: {exc}"],
            )
        )
        raise


def _carried_success(store: StateStore, previous_status: Optional[RunStatus]) -> Optional[datetime]:
    if previous_status is not None:
        return previous_status.last_successful_run
    try:
        return store.read_status().last_successful_run
    except Exception as exc:  # noqa: BLE001
        log.warning("Previous status unreadable, last successful run unknown: %s", exc)
        return None


async def run(settings: Settings) -> RunReport:
    store = JsonStateStore(settings.snapshot_file, settings.listings_file, settings.status_file)
    exchanges = build_exchanges()
    async with http_client(settings) as client:
        return await update_listings(
            store,
            exchanges,
            client,
            retention_days=settings.retention_days,
            seed_empty=settings.seed_empty_snapshots,
        )
