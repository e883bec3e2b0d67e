"""State documents and their JSON persistence."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import StateDocumentError

log = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial_success"
STATUS_FAILED = "failed"
STATUS_NEVER_RUN = "never_run"
STATUSES = (STATUS_SUCCESS, STATUS_PARTIAL, STATUS_FAILED, STATUS_NEVER_RUN)


def to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision, which the documents do not store."""

    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def now_utc() -> datetime:
    return to_millis(datetime.now(timezone.utc))


def format_timestamp(moment: Optional[datetime]) -> Optional[str]:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_timestamp(raw: object) -> Optional[datetime]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise StateDocumentError(f"Expected an ISO timestamp, got {raw!r}")
    try:
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise StateDocumentError(f"Invalid timestamp {raw!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _symbols(raw: object, exchange: str) -> List[str]:
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise StateDocumentError(f"Snapshot entry for {exchange!r} must be a list of strings")
    return list(raw)


@dataclass(frozen=True, slots=True)
class ListingEvent:
    """A symbol seen on an exchange for the first time."""

    exchange: str
    symbol: str
    detected_at: datetime

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "symbol": self.symbol,
            "detectedAt": format_timestamp(self.detected_at),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "ListingEvent":
        if not isinstance(payload, Mapping):
            raise StateDocumentError(f"Listing entry must be an object, got {payload!r}")
        exchange = payload.get("exchange")
        symbol = payload.get("symbol")
        if not isinstance(exchange, str) or not isinstance(symbol, str):
            raise StateDocumentError(f"Listing entry is missing exchange or symbol: {payload!r}")
        detected_at = parse_timestamp(payload.get("detectedAt"))
        if detected_at is None:
            raise StateDocumentError(f"Listing entry is missing detectedAt: {payload!r}")
        return cls(exchange=exchange, symbol=symbol, detected_at=detected_at)


@dataclass(slots=True)
class ExchangeSnapshot:
    last_updated: Optional[datetime] = None
    exchanges: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "lastUpdated": format_timestamp(self.last_updated),
            "exchanges": {key: list(symbols) for key, symbols in self.exchanges.items()},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "ExchangeSnapshot":
        exchanges = payload.get("exchanges")
        if not isinstance(exchanges, dict):
            raise StateDocumentError("Snapshot document has no 'exchanges' mapping")
        return cls(
            last_updated=parse_timestamp(payload.get("lastUpdated")),
            exchanges={str(key): _symbols(value, key) for key, value in exchanges.items()},
        )


@dataclass(slots=True)
class ListingLog:
    last_checked: Optional[datetime] = None
    listings: List[ListingEvent] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "lastChecked": format_timestamp(self.last_checked),
            "listings": [event.to_dict() for event in self.listings],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "ListingLog":
        listings = payload.get("listings")
        if not isinstance(listings, list):
            raise StateDocumentError("Listing log document has no 'listings' list")
        return cls(
            last_checked=parse_timestamp(payload.get("lastChecked")),
            listings=[ListingEvent.from_dict(item) for item in listings],
        )


@dataclass(slots=True)
class RunStatus:
    last_run: Optional[datetime] = None
    last_successful_run: Optional[datetime] = None
    status: str = STATUS_NEVER_RUN
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "lastRun": format_timestamp(self.last_run),
            "lastSuccessfulRun": format_timestamp(self.last_successful_run),
            "status": self.status,
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "RunStatus":
        status = payload.get("status", STATUS_NEVER_RUN)
        if status not in STATUSES:
            raise StateDocumentError(f"Unknown run status {status!r}")
        errors = payload.get("errors") or []
        if not isinstance(errors, list):
            raise StateDocumentError("Status document 'errors' must be a list")
        return cls(
            last_run=parse_timestamp(payload.get("lastRun")),
            last_successful_run=parse_timestamp(payload.get("lastSuccessfulRun")),
            status=str(status),
            errors=[str(item) for item in errors],
        )


class JsonStateStore:
    """Reads and rewrites the three JSON documents of a run."""

    def __init__(self, snapshot_path: Path, listings_path: Path, status_path: Path) -> None:
        self.snapshot_path = Path(snapshot_path)
        self.listings_path = Path(listings_path)
        self.status_path = Path(status_path)

    # ------------------------- persistence helpers -------------------------
    @staticmethod
    def _read(path: Path) -> dict:
        try:
            raw = json.loads(path.read_text("utf-8"))
        except FileNotFoundError as exc:
            raise StateDocumentError(f"{path} does not exist") from exc
        except (OSError, ValueError) as exc:
            raise StateDocumentError(f"Error reading {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StateDocumentError(f"{path} must contain a JSON object")
        return raw

    @staticmethod
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)
        log.info("Updated %s", path.name)

    # ------------------------------ documents --------------------------------
    def read_snapshot(self) -> ExchangeSnapshot:
        return ExchangeSnapshot.from_dict(self._read(self.snapshot_path))

    def write_snapshot(self, snapshot: ExchangeSnapshot) -> None:
        self._write(self.snapshot_path, snapshot.to_dict())

    def read_listing_log(self) -> ListingLog:
        return ListingLog.from_dict(self._read(self.listings_path))

    def write_listing_log(self, listing_log: ListingLog) -> None:
        self._write(self.listings_path, listing_log.to_dict())

    def read_status(self) -> RunStatus:
        if not self.status_path.exists():
            return RunStatus()
        return RunStatus.from_dict(self._read(self.status_path))

    def write_status(self, status: RunStatus) -> None:
        self._write(self.status_path, status.to_dict())


def init_state(store: JsonStateStore, exchange_keys: Iterable[str]) -> List[Path]:
    """Create whichever state documents are missing. Returns the created paths."""

    created: List[Path] = []
    if not store.snapshot_path.exists():
        store.write_snapshot(ExchangeSnapshot(exchanges={key: [] for key in exchange_keys}))
        created.append(store.snapshot_path)
    if not store.listings_path.exists():
        store.write_listing_log(ListingLog())
        created.append(store.listings_path)
    if not store.status_path.exists():
        store.write_status(RunStatus())
        created.append(store.status_path)
    return created
