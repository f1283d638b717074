"""Persist discovered businesses in chunks, degrading to per-row inserts."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List, Optional, Tuple

from business_ingest.core import db
from business_ingest.etl.dedup import filter_existing
from business_ingest.models import BusinessDraft, PersistedBusiness

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 100


class InsertOutcome(enum.Enum):
    SAVED = "saved"
    DUPLICATE = "duplicate"
    FAILED = "failed"


def insert_one(draft: BusinessDraft, storage=db) -> Tuple[InsertOutcome, Optional[PersistedBusiness]]:
    """Insert a single draft unless a row with the same name exists."""
    try:
        if storage.find_business_id(draft.name) is not None:
            return InsertOutcome.DUPLICATE, None
        new_id = storage.insert_business(draft.to_row())
    except Exception as exc:  # noqa: BLE001
        if storage.is_unique_violation(exc):
            logger.info("Duplicate skipped: %s", draft.name)
            return InsertOutcome.DUPLICATE, None
        logger.warning("Failed to insert %s: %s", draft.name, exc)
        return InsertOutcome.FAILED, None
    return InsertOutcome.SAVED, PersistedBusiness(id=new_id, draft=draft)


def save_individually(drafts: List[BusinessDraft], storage=db) -> List[PersistedBusiness]:
    saved: List[PersistedBusiness] = []
    for draft in drafts:
        outcome, persisted = insert_one(draft, storage)
        if outcome is InsertOutcome.SAVED:
            saved.append(persisted)
            if len(saved) % 10 == 0:
                logger.info("Individual progress: %d saved", len(saved))
    return saved


def _first_per_name(drafts: List[BusinessDraft]) -> List[BusinessDraft]:
    seen = set()
    unique = []
    for draft in drafts:
        if not draft.name or draft.name in seen:
            continue
        seen.add(draft.name)
        unique.append(draft)
    return unique


def save_chunk(chunk: List[BusinessDraft], storage=db) -> List[PersistedBusiness]:
    """Save one chunk: dedup against storage, bulk insert, fall back per row."""
    if not chunk:
        return []

    unique = _first_per_name(filter_existing(chunk, storage.find_existing_names))
    if not unique:
        logger.info("All %d businesses already exist in database", len(chunk))
        return []

    try:
        ids = storage.insert_businesses([draft.to_row() for draft in unique])
    except Exception as exc:  # noqa: BLE001
        logger.error("Batch insert failed, falling back to individual inserts: %s", exc)
        return save_individually(chunk, storage)

    logger.info("Inserted %d unique businesses", len(unique))
    return [PersistedBusiness(id=new_id, draft=draft) for new_id, draft in zip(ids, unique)]


def save_all_businesses(
    candidates: List[BusinessDraft],
    *,
    chunk_size: int = 10,
    delay_seconds: float = 0.3,
    sleep: Callable[[float], None] = time.sleep,
    storage=db,
) -> List[PersistedBusiness]:
    """Write every candidate and return the rows that ended up persisted."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")

    saved: List[PersistedBusiness] = []
    logger.info("Processing %d businesses in chunks of %d", len(candidates), chunk_size)

    for start in range(0, len(candidates), chunk_size):
        chunk_number = start // chunk_size + 1
        chunk = candidates[start:start + chunk_size]
        try:
            chunk_saved = save_chunk(chunk, storage)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error saving chunk %d: %s", chunk_number, exc)
            chunk_saved = []

        saved.extend(chunk_saved)
        logger.info("Chunk %d: saved %d businesses", chunk_number, len(chunk_saved))
        if start and start % PROGRESS_EVERY == 0:
            logger.info("Progress: %d/%d processed", start, len(candidates))

        if start + chunk_size < len(candidates):
            sleep(delay_seconds)

    logger.info("Total saved to database: %d/%d", len(saved), len(candidates))
    return saved
