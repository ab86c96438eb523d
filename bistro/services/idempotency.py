"""Claim-then-fulfill idempotency for order submissions.

A client token is hashed and inserted into ``idempotency_keys`` before any
work starts. The unique constraint on ``key_hash`` makes that insert the
atomic reservation: whoever commits it first owns the key, every other
request bearing the same token either replays the stored response or is told
the original is still in flight. Rows expire after the configured TTL.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.core.errors import IdempotencyInProgress, IdempotencyKeyReused
from bistro.models.idempotency import IdempotencyKey
from bistro.utils.time import as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredResponse:
    status_code: int
    body: str


def hash_key(token: str) -> str:
    return hashlib.sha256(token.strip().encode("utf-8")).hexdigest()


def fingerprint(payload: dict[str, Any]) -> str:
    """Stable hash of a request payload, independent of key order."""
    canonical: str = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _get(db: Session, key_hash: str) -> IdempotencyKey | None:
    return db.scalar(select(IdempotencyKey).where(IdempotencyKey.key_hash == key_hash))


def _replay(record: IdempotencyKey, request_fingerprint: str) -> StoredResponse:
    if record.request_fingerprint != request_fingerprint:
        raise IdempotencyKeyReused()
    if not record.is_fulfilled:
        raise IdempotencyInProgress()
    logger.info("[IDEMPOTENCY] Replaying stored response for key %s", record.key_hash[:12])
    return StoredResponse(status_code=int(record.status_code or 200), body=str(record.response_body))


def claim(db: Session, token: str, request_fingerprint: str, now: datetime | None = None) -> StoredResponse | None:
    """Reserve ``token`` for this request.

    Returns None when the caller now owns the key and must do the work, or the
    stored response when an earlier request already finished with it.
    """
    now = now or utc_now()
    key_hash: str = hash_key(token)

    existing: IdempotencyKey | None = _get(db, key_hash)
    if existing is not None and as_utc(existing.expires_at) <= now:
        logger.info("[IDEMPOTENCY] Key %s expired; reclaiming", key_hash[:12])
        db.execute(
            delete(IdempotencyKey)
            .where(IdempotencyKey.id == existing.id, IdempotencyKey.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        db.expunge(existing)
        db.commit()
        existing = None

    if existing is None:
        db.add(
            IdempotencyKey(
                key_hash=key_hash,
                request_fingerprint=request_fingerprint,
                created_at=now,
                expires_at=now + timedelta(seconds=settings.idempotency_ttl_seconds),
            )
        )
        try:
            db.commit()
            return None
        except IntegrityError:
            db.rollback()
            logger.info("[IDEMPOTENCY] Lost claim race for key %s", key_hash[:12])
            existing = _get(db, key_hash)
            if existing is None:
                raise IdempotencyInProgress()

    return _replay(existing, request_fingerprint)


def fulfill(db: Session, token: str, status_code: int, body: str) -> None:
    """Store the final response under a key claimed by this request."""
    record: IdempotencyKey | None = _get(db, hash_key(token))
    if record is None:
        logger.warning("[IDEMPOTENCY] Claimed key vanished before the response was stored")
        return
    record.status_code = status_code
    record.response_body = body
    db.commit()


def release(db: Session, token: str) -> None:
    """Drop an unfulfilled claim so the client can retry after a server failure."""
    db.execute(
        delete(IdempotencyKey).where(
            IdempotencyKey.key_hash == hash_key(token),
            IdempotencyKey.response_body.is_(None),
        ).execution_options(synchronize_session=False)
    )
    db.commit()


def purge_expired(db: Session, now: datetime | None = None) -> int:
    result = db.execute(
        delete(IdempotencyKey)
        .where(IdempotencyKey.expires_at <= (now or utc_now()))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return int(result.rowcount or 0)
