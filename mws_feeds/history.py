"""Local history of fetched feed results."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from .feed_result import FeedResultFetcher
from .models import FeedResultRecord

logger = logging.getLogger(__name__)


def record_result(
    db: Session,
    fetcher: FeedResultFetcher,
    saved_path: Optional[Union[str, Path]] = None,
) -> FeedResultRecord:
    if fetcher.feed_id is None:
        raise RuntimeError("Cannot record a result without a feed submission ID")

    raw_feed = fetcher.get_raw_feed() or b""
    summary = fetcher.get_result()

    record = FeedResultRecord(
        feed_submission_id=fetcher.feed_id,
        code=summary.code.value if summary else None,
        messages=json.dumps(summary.messages if summary else [], ensure_ascii=False),
        raw_size=len(raw_feed),
        saved_path=str(saved_path) if saved_path else None,
        mock=fetcher.mock_mode,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("Recorded result #%s for feed %s", record.id, record.feed_submission_id)
    return record


def list_results(db: Session, limit: int = 20) -> List[FeedResultRecord]:
    return (
        db.query(FeedResultRecord)
        .order_by(FeedResultRecord.created_at.desc(), FeedResultRecord.id.desc())
        .limit(limit)
        .all()
    )


def get_result_record(db: Session, record_id: int) -> Optional[FeedResultRecord]:
    return db.query(FeedResultRecord).filter(FeedResultRecord.id == record_id).first()
