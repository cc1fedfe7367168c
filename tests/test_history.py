import json
from pathlib import Path

from mws_feeds.db import create_session_factory
from mws_feeds.feed_result import FeedResultFetcher
from mws_feeds.history import get_result_record, list_results, record_result
from mws_feeds.models import Base
from mws_feeds.mws_api import MWSClient

ERROR_REPORT = (
    b"<AmazonEnvelope><Message><ProcessingReport>"
    b"<ProcessingSummary><MessagesProcessed>2</MessagesProcessed><MessagesSuccessful>0</MessagesSuccessful>"
    b"<MessagesWithError>2</MessagesWithError><MessagesWithWarning>0</MessagesWithWarning></ProcessingSummary>"
    b"<Result><ResultDescription>bad SKU</ResultDescription></Result>"
    b"<Result><ResultDescription>bad price</ResultDescription></Result>"
    b"</ProcessingReport></Message></AmazonEnvelope>"
)


def test_record_and_read_back_result(tmp_path: Path):
    session_factory, engine = create_session_factory(f"sqlite:///{tmp_path / 'feeds.db'}")
    Base.metadata.create_all(bind=engine)

    (tmp_path / "report.xml").write_bytes(ERROR_REPORT)
    client = MWSClient(mock_mode=True, mock_files=["report.xml"], mock_dir=tmp_path)
    fetcher = FeedResultFetcher(client, feed_id=555)
    assert fetcher.fetch_result()

    db = session_factory()
    record = record_result(db, fetcher, saved_path=tmp_path / "saved.xml")

    assert record.id > 0
    stored = get_result_record(db, record.id)
    assert stored.feed_submission_id == "555"
    assert stored.code == "error"
    assert json.loads(stored.messages) == ["bad SKU", "bad price"]
    assert stored.raw_size == len(ERROR_REPORT)
    assert stored.mock is True
    assert stored.saved_path == str(tmp_path / "saved.xml")

    assert [r.id for r in list_results(db)] == [record.id]
    assert get_result_record(db, record.id + 1) is None
    db.close()
