import json
from pathlib import Path

from mws_feeds.cli import main

SUCCESS_REPORT = (
    "<Message><ProcessingReport><ProcessingSummary>"
    "<MessagesProcessed>5</MessagesProcessed><MessagesSuccessful>5</MessagesSuccessful>"
    "<MessagesWithError>0</MessagesWithError><MessagesWithWarning>0</MessagesWithWarning>"
    "</ProcessingSummary></ProcessingReport></Message>"
)


def _configure_env(tmp_path: Path, monkeypatch) -> Path:
    mock_dir = tmp_path / "mock"
    mock_dir.mkdir()
    monkeypatch.setenv("FEEDS_DB_URL", f"sqlite:///{tmp_path / 'feeds.db'}")
    monkeypatch.setenv("FEEDS_OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("MWS_MOCK_DIR", str(mock_dir))
    for name in ("MWS_MERCHANT_ID", "MWS_ACCESS_KEY_ID", "MWS_SECRET_KEY"):
        monkeypatch.setenv(name, "")
    return mock_dir


def test_result_in_mock_mode_prints_summary_and_saves(tmp_path, monkeypatch, capsys):
    mock_dir = _configure_env(tmp_path, monkeypatch)
    (mock_dir / "feed_result.xml").write_text(SUCCESS_REPORT, encoding="utf-8")
    saved = tmp_path / "saved.xml"

    code = main(["result", "--id", "1234", "--mock", "feed_result.xml", "--save", str(saved)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["feed_submission_id"] == "1234"
    assert payload["code"] == "success"
    assert payload["messages"] == ["Success."]
    assert saved.read_text(encoding="utf-8") == SUCCESS_REPORT

    assert main(["history", "show", "--id", "1"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["feed_submission_id"] == "1234"
    assert shown["code"] == "success"


def test_result_rejects_non_numeric_id(tmp_path, monkeypatch, capsys):
    _configure_env(tmp_path, monkeypatch)
    code = main(["result", "--id", "abc", "--mock", "feed_result.xml"])
    assert code == 1
    assert "numeric" in capsys.readouterr().err


def test_result_requires_credentials_outside_mock_mode(tmp_path, monkeypatch, capsys):
    _configure_env(tmp_path, monkeypatch)
    code = main(["result", "--id", "1234"])
    assert code == 1
    assert "MWS_MERCHANT_ID" in capsys.readouterr().err


def test_history_list_command_runs(tmp_path, monkeypatch, capsys):
    _configure_env(tmp_path, monkeypatch)
    assert main(["history", "list"]) == 0
    assert "No feed results recorded" in capsys.readouterr().out


def test_result_reports_fetch_failure_detail(tmp_path, monkeypatch, capsys):
    _configure_env(tmp_path, monkeypatch)
    code = main(["result", "--id", "1234", "--mock", "missing.xml"])
    assert code == 1
    assert "Failed to fetch result for feed 1234: No mock response available" in capsys.readouterr().err
