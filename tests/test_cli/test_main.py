"""
Tests for CLI argument parsing and command dispatch.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from main import build_parser, run_command


def test_feedback_arguments():
    args = build_parser().parse_args([
        "feedback",
        "--topic", "Q3 results",
        "--goal", "More budget",
        "--point", "Revenue up",
        "--point", "Costs down",
        "--pitch", "Good morning everyone."
    ])

    assert args.command == "feedback"
    assert args.points == ["Revenue up", "Costs down"]


def test_command_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.asyncio
async def test_feedback_dispatch():
    service = MagicMock()
    service.submit_practice = AsyncMock(return_value={"sessionId": "s1"})
    args = build_parser().parse_args([
        "feedback", "--topic", "T", "--goal", "G", "--point", "P", "--pitch", "A long enough pitch"
    ])

    result = await run_command(args, service)

    assert result == {"sessionId": "s1"}
    _, payload = service.submit_practice.call_args[0]
    assert payload["mainPoints"] == ["P"]


@pytest.mark.asyncio
async def test_export_dispatch():
    service = MagicMock()
    service.export_history.return_value = "out/history.csv"
    args = build_parser().parse_args(["export-history", "--output", "out/history.csv"])

    assert await run_command(args, service) == {"output": "out/history.csv"}


@pytest.mark.asyncio
async def test_history_dispatch():
    service = MagicMock()
    service.list_history.return_value = {"sessions": []}
    args = build_parser().parse_args([
        "history", "--page", "2", "--limit", "5", "--date-to", "2024-06-10", "--min-score", "7"
    ])

    assert await run_command(args, service) == {"sessions": []}
    service.list_history.assert_called_once_with(
        None,
        page=2,
        limit=5,
        date_from=None,
        date_to="2024-06-10",
        min_score=7,
        max_score=None
    )


def test_progress_commands_skip_router(monkeypatch):
    import main

    monkeypatch.setattr("sys.argv", ["main.py", "--data-root", "unused", "progress"])
    monkeypatch.setattr(main, "setup_logging", lambda level: None)
    create_router = MagicMock()
    monkeypatch.setattr(main, "create_router", create_router)
    monkeypatch.setattr(main, "JsonSessionStore", MagicMock())
    service_cls = MagicMock()
    service_cls.return_value.get_progress.return_value = {"totalSessions": 0}
    monkeypatch.setattr(main, "PracticeService", service_cls)

    with pytest.raises(SystemExit) as exc_info:
        main.main()

    assert exc_info.value.code == 0
    create_router.assert_not_called()
    assert service_cls.call_args.kwargs["router"] is None
