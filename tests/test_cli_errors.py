from __future__ import annotations

import logging

import pytest

from aiprimer_core.errors import InsufficientData, InvalidRange, NotFitted
from aiprimer_r3e.catalog import CatalogError
from aiprimer_r3e.cli.errors import EXIT_STATUS, CliError, category_for
from aiprimer_r3e.ingestion import DocumentError


@pytest.mark.parametrize(
    ("category", "status"),
    [("runtime", 1), ("usage", 2), ("io", 3), ("not_found", 4), ("unexpected", 1)],
)
def test_category_selects_exit_status(category: str, status: int) -> None:
    assert CliError("boom", category=category).status_code == status


@pytest.mark.parametrize(
    ("exc", "category"),
    [
        pytest.param(NotFitted("10", "1"), "not_found", id="not-fitted"),
        pytest.param(InvalidRange("inverted"), "usage", id="invalid-range"),
        pytest.param(DocumentError("broken xml"), "io", id="document"),
        pytest.param(CatalogError("broken dump"), "io", id="catalog"),
        pytest.param(FileNotFoundError("gone"), "not_found", id="missing-file"),
        pytest.param(PermissionError("denied"), "io", id="os-error"),
        pytest.param(InsufficientData("two points"), "runtime", id="fallback"),
    ],
)
def test_engine_failures_map_to_categories(exc: BaseException, category: str) -> None:
    assert category_for(exc) == category
    assert CliError.wrap(exc).status_code == EXIT_STATUS[category]


def test_context_values_are_made_serialisable() -> None:
    error = CliError("boom", context={"path": object(), "count": 3, "flag": None})

    assert isinstance(error.context["path"], str)
    assert error.context["count"] == 3
    assert error.as_dict()["context"]["flag"] is None
    assert error.as_dict()["status_code"] == 1


def test_new_error_is_not_logged() -> None:
    error = CliError("missing", category="not_found", context={"path": "x.xml"})

    assert error.status_code == 4
    assert error.message == "missing"
    assert not error.logged


def test_log_emits_once(caplog: pytest.LogCaptureFixture) -> None:
    error = CliError("bad input", category="usage")

    with caplog.at_level(logging.ERROR, logger="aiprimer_r3e"):
        assert error.log() is error
        error.log()

    assert error.logged
    records = [record for record in caplog.records if record.getMessage() == "bad input"]
    assert len(records) == 1
    assert records[0].event == "cli.error"
    assert records[0].category == "usage"
    assert records[0].status_code == 2


def test_wrap_keeps_cause_traceback_and_custom_message(
    caplog: pytest.LogCaptureFixture,
) -> None:
    cause = NotFitted("10", "2")

    with caplog.at_level(logging.ERROR, logger="aiprimer_r3e"):
        error = CliError.wrap(cause, "No accepted curve.", context={"track_id": "2"})

    assert error.message == "No accepted curve."
    assert error.context == {"track_id": "2"}
    assert error.logged
    (record,) = caplog.records
    assert record.exc_info[1] is cause


def test_wrap_category_override() -> None:
    error = CliError.wrap(ValueError("not yaml"), category="usage")

    assert error.status_code == 2
    assert error.message == "not yaml"


def test_log_uses_given_logger(caplog: pytest.LogCaptureFixture) -> None:
    target = logging.getLogger("aiprimer_r3e.tests")
    with caplog.at_level(logging.ERROR, logger="aiprimer_r3e.tests"):
        CliError("custom").log(target=target)

    assert [record.name for record in caplog.records] == ["aiprimer_r3e.tests"]
