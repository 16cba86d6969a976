"""Tests for the assertion chain and its state machine."""

import json
from datetime import timedelta

import pytest

from assay.assertions import (
    Assert,
    ChainState,
    contains,
    is_,
    is_between,
    is_less_than,
    is_not,
    schema,
)
from assay.errors import AssertionFailures, ChainCompletedError, UnsupportedAssertionError
from assay.reporting import LogFormat, LogMode, LogSettings

FAIL_FAST = LogSettings(LogMode.FAIL_FAST, LogFormat.JSON)
COLLECT_ALL = LogSettings(LogMode.ALL_OUTCOMES, LogFormat.JSON)


def records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def attach_mixed(chain):
    """Pass, fail, pass, fail against the 201 snapshot."""
    return (
        chain.status(is_(201))
        .status(is_between(400, 499))
        .json_path("$.id", is_(101))
        .response_time(is_less_than(100))
    )


class TestFailFast:
    def test_halts_at_first_failure(self, created_snapshot, stream):
        chain = attach_mixed(Assert(created_snapshot, FAIL_FAST, stream=stream))
        assert chain.state is ChainState.HALTED
        assert chain.halted
        assert len(chain.outcomes) == 2
        assert [o.passed for o in chain.outcomes] == [True, False]

    def test_reports_only_the_failure(self, created_snapshot, stream):
        attach_mixed(Assert(created_snapshot, FAIL_FAST, stream=stream))
        lines = records(stream)
        assert len(lines) == 1
        assert lines[0]["result"] == "failed"
        assert lines[0]["predicate"] == "should be between"

    def test_skipped_assertions_are_counted(self, created_snapshot, stream):
        report = attach_mixed(Assert(created_snapshot, FAIL_FAST, stream=stream)).finish()
        assert report.halted
        assert report.skipped == 2
        assert report.total == 2
        assert report.failed == 1

    def test_all_passing_chain_reports_nothing(self, created_snapshot, stream):
        chain = Assert(created_snapshot, FAIL_FAST, stream=stream)
        report = chain.status(is_(201)).json_path("$.id", is_(101)).finish()
        assert report.ok
        assert stream.getvalue() == ""

    def test_halted_chain_still_validates_attachments(self, created_snapshot, stream):
        chain = Assert(created_snapshot, FAIL_FAST, stream=stream).status(is_(500))
        assert chain.halted
        with pytest.raises(UnsupportedAssertionError):
            chain.status(contains(5))

    def test_default_settings_are_fail_fast(self, created_snapshot, stream):
        chain = Assert(created_snapshot, stream=stream)
        assert chain.log_settings.fail_fast
        chain.status(is_(500)).status(is_(201))
        assert len(chain.outcomes) == 1


class TestCollectAll:
    def test_evaluates_everything(self, created_snapshot, stream):
        chain = attach_mixed(Assert(created_snapshot, COLLECT_ALL, stream=stream))
        assert chain.state is ChainState.RUNNING
        assert len(chain.outcomes) == 4

    def test_reports_every_outcome_in_order(self, created_snapshot, stream):
        attach_mixed(Assert(created_snapshot, COLLECT_ALL, stream=stream))
        lines = records(stream)
        assert [line["result"] for line in lines] == ["passed", "failed", "passed", "failed"]
        assert [line["part"] for line in lines] == [
            "status code", "status code", "json path", "response time",
        ]

    def test_report_counts(self, created_snapshot, stream):
        report = attach_mixed(Assert(created_snapshot, COLLECT_ALL, stream=stream)).finish()
        assert (report.total, report.passed, report.failed, report.skipped) == (4, 2, 2, 0)
        assert not report.halted
        assert not report.ok

    def test_raise_for_failures(self, created_snapshot, stream):
        report = attach_mixed(Assert(created_snapshot, COLLECT_ALL, stream=stream)).finish()
        with pytest.raises(AssertionFailures) as info:
            report.raise_for_failures()
        assert len(info.value.outcomes) == 2
        assert "2 assertion(s) failed" in str(info.value)

    def test_passing_report_does_not_raise(self, created_snapshot, stream):
        report = Assert(created_snapshot, COLLECT_ALL, stream=stream).status(is_(201)).finish()
        report.raise_for_failures()


class TestCompletion:
    def test_finish_completes(self, created_snapshot, stream):
        chain = Assert(created_snapshot, COLLECT_ALL, stream=stream)
        chain.finish()
        assert chain.state is ChainState.COMPLETED

    def test_attach_after_completion_raises(self, created_snapshot, stream):
        chain = Assert(created_snapshot, COLLECT_ALL, stream=stream)
        chain.finish()
        with pytest.raises(ChainCompletedError):
            chain.status(is_(201))
        with pytest.raises(ChainCompletedError):
            chain.finish()

    def test_assert_fn_sees_snapshot_and_completes(self, created_snapshot, stream):
        seen = []
        chain = Assert(created_snapshot, COLLECT_ALL, stream=stream).status(is_(201))
        report = chain.assert_fn(lambda snapshot: seen.append(snapshot.body))
        assert seen == [{"id": 101}]
        assert report.total == 1
        assert chain.state is ChainState.COMPLETED

    def test_assert_fn_runs_after_halt(self, created_snapshot, stream):
        calls = []
        chain = Assert(created_snapshot, FAIL_FAST, stream=stream).status(is_(500))
        chain.assert_fn(calls.append)
        assert calls == [created_snapshot]

    def test_assert_fn_exceptions_propagate(self, created_snapshot, stream):
        def check(snapshot):
            assert snapshot.status == 200

        chain = Assert(created_snapshot, COLLECT_ALL, stream=stream)
        with pytest.raises(AssertionError):
            chain.assert_fn(check)
        # The chain is left open when the callback raises
        assert chain.state is ChainState.RUNNING

    def test_custom_callback_cannot_mutate_snapshot(self, created_snapshot, stream):
        def meddle(snapshot):
            snapshot.body["id"] = 0

        Assert(created_snapshot, COLLECT_ALL, stream=stream).assert_fn(meddle)
        assert created_snapshot.body == {"id": 101}


class TestFromResponse:
    @pytest.mark.asyncio
    async def test_builds_chain_from_capability(self, fake_response, stream):
        response = fake_response(200, [("content-type", "application/json")], {"items": [1, 2]})
        chain = await Assert.from_response(response, timedelta(milliseconds=8), COLLECT_ALL, stream=stream)
        report = (
            chain.status(is_(200))
            .header("content-type", is_("application/json"))
            .json_path("$.items", contains(2))
            .json_body(schema({"type": "object"}))
            .json_body(is_not({}))
            .response_time(is_less_than(timedelta(seconds=1)))
            .finish()
        )
        assert report.ok
        assert report.total == 6
