"""Tests for snapshot construction and the snapshot builder."""

import json
from datetime import timedelta
from http import HTTPStatus

import pytest

from assay.errors import SnapshotError
from assay.response import Snapshot, build_snapshot


class TestSnapshot:
    def test_create_from_plain_values(self, created_snapshot):
        assert created_snapshot.status == 201
        assert created_snapshot.headers.get("Content-Type") == "application/json"
        assert created_snapshot.body == {"id": 101}
        assert created_snapshot.response_time_ms == 120

    def test_integer_elapsed_is_milliseconds(self):
        assert Snapshot.create(200, elapsed=250).elapsed == timedelta(milliseconds=250)

    def test_response_time_truncates_to_whole_milliseconds(self):
        snapshot = Snapshot.create(200, elapsed=timedelta(microseconds=1999))
        assert snapshot.response_time_ms == 1

    def test_http_status_is_stored_as_int(self):
        snapshot = Snapshot.create(HTTPStatus.NOT_FOUND)
        assert snapshot.status == 404
        assert type(snapshot.status) is int

    @pytest.mark.parametrize("status", [99, 600, 0, -1])
    def test_rejects_status_out_of_range(self, status):
        with pytest.raises(SnapshotError):
            Snapshot.create(status)

    @pytest.mark.parametrize("status", ["200", 200.0, True, None])
    def test_rejects_non_integer_status(self, status):
        with pytest.raises(SnapshotError):
            Snapshot.create(status)

    def test_rejects_negative_elapsed(self):
        with pytest.raises(SnapshotError):
            Snapshot.create(200, elapsed=timedelta(milliseconds=-1))

    def test_is_immutable(self, created_snapshot):
        with pytest.raises(AttributeError):
            created_snapshot.status = 500

    def test_body_is_a_copy(self, created_snapshot):
        body = created_snapshot.body
        body["id"] = 0
        assert created_snapshot.body == {"id": 101}

    def test_caller_mutation_does_not_leak_in(self):
        body = {"items": [1, 2]}
        snapshot = Snapshot.create(200, body=body)
        body["items"].append(3)
        assert snapshot.body == {"items": [1, 2]}

    def test_has_body(self, created_snapshot, empty_snapshot):
        assert created_snapshot.has_body
        assert not empty_snapshot.has_body
        assert empty_snapshot.body is None


class TestBuildSnapshot:
    @pytest.mark.asyncio
    async def test_reads_body_once(self, fake_response):
        response = fake_response(200, [("content-type", "application/json")], {"ok": True})
        snapshot = await build_snapshot(response, timedelta(milliseconds=30))
        assert response.json_calls == 1
        assert snapshot.body == {"ok": True}
        assert snapshot.response_time_ms == 30

    @pytest.mark.asyncio
    async def test_unparseable_body_is_absent(self, fake_response):
        error = json.JSONDecodeError("Expecting value", "<html>", 0)
        response = fake_response(200, [("content-type", "application/json")], raises=error)
        snapshot = await build_snapshot(response, timedelta(0))
        assert snapshot.body is None
        assert not snapshot.has_body

    @pytest.mark.asyncio
    async def test_accepts_header_mapping(self, fake_response):
        response = fake_response(204, {"X-Trace": "t1"})
        snapshot = await build_snapshot(response, timedelta(0))
        assert snapshot.headers.get("x-trace") == "t1"

    @pytest.mark.asyncio
    async def test_invalid_status_is_a_construction_error(self, fake_response):
        with pytest.raises(SnapshotError):
            await build_snapshot(fake_response(42), timedelta(0))

    @pytest.mark.asyncio
    async def test_round_trip_body_compares_equal(self, fake_response):
        from assay.assertions import Assert, is_
        from assay.reporting import LogMode, LogSettings

        original = {"a": [1, 2.5, {"b": None}], "c": "text", "d": True}
        decoded = json.loads(json.dumps(original))
        snapshot = await build_snapshot(fake_response(200, [], decoded), timedelta(0))
        report = Assert(snapshot, LogSettings(LogMode.ALL_OUTCOMES)).json_body(is_(original)).finish()
        assert report.ok
