"""Tests for part matchers, dispatch and outcome rendering."""

from datetime import timedelta
from http import HTTPStatus
from pathlib import Path

import pytest

from assay.assertions import (
    Part,
    Predicate,
    ValueKind,
    bind,
    classify,
    contains,
    does_not_contain,
    does_not_exist,
    exists,
    is_,
    is_between,
    is_less_than,
    is_not,
    is_success,
    schema,
)
from assay.assertions.matchers import (
    HeaderMatcher,
    HeadersMatcher,
    JsonBodyMatcher,
    JsonPathMatcher,
    ResponseTimeMatcher,
    StatusMatcher,
)
from assay.errors import (
    ConstructionError,
    InvalidHeaderError,
    InvalidJsonPathError,
    InvalidSchemaError,
    UnsupportedAssertionError,
)
from assay.response import HeaderValue, Headers, Snapshot


def evaluate(matcher, expression, snapshot):
    return bind(matcher, expression).evaluate(snapshot)


class TestClassify:
    @pytest.mark.parametrize("value, kind", [
        (1, ValueKind.INTEGER),
        (HTTPStatus.OK, ValueKind.INTEGER),
        ("a", ValueKind.TEXT),
        (True, ValueKind.JSON),
        (None, ValueKind.JSON),
        (1.5, ValueKind.JSON),
        ({"a": 1}, ValueKind.JSON),
        ([1], ValueKind.JSON),
        (HeaderValue("x"), ValueKind.HEADER_VALUE),
        (Headers(), ValueKind.HEADER_SET),
        (timedelta(seconds=1), ValueKind.DURATION),
        (Path("x.json"), ValueKind.FILE),
    ])
    def test_kinds(self, value, kind):
        assert classify(value) is kind

    def test_unknown_type(self):
        with pytest.raises(UnsupportedAssertionError):
            classify(object())


class TestStatus:
    def test_is(self, created_snapshot):
        outcome = evaluate(StatusMatcher(), is_(201), created_snapshot)
        assert outcome.passed
        assert outcome.actual == "201"

    def test_is_between_failure_display(self, created_snapshot):
        outcome = evaluate(StatusMatcher(), is_between(400, 499), created_snapshot)
        assert not outcome.passed
        assert outcome.actual == "201"
        assert outcome.expected == "400 and 499"
        assert outcome.right == [400, 499]

    def test_is_between_is_inclusive(self, created_snapshot):
        assert evaluate(StatusMatcher(), is_between(201, 201), created_snapshot).passed

    def test_http_status_values(self, created_snapshot):
        assert evaluate(StatusMatcher(), is_(HTTPStatus.CREATED), created_snapshot).passed
        assert evaluate(StatusMatcher(), is_not(HTTPStatus.OK), created_snapshot).passed

    def test_shortcut_ranges(self, created_snapshot):
        assert evaluate(StatusMatcher(), is_success(), created_snapshot).passed

    def test_rejects_text_value(self):
        with pytest.raises(UnsupportedAssertionError, match="does not accept a text value"):
            bind(StatusMatcher(), is_("201"))

    def test_rejects_illegal_predicate(self):
        with pytest.raises(UnsupportedAssertionError, match="not supported for the status code"):
            bind(StatusMatcher(), contains(2))

    def test_rejects_inverted_range(self):
        with pytest.raises(UnsupportedAssertionError, match="Invalid range"):
            bind(StatusMatcher(), is_between(499, 400))

    def test_rejects_non_integer_bounds(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(StatusMatcher(), is_between(200, "299"))

    def test_legal_predicates(self):
        assert StatusMatcher().legal_predicates() == {
            Predicate.IS, Predicate.IS_NOT, Predicate.IS_BETWEEN,
        }

    def test_rejects_bare_values(self):
        with pytest.raises(UnsupportedAssertionError, match="expression"):
            bind(StatusMatcher(), 201)


class TestHeaders:
    def test_contains_missing_header_fails(self, created_snapshot):
        outcome = evaluate(HeadersMatcher(), contains([("content-length", "15")]), created_snapshot)
        assert not outcome.passed

    def test_contains_is_case_insensitive_on_names(self, created_snapshot):
        expected = Headers([("Content-Type", "application/json")])
        assert evaluate(HeadersMatcher(), contains(expected), created_snapshot).passed

    def test_equality_with_mapping(self, created_snapshot):
        assert evaluate(HeadersMatcher(), is_({"content-type": "application/json"}), created_snapshot).passed
        assert evaluate(HeadersMatcher(), is_not({"content-type": "text/plain"}), created_snapshot).passed

    def test_does_not_contain(self, users_snapshot):
        outcome = evaluate(HeadersMatcher(), does_not_contain({"x-request-id": "other"}), users_snapshot)
        assert outcome.passed

    def test_rejects_scalar(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(HeadersMatcher(), contains(5))

    def test_rejects_illegal_expected_header(self):
        with pytest.raises(InvalidHeaderError):
            bind(HeadersMatcher(), contains({"bad name": "v"}))


class TestHeader:
    def test_is(self, users_snapshot):
        outcome = evaluate(HeaderMatcher("x-request-id"), is_("abc-123"), users_snapshot)
        assert outcome.passed
        assert outcome.subject == "x-request-id"

    def test_typed_header_value(self, users_snapshot):
        assert evaluate(HeaderMatcher("Content-Type"), is_(HeaderValue("application/json")), users_snapshot).passed

    def test_absent_header_fails(self, users_snapshot):
        outcome = evaluate(HeaderMatcher("x-missing"), is_("anything"), users_snapshot)
        assert not outcome.passed
        assert outcome.actual == "absent"

    def test_rejects_invalid_name(self):
        with pytest.raises(InvalidHeaderError):
            HeaderMatcher("bad name")

    def test_rejects_invalid_value(self):
        with pytest.raises(InvalidHeaderError):
            bind(HeaderMatcher("x"), is_("a\nb"))

    def test_rejects_contains(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(HeaderMatcher("x"), contains("a"))


class TestJsonBody:
    def test_deep_equality(self, users_snapshot):
        expected = users_snapshot.body
        assert evaluate(JsonBodyMatcher(), is_(expected), users_snapshot).passed

    def test_partial_document_fails(self, users_snapshot):
        assert not evaluate(JsonBodyMatcher(), is_({"total": 2}), users_snapshot).passed

    def test_json_text_is_parsed(self, created_snapshot):
        assert evaluate(JsonBodyMatcher(), is_('{"id": 101.0}'), created_snapshot).passed

    def test_json_file(self, created_snapshot, tmp_path):
        path = tmp_path / "body.json"
        path.write_text('{"id": 101}')
        assert evaluate(JsonBodyMatcher(), is_(path), created_snapshot).passed

    def test_invalid_json_text(self):
        with pytest.raises(ConstructionError):
            bind(JsonBodyMatcher(), is_("{nope"))

    def test_missing_body_fails(self, empty_snapshot):
        outcome = evaluate(JsonBodyMatcher(), is_({}), empty_snapshot)
        assert not outcome.passed
        assert outcome.actual == "none"

    def test_null_body_reads_as_no_body(self):
        snapshot = Snapshot.create(200, body=None)
        assert not snapshot.has_body
        outcome = evaluate(JsonBodyMatcher(), is_(None), snapshot)
        assert not outcome.passed
        assert outcome.actual == "none"

    def test_schema(self, created_snapshot):
        document = {"type": "object", "required": ["id"]}
        outcome = evaluate(JsonBodyMatcher(), schema(document), created_snapshot)
        assert outcome.passed
        assert outcome.right == document

    def test_schema_failure_has_detail(self, created_snapshot):
        document = {"type": "object", "properties": {"id": {"type": "string"}}}
        outcome = evaluate(JsonBodyMatcher(), schema(document), created_snapshot)
        assert not outcome.passed
        assert outcome.detail.startswith("id: ")

    def test_invalid_schema(self):
        with pytest.raises(InvalidSchemaError):
            bind(JsonBodyMatcher(), schema({"type": 12}))

    def test_rejects_contains(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(JsonBodyMatcher(), contains("id"))


class TestJsonPath:
    def test_single_match(self, created_snapshot):
        outcome = evaluate(JsonPathMatcher("$.id"), is_(101), created_snapshot)
        assert outcome.passed
        assert outcome.subject == "$.id"

    def test_empty_match_fails(self, created_snapshot):
        outcome = evaluate(JsonPathMatcher("$.missing"), is_(1), created_snapshot)
        assert not outcome.passed
        assert outcome.actual == "absent"

    def test_empty_match_fails_is_not(self, created_snapshot):
        assert not evaluate(JsonPathMatcher("$.missing"), is_not(1), created_snapshot).passed

    def test_several_matches_compare_as_list(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.users[*].id"), is_([1, 2]), users_snapshot).passed

    def test_contains_among_matches(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.users[*].name"), contains("Ada"), users_snapshot).passed

    @pytest.mark.parametrize("ids", [[5], [5, 6]])
    def test_wildcard_contains_regardless_of_match_count(self, ids):
        snapshot = Snapshot.create(200, body={"ids": ids})
        assert evaluate(JsonPathMatcher("$.ids[*]"), contains(5), snapshot).passed
        assert not evaluate(JsonPathMatcher("$.ids[*]"), does_not_contain(5), snapshot).passed

    def test_wildcard_with_one_match_compares_as_list(self):
        snapshot = Snapshot.create(200, body={"ids": [5]})
        outcome = evaluate(JsonPathMatcher("$.ids[*]"), is_([5]), snapshot)
        assert outcome.passed
        assert outcome.left == [5]

    def test_contains_substring_of_single_match(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.users[0].name"), contains("saa"), users_snapshot).passed

    def test_contains_array_member(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.users[0].tags"), contains("ops"), users_snapshot).passed
        assert evaluate(JsonPathMatcher("$.users[0].tags"), does_not_contain("dev"), users_snapshot).passed

    def test_null_value_is_present(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.next"), is_(None), users_snapshot).passed
        assert evaluate(JsonPathMatcher("$.next"), exists(), users_snapshot).passed

    def test_json_text_value(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.users[1].name"), is_('"Ada"'), users_snapshot).passed

    def test_exists_and_does_not_exist(self, users_snapshot):
        assert evaluate(JsonPathMatcher("$.total"), exists(), users_snapshot).passed
        assert not evaluate(JsonPathMatcher("$.total"), does_not_exist(), users_snapshot).passed
        assert evaluate(JsonPathMatcher("$.gone"), does_not_exist(), users_snapshot).passed
        assert not evaluate(JsonPathMatcher("$.gone"), exists(), users_snapshot).passed

    def test_missing_body_fails_every_predicate(self, empty_snapshot):
        for expression in (is_(1), does_not_exist(), exists()):
            outcome = evaluate(JsonPathMatcher("$.id"), expression, empty_snapshot)
            assert not outcome.passed
            assert outcome.actual == "none"

    def test_schema_on_match(self, users_snapshot):
        outcome = evaluate(JsonPathMatcher("$.users[0]"), schema({"required": ["id", "name"]}), users_snapshot)
        assert outcome.passed

    def test_invalid_path(self):
        with pytest.raises(InvalidJsonPathError):
            JsonPathMatcher("$.users[?(@.id==1)]")

    def test_presence_takes_no_value(self):
        from assay.assertions import Expression
        with pytest.raises(UnsupportedAssertionError):
            bind(JsonPathMatcher("$.a"), Expression(Predicate.EXISTS, 1))


class TestResponseTime:
    def test_strictly_less_than(self, created_snapshot):
        assert not evaluate(ResponseTimeMatcher(), is_less_than(100), created_snapshot).passed
        assert evaluate(ResponseTimeMatcher(), is_less_than(200), created_snapshot).passed
        assert not evaluate(ResponseTimeMatcher(), is_less_than(120), created_snapshot).passed

    def test_duration_threshold(self, created_snapshot):
        outcome = evaluate(ResponseTimeMatcher(), is_less_than(timedelta(milliseconds=200)), created_snapshot)
        assert outcome.passed
        assert outcome.expected == "200"

    def test_duration_threshold_is_truncated_like_the_measured_time(self):
        snapshot = Snapshot.create(200, elapsed=timedelta(microseconds=120700))
        bound = bind(ResponseTimeMatcher(), is_less_than(timedelta(microseconds=120500)))
        outcome = bound.evaluate(snapshot)
        assert not outcome.passed
        assert outcome.right == 120
        assert bind(ResponseTimeMatcher(), is_less_than(timedelta(microseconds=121500))).evaluate(snapshot).passed

    def test_rejects_negative_threshold(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(ResponseTimeMatcher(), is_less_than(-1))

    def test_rejects_float_threshold(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(ResponseTimeMatcher(), is_less_than(1.5))

    def test_rejects_is(self):
        with pytest.raises(UnsupportedAssertionError):
            bind(ResponseTimeMatcher(), is_(120))


class TestOutcome:
    def test_evaluation_is_repeatable(self, created_snapshot):
        bound = bind(StatusMatcher(), is_between(400, 499))
        assert bound.evaluate(created_snapshot) == bound.evaluate(created_snapshot)

    def test_text_rendering(self, created_snapshot):
        outcome = evaluate(StatusMatcher(), is_between(400, 499), created_snapshot)
        assert str(outcome) == (
            'part: status code\n'
            'should be between: "400 and 499"\n'
            'was: "201"'
        )

    def test_record(self, created_snapshot):
        outcome = evaluate(JsonPathMatcher("$.id"), is_(101), created_snapshot)
        assert outcome.to_record() == {
            "part": "json path",
            "predicate": "should be",
            "left": 101,
            "right": 101,
            "result": "passed",
            "subject": "$.id",
        }

    def test_part_and_predicate_keys(self):
        assert Part.from_key("json_path") is Part.JSON_PATH
        assert Predicate.from_key("is_between") is Predicate.IS_BETWEEN
        assert Part.RESPONSE_TIME.key == "response_time"
