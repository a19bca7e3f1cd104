"""Unit tests for impact analysis and statistics."""

import pytest

from fieldscope.config import ExplorerConfig
from fieldscope.core.impact import ImpactAnalyzer, method_color, number_warnings
from fieldscope.core.types import EndpointId, ValidationWarning, WarningCategory


@pytest.fixture
def analyzer():
    return ImpactAnalyzer()


class TestDeriveUsage:
    def test_counts_and_breakdown(self, analyzer):
        usage = analyzer.derive_usage(
            "id",
            {"User", "Patient"},
            {
                EndpointId("GET", "/user"),
                EndpointId("PUT", "/user/{id}"),
                EndpointId("POST", "/user"),
            },
        )

        assert usage.usage_count == 5
        assert usage.critical is True
        assert list(usage.mutating_breakdown.items()) == [("POST", 1), ("PUT", 1)]

    def test_read_only_field(self, analyzer):
        usage = analyzer.derive_usage("limit", set(), {EndpointId("GET", "/pets")})

        assert usage.critical is False
        assert dict(usage.mutating_breakdown) == {}

    def test_schema_only_field(self, analyzer):
        usage = analyzer.derive_usage("note", {"Memo"}, set())

        assert usage.usage_count == 1
        assert usage.critical is False

    def test_custom_mutating_methods(self):
        analyzer = ImpactAnalyzer(ExplorerConfig(mutating_methods=frozenset({"POST"})))
        usage = analyzer.derive_usage("id", set(), {EndpointId("DELETE", "/x")})

        assert usage.critical is False


class TestQueries:
    def test_related_fields(self, analyzer, worked_output):
        assert analyzer.related_fields(worked_output.index, "id") == ("name", "user_id")
        assert analyzer.related_fields(worked_output.index, "name") == ("id",)
        assert analyzer.related_fields(worked_output.index, "missing") == ()

    def test_schema_endpoints(self, analyzer, worked_output):
        endpoints = analyzer.schema_endpoints(worked_output.index, "User")

        assert [e.label for e in endpoints] == ["GET /user", "POST /user", "PUT /user/{id}"]

    def test_schema_endpoints_unknown_schema(self, analyzer, worked_output):
        assert analyzer.schema_endpoints(worked_output.index, "Ghost") == ()

    def test_field_detail_to_dict(self, analyzer, worked_output):
        detail = analyzer.field_detail(worked_output.index, "id").to_dict()

        assert detail["type"] == "integer"
        assert detail["endpoints"] == ["GET /user", "POST /user", "PUT /user/{id}"]
        assert detail["mutating_breakdown"] == {"POST": 1, "PUT": 1}


class TestBlastRadius:
    def test_single_field(self, analyzer, worked_output):
        result = analyzer.calculate(worked_output.index, ["name"])

        assert result["impacted_schemas"] == ["User"]
        assert result["count"] == 4
        assert result["critical"] is True
        assert result["breakdown"] == {"GET": 1, "POST": 1, "PUT": 1}
        assert result["missing"] == []

    def test_union_of_fields(self, analyzer, worked_output):
        result = analyzer.calculate(worked_output.index, ["name", "user_id"])

        assert result["impacted_schemas"] == ["Patient", "User"]
        assert result["fields"] == ["name", "user_id"]

    def test_missing_fields_are_reported(self, analyzer, worked_output):
        result = analyzer.calculate(worked_output.index, ["ghost"])

        assert result["missing"] == ["ghost"]
        assert result["fields"] == []
        assert result["count"] == 0
        assert result["critical"] is False


class TestStatistics:
    def test_top_fields_tie_break_by_name(self, analyzer, make_spec):
        from fieldscope.core.index import build_index

        spec = make_spec(
            schemas={"A": {"fields": [("b", "string"), ("a", "string")]}},
            ops=[{"method": "GET", "path": "/a", "responses": {"200": "A"}}],
        )
        index = build_index(spec).unwrap().index

        assert analyzer.top_fields(index, 5) == (("a", 2), ("b", 2))

    def test_stats_on_petstore(self, petstore_output):
        stats = petstore_output.stats

        assert stats.total_schemas == 4
        assert stats.total_endpoints == 5
        assert list(stats.method_breakdown) == ["GET", "POST", "PUT", "DELETE"]
        assert stats.method_breakdown["GET"] == 2
        assert sum(s.count for s in stats.type_distribution) == stats.total_fields


class TestHelpers:
    @pytest.mark.parametrize("method,color", [
        ("GET", "green"),
        ("post", "yellow"),
        ("PUT", "blue"),
        ("DELETE", "red"),
        ("OPTIONS", "white"),
    ])
    def test_method_color(self, method, color):
        assert method_color(method) == color

    def test_number_warnings_is_stable(self):
        warnings = [
            ValidationWarning(category=WarningCategory.UNUSED_SCHEMA, message="b", subject="B"),
            ValidationWarning(category=WarningCategory.CIRCULAR_REFERENCE, message="a", subject="A"),
            ValidationWarning(category=WarningCategory.UNUSED_SCHEMA, message="a", subject="A"),
        ]

        numbered = number_warnings(warnings)
        again = number_warnings(reversed(warnings))

        assert [n for n, _ in numbered] == [1, 2, 3]
        assert numbered == again
        assert numbered[0][1].category == WarningCategory.CIRCULAR_REFERENCE
