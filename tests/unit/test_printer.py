"""Tests for metric depth and canonical rendering."""

from __future__ import annotations

import textwrap

import pytest

from mmpp.core import ir
from mmpp.core.errors import InvalidMetricError
from mmpp.core.metric_lang import metric_depth, parse_metric, pretty_print


def _canonical(text: str) -> str:
    return textwrap.dedent(text).strip("\n")


# ============================================================================
# Depth
# ============================================================================


class TestDepth:
    def test_leaf(self, blog_db_role: ir.Role) -> None:
        assert metric_depth(blog_db_role) == 1

    def test_parameters_do_not_count(self, blog_db_role: ir.Role) -> None:
        metric = ir.TimeLeftForecast(
            metric=blog_db_role,
            duration=ir.Duration(value="1d"),
            factor=ir.Fraction(numerator="1", denominator="2"),
        )
        assert metric_depth(metric) == 2

    def test_group_uses_deepest_child(self, two_host_group: ir.Group) -> None:
        assert metric_depth(two_host_group) == 2
        deeper = ir.Group(metrics=[*two_host_group.metrics, ir.Avg(metric=two_host_group)])
        assert metric_depth(deeper) == 4

    def test_binary(self) -> None:
        metric = parse_metric("diff(host(a, b), avg(avg(host(c, d))))")
        assert metric_depth(metric) == 4

    def test_empty_group_is_an_error(self) -> None:
        empty = ir.Group.model_construct(metrics=[])
        with pytest.raises(InvalidMetricError, match="at least one metric"):
            metric_depth(empty)
        with pytest.raises(InvalidMetricError, match="at least one metric"):
            pretty_print(empty)

    def test_unknown_node_is_an_error(self) -> None:
        with pytest.raises(InvalidMetricError, match="Not a metric"):
            metric_depth(ir.Double(value="1"))  # type: ignore[arg-type]


# ============================================================================
# Layout
# ============================================================================


class TestLeafRendering:
    def test_host(self) -> None:
        assert pretty_print(parse_metric("host('22CXRB3pZmu' ,loadavg5)")) == "host(22CXRB3pZmu, loadavg5)"

    def test_service(self) -> None:
        assert pretty_print(parse_metric('service("Blog", foo.bar)')) == "service(Blog, foo.bar)"

    def test_role(self) -> None:
        assert pretty_print(parse_metric("role('Blog:  db', x)")) == "role(Blog:db, x)"

    def test_role_slots(self) -> None:
        assert pretty_print(parse_metric("roleSlots(Blog:db, x)")) == "roleSlots(Blog:db, x)"


class TestInlineLayout:
    def test_depth_two_aggregate_is_inline(self, blog_db_role: ir.Role) -> None:
        assert pretty_print(ir.Avg(metric=blog_db_role)) == "avg(role(Blog:db, loadavg5))"

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("scale(host(a, b), 10)", "scale(host(a, b), 10)"),
            ("offset( host(a,b) , -31.4/6.25 )", "offset(host(a, b), -31.4/6.25)"),
            ("percentile(host(a, b), 75.5)", "percentile(host(a, b), 75.5)"),
            ("timeShift(host(a, b), 1d)", "timeShift(host(a, b), 1d)"),
            ("movingAverage(host(a, b), 12h)", "movingAverage(host(a, b), 12h)"),
            ("linearRegression(host(a, b), 3mo)", "linearRegression(host(a, b), 3mo)"),
            ("stack(host(a, b))", "stack(host(a, b))"),
        ],
    )
    def test_parametrized_inline(self, source: str, expected: str) -> None:
        assert pretty_print(parse_metric(source)) == expected


class TestMultilineLayout:
    def test_depth_three_aggregate(self) -> None:
        metric = parse_metric("avg(group(host(a,b), host(c,d)))")
        assert pretty_print(metric) == _canonical(
            """
            avg(
              group(
                host(a, b),
                host(c, d)
              )
            )
            """
        )

    def test_diff_is_always_multiline(self) -> None:
        metric = parse_metric("diff(service(Blog, foo.bar), service(Blog, foo.baz))")
        assert pretty_print(metric) == _canonical(
            """
            diff(
              service(Blog, foo.bar),
              service(Blog, foo.baz)
            )
            """
        )

    def test_divide_is_always_multiline(self) -> None:
        assert pretty_print(parse_metric("divide(host(a, b), host(c, d))")).count("\n") == 3

    def test_group_of_one_is_multiline(self) -> None:
        assert pretty_print(parse_metric("group(host(a, b))")) == "group(\n  host(a, b)\n)"

    def test_time_left_forecast(self) -> None:
        metric = parse_metric(
            "timeLeftForecast(host(22CXRB3pZmu, filesystem.drive.used), 3mo, 2000000000000)"
        )
        assert pretty_print(metric) == _canonical(
            """
            timeLeftForecast(
              host(22CXRB3pZmu, filesystem.drive.used),
              3mo,
              2000000000000
            )
            """
        )

    def test_parameter_on_its_own_line(self) -> None:
        metric = parse_metric("scale(avg(group(host(a, b))), 1/3)")
        assert pretty_print(metric) == _canonical(
            """
            scale(
              avg(
                group(
                  host(a, b)
                )
              ),
              1/3
            )
            """
        )

    def test_nested_indentation(self) -> None:
        metric = parse_metric(
            "group(percentile(diff(host(a, b), role(S:r, m)), 90), movingAverage(host(c, d), 1h))"
        )
        assert pretty_print(metric) == _canonical(
            """
            group(
              percentile(
                diff(
                  host(a, b),
                  role(S:r, m)
                ),
                90
              ),
              movingAverage(host(c, d), 1h)
            )
            """
        )

    def test_forecast_over_deep_child(self) -> None:
        metric = parse_metric("timeLeftForecast(max(stack(host(a, b))), 7d, 0.9)")
        assert pretty_print(metric) == _canonical(
            """
            timeLeftForecast(
              max(
                stack(host(a, b))
              ),
              7d,
              0.9
            )
            """
        )

    def test_group_order_is_kept(self) -> None:
        first = pretty_print(parse_metric("group(host(a, b), host(c, d))"))
        second = pretty_print(parse_metric("group(host(c, d), host(a, b))"))
        assert first != second
        assert first.index("host(a, b)") < first.index("host(c, d)")


# ============================================================================
# Canonical form
# ============================================================================

CORPUS = [
    "host(22CXRB3pZmu, loadavg5)",
    "role (  'Blog:  db' , 'memory.*'  ) ",
    "avg(group(host(h1, loadavg5), host(h2, loadavg5)))",
    "scale(service(Blog, foo.bar), 3.140e10)",
    "offset(divide(host(a, b), host(c, d)), -31.4/6.25)",
    "timeLeftForecast(host(22CXRB3pZmu, filesystem.drive.used), 3mo, 2000000000000)",
    "group(min(roleSlots(Blog:db, x)), product(group(host(a,b))), stack(host(c,d)))",
    "linearRegression(timeShift(movingAverage(host(a, b), 1h), 1d), 1.5h)",
]


class TestCanonicalForm:
    @pytest.mark.parametrize("source", CORPUS)
    def test_round_trip(self, source: str) -> None:
        metric = parse_metric(source)
        assert parse_metric(pretty_print(metric)) == metric

    @pytest.mark.parametrize("source", CORPUS)
    def test_idempotent(self, source: str) -> None:
        rendered = pretty_print(parse_metric(source))
        assert pretty_print(parse_metric(rendered)) == rendered

    def test_equal_trees_render_identically(self) -> None:
        a = parse_metric("avg(group(host('a', b), host(c, \"d\")))")
        b = parse_metric("avg (group (host(a,b),host(c,d)))")
        assert a == b
        assert pretty_print(a) == pretty_print(b)

    def test_no_trailing_whitespace(self) -> None:
        for source in CORPUS:
            for line in pretty_print(parse_metric(source)).splitlines():
                assert line == line.rstrip()
