"""Tests for the tool catalog, chart tools and savePreparedChart."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from vizflow.dtos import ChartType, SaveResult
from vizflow.pipeline.tools import TOOL_CATALOG, ToolCatalog, ToolContext, build_default_catalog
from vizflow.pipeline.tools.chart_tools import LINE_CHART_TOOL, PIE_CHART_TOOL, SCATTER_CHART_TOOL

from fakes import line_chart_arguments, pie_chart_arguments, revenue_rows


@pytest.fixture
def context():
    return ToolContext(chart_id="chart-1", csv_id="csv-1", sql_query="SELECT month, revenue FROM sales")


class TestToolCatalog:
    def test_default_catalog_contents(self):
        assert {
            "generateLineChart", "generateColumnChart", "generateBarChart",
            "generatePieChart", "generateScatterChart", "generateAreaChart",
            "savePreparedChart",
        } == set(TOOL_CATALOG.names)

    def test_family_comes_from_registration(self):
        assert TOOL_CATALOG.family_of("generatePieChart") == ChartType.PIE
        assert TOOL_CATALOG.family_of("generateBarChart") == ChartType.BAR
        assert TOOL_CATALOG.family_of("savePreparedChart") is None
        assert TOOL_CATALOG.family_of("nope") is None

    def test_persistence_tool_is_flagged_as_saving_charts(self):
        assert TOOL_CATALOG.get("savePreparedChart").saves_chart is True
        assert TOOL_CATALOG.get("generateLineChart").saves_chart is False

    def test_subset_restricts_exposed_tools(self):
        subset = TOOL_CATALOG.subset(["generateLineChart", "savePreparedChart"])
        assert subset.names == ["generateLineChart", "savePreparedChart"]
        assert len(subset.schemas()) == 2

    def test_subset_rejects_unknown_names(self):
        with pytest.raises(KeyError):
            TOOL_CATALOG.subset(["generateLineChart", "generateRadarChart"])

    def test_duplicate_registration_fails(self):
        catalog = ToolCatalog([LINE_CHART_TOOL])
        with pytest.raises(ValueError):
            catalog.register(LINE_CHART_TOOL)

    def test_schema_is_an_openai_function(self):
        schema = PIE_CHART_TOOL.schema()
        assert schema["type"] == "function"
        assert schema["function"]["name"] == "generatePieChart"
        assert "chartOptions" in schema["function"]["parameters"]["properties"]

    def test_build_default_catalog_is_fresh(self):
        assert build_default_catalog() is not TOOL_CATALOG


class TestChartTools:
    def test_executor_sets_type_and_disables_credits(self, context):
        output = LINE_CHART_TOOL.execute(line_chart_arguments(revenue_rows(3)), context)

        assert output["chart"]["type"] == "line"
        assert output["credits"] == {"enabled": False}
        assert output["xAxis"]["categories"] == ["Jan", "Feb", "Mar"]

    def test_executor_keeps_extra_keys(self, context):
        args = pie_chart_arguments()
        args["chartOptions"]["plotOptions"] = {"pie": {"dataLabels": {"enabled": True}}}
        output = PIE_CHART_TOOL.execute(args, context)
        assert output["plotOptions"]["pie"]["dataLabels"]["enabled"] is True

    def test_invalid_arguments_raise(self, context):
        with pytest.raises(ValidationError):
            LINE_CHART_TOOL.execute({"chartOptions": {"series": []}}, context)

    @pytest.mark.parametrize("tool,series", [
        (LINE_CHART_TOOL, {"name": "Revenue", "data": []}),
        (PIE_CHART_TOOL, {"name": "Share", "data": []}),
        (SCATTER_CHART_TOOL, {"data": []}),
    ])
    def test_series_without_points_are_rejected(self, context, tool, series):
        with pytest.raises(ValidationError):
            tool.execute({"chartOptions": {"series": [series]}}, context)

    def test_scatter_rejects_non_pairs(self, context):
        with pytest.raises(ValidationError):
            SCATTER_CHART_TOOL.execute({"chartOptions": {"series": [{"data": [[1, 2, 3]]}]}}, context)


class TestSavePreparedChart:
    def _args(self, options):
        return {
            "csvId": "ignored-by-tool",
            "sqlQuery": "SELECT 1",
            "chartOptions": options,
            "chartType": "line",
            "userPrompt": "show revenue",
        }

    def test_without_saver_reports_unavailable(self, context):
        tool = TOOL_CATALOG.get("savePreparedChart")
        output = tool.execute(self._args(line_chart_arguments(revenue_rows(2))["chartOptions"]), context)
        assert output["success"] is False

    def test_invalid_options_write_nothing(self, context):
        context.save_chart = MagicMock()
        tool = TOOL_CATALOG.get("savePreparedChart")

        output = tool.execute(self._args({"series": []}), context)

        assert output["success"] is False
        context.save_chart.assert_not_called()

    def test_malformed_nested_options_are_saved_without_them(self, context):
        context.save_chart = MagicMock(return_value=SaveResult(id="chart-1", ok=True))
        tool = TOOL_CATALOG.get("savePreparedChart")
        options = line_chart_arguments(revenue_rows(2))["chartOptions"]
        options["xAxis"]["labels"] = "rotate"

        output = tool.execute(self._args(options), context)

        assert output["success"] is True
        spec, _ = context.save_chart.call_args.args
        assert spec.axes.label_rotation is None

    def test_saves_with_request_metadata(self, context):
        context.save_chart = MagicMock(return_value=SaveResult(id="chart-1", ok=True))
        tool = TOOL_CATALOG.get("savePreparedChart")

        output = tool.execute(self._args(line_chart_arguments(revenue_rows(2))["chartOptions"]), context)

        assert output == {
            "success": True,
            "chartId": "chart-1",
            "message": "Chart configuration saved successfully. Type: line",
        }
        spec, metadata = context.save_chart.call_args.args
        assert spec.chart_type == ChartType.LINE
        assert metadata["csv_id"] == "csv-1"
        assert metadata["sql_query"] == "SELECT month, revenue FROM sales"
        assert metadata["user_prompt"] == "show revenue"
