"""
Prompts for chart synthesis
"""
import json
from typing import Any, Dict, List, Optional

CHART_SYSTEM_PROMPT = """Create a chart from the provided data. Choose the most appropriate chart type based on the data structure and user request.

Available chart types:
- generateLineChart: For time series
- generateColumnChart: For category comparisons
- generateBarChart: For horizontal categories
- generatePieChart: For proportions
- generateScatterChart: For correlations

RULES:
1. Call exactly one chart tool with a complete chartOptions object
2. Put category labels in xAxis.categories and numeric values in series[].data
3. Give every series a name; it is shown in the legend
4. After creating the chart, save it using savePreparedChart
"""


def build_generation_prompt(
    sql_query: str,
    data_sample: List[Dict[str, Any]],
    total_rows: int,
    user_prompt: Optional[str] = None,
) -> str:
    """User message for the generate path: intent, SQL and a bounded data sample"""
    columns = ", ".join(data_sample[0].keys()) if data_sample else "No data"

    return f"""
## User's Original Question
{user_prompt or 'Create a chart from this data'}

## SQL Query Executed
```sql
{sql_query}
```

## SQL Results Sample (first {len(data_sample)} rows of {total_rows} total)
```json
{json.dumps(data_sample, indent=2, default=str)}
```

## Full Dataset Info
- Total rows: {total_rows}
- Columns: {columns}

Please analyze this data and create an appropriate chart visualization. Consider the user's intent and the nature of the data to choose the best chart type.
"""
