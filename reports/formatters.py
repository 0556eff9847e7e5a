"""
Display formatters for variance ratio results.
Deterministic string formatting for percentages, statistics and tables.
"""

import math
from typing import Dict, Any, List, Optional, Sequence

from analysis.calculations.variance_ratio import VarianceRatioResult

NOT_AVAILABLE = "n/a"


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _check_numeric(value: Any, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"{label} must be numeric, got {type(value)}")


def format_percentage(value: Optional[float], decimal_places: int = 1) -> str:
    """
    Format decimal as percentage with specified precision.

    Args:
        value: Decimal value (0.0845 = 8.45%)
        decimal_places: Number of decimal places (default: 1)

    Returns:
        Formatted percentage string (e.g., "8.5%")
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Percentage value")

    return f"{value * 100:.{decimal_places}f}%"


def format_statistic(value: Optional[float], decimal_places: int = 3) -> str:
    """Format a test statistic with an explicit sign (e.g. "+1.234")."""
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Statistic")

    if not math.isfinite(value):
        return NOT_AVAILABLE

    return f"{value:+.{decimal_places}f}"


def format_p_value(value: Optional[float]) -> str:
    """
    Format a p-value, switching to scientific notation below 0.001.

    Examples:
        0.0432 -> "0.043"
        0.00001234 -> "1.23e-05"
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "p-value")

    if not 0 <= value <= 1:
        raise FormatterError(f"p-value must be in [0, 1], got {value}")

    if value < 0.001:
        return f"{value:.2e}"

    return f"{value:.3f}"


def format_variance(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Variance")

    return f"{value:.6e}"


def build_sweep_table(
    results: List[VarianceRatioResult],
    lags: Optional[Sequence[int]] = None,
    significance_level: float = 0.05
) -> str:
    """
    Build a Markdown table of sweep rows.

    Args:
        results: Sweep rows ordered by q
        lags: Aggregation lengths to include (default: all)
        significance_level: p-values below this are marked with '*'

    Returns:
        Markdown table string
    """
    wanted = set(lags) if lags is not None else None

    lines = [
        "| q | Vc(q) | VR(q) | z(q) | p-value | Scaled vol |",
        "|---|-------|-------|------|---------|------------|",
    ]

    for row in results:
        if wanted is not None and row.q not in wanted:
            continue

        ratio = NOT_AVAILABLE if row.variance_ratio is None else f"{row.variance_ratio:.4f}"
        p_display = format_p_value(row.p_value)
        if row.p_value is not None and row.p_value < significance_level:
            p_display += " *"

        lines.append(
            f"| {row.q} | {format_variance(row.variance)} | {ratio} | "
            f"{format_statistic(row.z_stat)} | {p_display} | "
            f"{format_percentage(row.scaled_volatility)} |"
        )

    return '\n'.join(lines)


def build_summary_markdown(report: Dict[str, Any], lags: Optional[Sequence[int]] = None) -> str:
    """
    Build a Markdown summary from a composed variance ratio report.

    Args:
        report: Output of compose_variance_ratio_report
        lags: Aggregation lengths to tabulate (default: all)
    """
    period = report['data_period']
    stats = report['return_statistics']
    significance = report['metadata']['config']['significance_level']
    results = [VarianceRatioResult(**row) for row in report['variance_ratio']]

    significant = report['significant_lags']
    if significant:
        verdict = (
            f"Random walk rejected at {format_percentage(significance, 0)} "
            f"for q = {', '.join(str(q) for q in significant)}."
        )
    else:
        verdict = f"Random walk not rejected at {format_percentage(significance, 0)} for any q."

    sections = [
        f"# Variance Ratio Test: {report['ticker']}",
        "",
        f"**Period:** {period['start_date']} to {period['end_date']} "
        f"({period['observations']} observations)",
        f"**Annualized mean return:** {format_percentage(stats['annualized_mean'], 2)}",
        f"**Annualized volatility:** {format_percentage(stats['annualized_volatility'], 2)}",
        "",
        verdict,
        "",
        build_sweep_table(results, lags, significance),
    ]

    return '\n'.join(sections) + '\n'
