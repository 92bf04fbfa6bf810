from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from ciplot.core.config import ChartConfig
from ciplot.core.data import load_dataset, validate_dataset
from ciplot.stats.ci import summarize_ci
from ciplot.utils.logging import configure_logging
from ciplot.viz.export import save_chart
from ciplot.viz.layers import ci_chart


app = typer.Typer(add_completion=False, help="Mean +/- confidence interval plots")
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING... (default: $CIPLOT_LOG_LEVEL or WARNING)"
    ),
):
    configure_logging(log_level)


def _load_cfg(config: str) -> ChartConfig:
    return ChartConfig.from_yaml(config)


def _load_valid_data(data: str, cfg: ChartConfig) -> pd.DataFrame:
    try:
        df = load_dataset(data)
        validate_dataset(df, cfg)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="data") from e
    return df


def _summary_title(cfg: ChartConfig) -> str:
    return f"{cfg.y}: {cfg.conf_level:.1%} CI ({cfg.distribution.value})"


def _print_dataframe(df: pd.DataFrame, title: str, max_rows: int = 20) -> None:
    tbl = Table(title=title, show_lines=False)
    for c in df.columns:
        tbl.add_column(str(c))
    for _, row in df.head(max_rows).iterrows():
        tbl.add_row(*[f"{row[c]:.4g}" if isinstance(row[c], float) else str(row[c]) for c in df.columns])
    console.print(tbl)
    if len(df) > max_rows:
        console.print(f"(showing first {max_rows} of {len(df)} rows)")


@app.command("validate-data")
def validate_data(
    config: str = typer.Option(..., "--config", help="Path to chart YAML config"),
    data: str = typer.Argument(..., help="Dataset CSV or Parquet"),
):
    cfg = _load_cfg(config)
    _load_valid_data(data, cfg)
    console.print("Data validated successfully.")


@app.command("summarize")
def summarize(
    config: str = typer.Option(..., "--config"),
    data: str = typer.Option(..., "--data"),
    output: Optional[str] = typer.Option(None, "--output", help="If set, write the summary CSV"),
    max_rows: int = typer.Option(50, "--max-rows"),
):
    """Print the per-group mean and confidence interval."""

    cfg = _load_cfg(config)
    df = _load_valid_data(data, cfg)

    try:
        summary = summarize_ci(
            df,
            cfg.x,
            cfg.y,
            by=cfg.group,
            conf_level=cfg.conf_level,
            distribution=cfg.distribution,
            na_rm=cfg.na_rm,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e
    _print_dataframe(summary, title=_summary_title(cfg), max_rows=max_rows)

    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(output, index=False)
        console.print(f"Wrote summary to {output}")


@app.command("plot")
def plot(
    config: str = typer.Option(..., "--config"),
    data: str = typer.Option(..., "--data"),
    out: Optional[str] = typer.Option(
        None, "--out", help="Output .html/.json/.png/.svg (default: plots/<y>_ci.html)"
    ),
):
    """Render the configured geoms and save the chart."""

    cfg = _load_cfg(config)
    df = _load_valid_data(data, cfg)

    try:
        chart = ci_chart(df, cfg.x, cfg.y, **cfg.layer_kwargs())
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e

    out_path = Path(out) if out else Path("plots") / f"{cfg.y}_ci.html"
    try:
        save_chart(chart, out_path)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--out") from e
    console.print(f"Wrote: {out_path}")
