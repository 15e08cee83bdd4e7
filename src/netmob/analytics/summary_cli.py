"""Summarise a trajectory of network points read from a CSV file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, Sequence

import pandas as pd
from rich.console import Console
from rich.table import Table

from netmob.network.config import NetworkConfig
from netmob.network.routes import RouteCatalog
from netmob.temporal.loaders import temporal_from_dataframe, temporal_to_dataframe
from netmob.temporal.temporal_types import Interpolation, Temporal, instant_count, period

from .kinematics import length, speed
from .trajectory import trajectory

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", help="Network YAML configuration.")
    source.add_argument("--routes", help="Route file (GeoJSON or CSV with WKT geometry).")
    parser.add_argument(
        "--trajectory",
        required=True,
        help="CSV with columns t, route_id and fraction, one row per instant.",
    )
    parser.add_argument(
        "--interpolation",
        default=Interpolation.LINEAR.value,
        choices=[item.value for item in Interpolation],
    )
    parser.add_argument(
        "--sequence-column",
        default=None,
        help="Column grouping rows into separate sequences.",
    )
    parser.add_argument(
        "--speed-output",
        default=None,
        help="Optional CSV destination for the speed series.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def _load_catalog(args: argparse.Namespace) -> RouteCatalog:
    if args.config:
        return RouteCatalog.from_config(NetworkConfig.from_yaml(args.config))
    config = NetworkConfig.from_mapping({"routes_path": str(args.routes)})
    return RouteCatalog.from_config(config)


def summarize(temp: Temporal, catalog: RouteCatalog) -> Dict[str, float]:
    """Headline figures shown by the CLI."""
    span = period(temp)
    duration = (span.upper - span.lower).total_seconds()
    travelled = length(temp, catalog)
    return {
        "length": travelled,
        "duration_s": duration,
        "mean_speed": travelled / duration if duration > 0 else 0.0,
        "instants": instant_count(temp),
        "trajectory_length": float(trajectory(temp, catalog).length),
    }


def _render(summary: Dict[str, float], console: Console) -> None:
    table = Table(title="Trajectory summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in summary.items():
        text = f"{value:d}" if isinstance(value, int) else f"{value:.3f}"
        table.add_row(key, text)
    console.print(table)


def _write_speed_csv(path: str | Path, temp: Temporal, catalog: RouteCatalog) -> int:
    series = speed(temp, catalog)
    frame = temporal_to_dataframe(series) if series is not None else pd.DataFrame()
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output_path, index=False)
    return len(frame)


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    console = console or Console()
    try:
        catalog = _load_catalog(args)
        temp = temporal_from_dataframe(
            pd.read_csv(args.trajectory),
            interpolation=args.interpolation,
            sequence_column=args.sequence_column,
        )
        summary = summarize(temp, catalog)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    _render(summary, console)
    if args.speed_output:
        rows = _write_speed_csv(args.speed_output, temp, catalog)
        logger.info("Wrote speed series with %d rows to %s", rows, args.speed_output)


if __name__ == "__main__":
    main()
