# src/tracking/cli/charts.py
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from dotenv import load_dotenv

from src.tracking.config import load_config
from src.tracking.context import AppContext, build_context
from src.tracking.core.models.chart import ChartQuery
from src.tracking.core.models.enums import ChartDimension, ChartKind, ChartMetric, OrderStatus

log = logging.getLogger("tracking.cli.charts")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="charts", description="Manage saved analytics charts")
    ap.add_argument("--config", default=None)
    sub = ap.add_subparsers(dest="cmd", required=True)

    add = sub.add_parser("add", help="compute a chart from current orders and save it")
    add.add_argument("--kind", choices=[k.value for k in ChartKind], default=ChartKind.BAR.value)
    add.add_argument("--dimension", choices=[d.value for d in ChartDimension], default=ChartDimension.DATE.value)
    add.add_argument("--metric", choices=[m.value for m in ChartMetric], default=ChartMetric.ORDER_COUNT.value)
    add.add_argument("--status", choices=[s.value for s in OrderStatus], default=None)
    add.add_argument("--from", dest="from_date", default=None, help="YYYY-MM-DD, inclusive")
    add.add_argument("--to", dest="to_date", default=None, help="YYYY-MM-DD, inclusive")

    sub.add_parser("list", help="show saved charts")

    rm = sub.add_parser("remove", help="delete one chart")
    rm.add_argument("chart_id", type=int)

    sub.add_parser("clear", help="delete all charts")
    return ap


def _print_charts(ctx: AppContext) -> None:
    charts = ctx.registry.charts
    if not charts:
        print("<no charts>")
        return
    for c in charts:
        print(f"#{c.id}  {c.title}")
        for label, value in zip(c.labels, c.data):
            print(f"    {label:<20} {value:,.2f}")


def run(args: argparse.Namespace, ctx: AppContext) -> int:
    if args.cmd == "add":
        query = ChartQuery.from_dict(
            {
                "kind": args.kind,
                "dimension": args.dimension,
                "metric": args.metric,
                "filters": {
                    "status": args.status,
                    "from_date": args.from_date,
                    "to_date": args.to_date,
                },
            }
        )
        ctx.store.refresh()
        chart = ctx.registry.add_chart(query)
        print(f"added #{chart.id}: {chart.title} ({len(chart.labels)} points)")
        return 0

    if args.cmd == "list":
        _print_charts(ctx)
        return 0

    if args.cmd == "remove":
        if ctx.registry.remove_chart(args.chart_id):
            print(f"removed #{args.chart_id}")
        else:
            print(f"chart #{args.chart_id} not found")
        return 0

    if args.cmd == "clear":
        ctx.registry.clear()
        print("all charts removed")
        return 0

    return 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    cfg = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    ctx = build_context(cfg)
    try:
        return run(args, ctx)
    finally:
        ctx.close()


if __name__ == "__main__":
    raise SystemExit(main())
