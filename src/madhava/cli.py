"""CLI — слой представления для движка madhava.

Разбирает флаги в EngineConfig, запускает вычисление и форматирует
результат (форматирование чисел — только здесь, не в движке).

Коды возврата:
    0 — успех
    1 — отказ воркера (WorkerFailure / WorkerTimeout)
    2 — невалидная конфигурация (InvalidMagnitude / InvalidPartition)
"""

import argparse
import json
import sys
import time
from typing import Optional, Sequence, TextIO

from madhava.core.contracts import validate_series_estimate
from madhava.core.domain import (
    DEFAULT_MAGNITUDE,
    FIXED_WORKER_COUNT_DEFAULT,
    MAX_MAGNITUDE,
    EngineConfig,
    ExecutorKind,
    RemainderPolicy,
    SeriesEstimate,
    SeriesVariant,
    TermCountRule,
    WorkerStrategy,
)
from madhava.engine import Dispatcher, InvalidPartition, WorkerFailure
from madhava.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_WORKER_FAILURE = 1
EXIT_INVALID_CONFIG = 2

SEPARATOR = "-" * 40


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="madhava",
        description="Approximate pi with the Madhava-Leibniz series on parallel workers",
    )
    parser.add_argument(
        "-m", "--magnitude", type=int, default=DEFAULT_MAGNITUDE,
        help=f"number of series terms as an order of magnitude, (0-{MAX_MAGNITUDE}]",
    )
    parser.add_argument(
        "-w", "--workers", type=int, default=None,
        help="fixed worker count (default: one per CPU)",
    )
    parser.add_argument(
        "--variant", choices=[v.value for v in SeriesVariant],
        default=SeriesVariant.TERM_INDEX.value,
    )
    parser.add_argument(
        "--terms", choices=[r.value for r in TermCountRule],
        default=TermCountRule.MAGNITUDE_MINUS_ONE.value,
        help="how magnitude maps to the number of terms",
    )
    parser.add_argument(
        "--remainder", choices=[p.value for p in RemainderPolicy],
        default=RemainderPolicy.DISTRIBUTE.value,
        help="what to do with terms left over after even partitioning",
    )
    parser.add_argument(
        "--executor", choices=[e.value for e in ExecutorKind],
        default=ExecutorKind.PROCESS.value,
    )
    parser.add_argument("--timeout", type=float, default=None, help="join deadline in seconds")
    parser.add_argument("--json", action="store_true", help="print the estimate report as JSON")
    return parser


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    """EngineConfig из разобранных флагов.

    Raises:
        InvalidMagnitude: magnitude вне (0, MAX_MAGNITUDE]
    """
    if args.workers is None:
        strategy = WorkerStrategy.CPU_COUNT
        fixed_worker_count = FIXED_WORKER_COUNT_DEFAULT
    else:
        strategy = WorkerStrategy.FIXED
        fixed_worker_count = args.workers

    return EngineConfig(
        magnitude=args.magnitude,
        variant=SeriesVariant(args.variant),
        term_count_rule=TermCountRule(args.terms),
        worker_strategy=strategy,
        fixed_worker_count=fixed_worker_count,
        remainder_policy=RemainderPolicy(args.remainder),
        executor=ExecutorKind(args.executor),
        timeout_s=args.timeout,
    )


def render_text(estimate: SeriesEstimate, out: TextIO) -> None:
    print(SEPARATOR, file=out)
    print(
        f"pi = {estimate.value!r} which differs from PI constant by "
        f"{estimate.difference_from_pi!r}",
        file=out,
    )
    print(
        f"({estimate.total_terms:,} factors calculated in {estimate.elapsed_ms:.0f} ms"
        f" on {estimate.worker_count} workers)",
        file=out,
    )
    if estimate.dropped_terms:
        print(f"({estimate.dropped_terms:,} trailing factors truncated)", file=out)
    print(SEPARATOR, file=out)


def render_json(estimate: SeriesEstimate, out: TextIO) -> None:
    report = estimate.to_report()
    validate_series_estimate(report)
    print(json.dumps(report, indent=2), file=out)


def main(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    out = out or sys.stdout
    setup_logging()

    app_timer = time.perf_counter()

    try:
        # InvalidMagnitude или ValueError невалидного timeout_s
        config = config_from_args(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    try:
        estimate = Dispatcher(config).run()
    except InvalidPartition as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except WorkerFailure as e:
        logger.error("computation aborted: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_WORKER_FAILURE

    if args.json:
        render_json(estimate, out)
    else:
        render_text(estimate, out)
        total_ms = (time.perf_counter() - app_timer) * 1000.0
        print(f"Total execution time: {total_ms:.0f} ms", file=out)

    return EXIT_OK
