"""Command-line interface: step a map session to completion and report."""

import argparse
import logging
import sys
import time
from pathlib import Path

import structlog

# Widest timing bar, in characters
_MAX_BARS = 25


def main() -> None:
    """CLI entry point for map generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural map with territories and rivers"
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="TOML config file (optional)"
    )
    parser.add_argument("--size", type=int, default=None, help="Grid size (default: 128)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: 42)")
    parser.add_argument(
        "--tiler",
        choices=["growth", "bisection"],
        default=None,
        help="Territory partitioner (default: growth)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )

    # Import here to avoid slow startup for --help
    from .config import MapConfig, load_config
    from .session import MapSession
    from .validation import validate_session

    config = load_config(Path(args.config)) if args.config else MapConfig()
    overrides = {
        key: value
        for key, value in (("size", args.size), ("seed", args.seed), ("tiler", args.tiler))
        if value is not None
    }
    if overrides:
        config = config.model_copy(update=overrides)

    print(f"Generating {config.size}x{config.size} map with seed {config.seed}")
    print()

    session = MapSession(config)
    timings: dict[str, float] = {}
    step_counts: dict[str, int] = {}

    start_time = time.perf_counter()
    while not session.is_done:
        phase = session.phase.value
        step_start = time.perf_counter()
        session.step()
        timings[phase] = timings.get(phase, 0.0) + (time.perf_counter() - step_start)
        step_counts[phase] = step_counts.get(phase, 0) + 1
    gen_time = time.perf_counter() - start_time

    print()
    print(f"Generation complete in {gen_time:.2f}s ({session.steps_taken} steps)")
    print_timings(timings, step_counts)

    counts = session.partition_counts()
    print()
    print(f"Land cells:   {counts.habitable:,}")
    print(f"Territories:  {len(session.territories())}")
    print(f"Rivers:       {len(session.rivers)} ({counts.rivers:,} land cells carved)")
    print(f"Left open:    {counts.open:,}")

    result = validate_session(session)
    if not result.passed:
        sys.exit(1)


def print_timings(timings: dict[str, float], step_counts: dict[str, int]) -> None:
    """Print per-phase timings, slowest first, with a proportional bar."""
    total = sum(timings.values())
    if total <= 0:
        return

    width = max(len(name) for name in timings)
    for name, elapsed in sorted(timings.items(), key=lambda item: item[1], reverse=True):
        steps = step_counts[name]
        avg_ms = elapsed / steps * 1000.0
        percent = elapsed / total * 100.0
        bars = "█" * max(1, int(percent / (100.0 / _MAX_BARS)))
        print(
            f"{name.ljust(width)} {elapsed * 1000.0:10.2f}ms "
            f"{steps:6d} steps {avg_ms:8.3f}ms/step {bars}"
        )


if __name__ == "__main__":
    main()
