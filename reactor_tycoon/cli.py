#!/usr/bin/env python3
"""
Reactor Tycoon - Headless CLI

Runs the plant without a UI under a simple scripted operator, prints
periodic snapshots and a final summary. Useful for balancing the economy
and reproducing sessions from a seed.
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import PlantConfig, load_config
from .exceptions import ConfigurationError
from .game.session import PlantSession, PlantSnapshot, PlantStatus


STATUS_STYLES = {
    PlantStatus.SAFE: "green",
    PlantStatus.WARNING: "yellow",
    PlantStatus.DANGER: "bold red",
}


class ReactorTycoonCLI:
    """Headless runner for plant sessions"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console if console is not None else Console()

    def run_session(self,
                    config: PlantConfig,
                    duration: float,
                    delta_time: float,
                    seed: Optional[int] = None,
                    rods: float = 50.0,
                    coolant: float = 100.0,
                    overdrive_at: Optional[float] = None,
                    scram_at: Optional[float] = None,
                    report_every: float = 10.0) -> PlantSession:
        """
        Run a scripted session

        Args:
            config: Plant configuration
            duration: Session length in seconds
            delta_time: Frame length in milliseconds
            seed: Random seed
            rods: Control rod target (100 = inserted)
            coolant: Coolant flow target
            overdrive_at: Time (s) to attempt overdrive
            scram_at: Time (s) to trigger SCRAM
            report_every: Snapshot interval (s)

        Returns:
            The finished session
        """
        if delta_time <= 0 or report_every <= 0:
            raise ValueError("delta_time and report_every must be positive")

        session = PlantSession(config, seed=seed)
        session.adjust_control_rods(rods)
        session.adjust_coolant_flow(coolant)

        table = Table(title="Reactor Tycoon session")
        for column in ("Time (s)", "Temp (°C)", "Power (MW)", "Turbine (MW)", "RPM",
                       "Balance", "Events", "Status"):
            table.add_column(column, justify="right")

        overdrive_pending = overdrive_at is not None
        scram_pending = scram_at is not None
        next_report = 0.0
        snapshot = session.get_snapshot()

        while session.time_elapsed < duration * 1000.0:
            seconds = session.time_elapsed / 1000.0
            if overdrive_pending and seconds >= overdrive_at:
                overdrive_pending = False
                if not session.activate_overdrive():
                    self.console.print(f"[yellow]Overdrive unavailable at {seconds:.0f}s[/yellow]")
            if scram_pending and seconds >= scram_at:
                scram_pending = False
                session.scram()

            snapshot = session.step(delta_time)

            if snapshot.time_elapsed / 1000.0 >= next_report:
                self._add_row(table, snapshot)
                next_report += report_every

        self._add_row(table, snapshot)
        self.console.print(table)
        self._print_summary(session)
        return session

    def _add_row(self, table: Table, snapshot: PlantSnapshot) -> None:
        style = STATUS_STYLES[snapshot.status]
        events = ", ".join(event['name'] for event in snapshot.events) or "-"
        table.add_row(
            f"{snapshot.time_elapsed / 1000.0:.0f}",
            f"{snapshot.temperature:.1f}",
            f"{snapshot.power_output:.1f}",
            f"{snapshot.turbine_output:.1f}",
            f"{snapshot.turbine_rpm:.0f}",
            f"{snapshot.total_profit:,.0f}",
            events,
            f"[{style}]{snapshot.status.value}[/{style}]",
        )

    def _print_summary(self, session: PlantSession) -> None:
        summary = session.get_summary()
        table = Table(title="Summary", show_header=False)
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        for key, value in summary.items():
            text = f"{value:,.2f}" if isinstance(value, float) else str(value)
            table.add_row(key, text)
        self.console.print(table)


def positive_float(value: str) -> float:
    """argparse type for strictly positive numbers"""
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reactor Tycoon - headless plant simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Five minutes at half rod insertion
  reactor-tycoon run --duration 300 --rods 50 --seed 7

  # Try overdrive after a minute, then SCRAM
  reactor-tycoon run --duration 180 --overdrive-at 60 --scram-at 150

  # Print the default configuration as YAML
  reactor-tycoon config
        """
    )
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser('run', help='Run a headless session')
    run_parser.add_argument('--config', help='YAML plant configuration')
    run_parser.add_argument('--duration', type=positive_float, default=120.0, help='Duration in seconds (default: 120)')
    run_parser.add_argument('--dt', type=positive_float, default=16.0, help='Frame length in ms (default: 16)')
    run_parser.add_argument('--seed', type=int, help='Random seed')
    run_parser.add_argument('--rods', type=float, default=50.0, help='Control rod target, 100 = inserted')
    run_parser.add_argument('--coolant', type=float, default=100.0, help='Coolant flow target')
    run_parser.add_argument('--overdrive-at', type=float, help='Attempt overdrive at this time (s)')
    run_parser.add_argument('--scram-at', type=float, help='Trigger SCRAM at this time (s)')
    run_parser.add_argument('--report-every', type=positive_float, default=10.0, help='Snapshot interval (s)')

    config_parser = subparsers.add_parser('config', help='Show configuration as YAML')
    config_parser.add_argument('--config', help='YAML plant configuration to validate and show')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    cli = ReactorTycoonCLI()

    try:
        config = load_config(args.config)
        if args.command == 'run':
            session = cli.run_session(
                config=config,
                duration=args.duration,
                delta_time=args.dt,
                seed=args.seed,
                rods=args.rods,
                coolant=args.coolant,
                overdrive_at=args.overdrive_at,
                scram_at=args.scram_at,
                report_every=args.report_every,
            )
            return 2 if session.reactor.damaged else 0

        elif args.command == 'config':
            cli.console.print(config.to_yaml(), markup=False, highlight=False)
            return 0

    except ConfigurationError as e:
        cli.console.print(f"[red]Invalid configuration:[/red] {e}")
        return 1
    except KeyboardInterrupt:
        cli.console.print("\nOperation cancelled by user")
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
