#!/usr/bin/env python3
"""
Athlete modeling CLI.

Runs the modeling engines on JSON input files and renders the results.

Usage:
    athlete-model profile test.json --ge 0.22
    athlete-model load sessions.json --days 42 --today 2025-03-01
    athlete-model readiness biometrics.json
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

import pydantic
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import get_settings
from .exceptions import AthleteModelingError, ValidationError
from .metrics.fitness import calculate_training_load, get_training_recommendation
from .metrics.metabolic import MetabolicModel, fit_metabolic_model
from .metrics.zones import Zone, build_zone_table
from .models.biometrics import BiometricsSnapshot
from .models.metabolic import BodyComposition, ManualOverride, parse_power_points
from .recommendations.readiness import (
    ReadinessResult,
    analyze_readiness,
    calculate_daily_strain,
    readiness_adjustments,
)

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None) -> None:
    """Route log records through rich. Level defaults to the configured one."""
    log_level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def get_risk_color(risk_zone: str) -> str:
    """Get rich color for risk zone."""
    colors = {
        "optimal": "green",
        "undertrained": "blue",
        "caution": "yellow",
        "danger": "red",
    }
    return colors.get(risk_zone, "white")


def get_intensity_color(intensity: str) -> str:
    """Get rich color for a recommended intensity."""
    colors = {
        "high": "green",
        "moderate": "cyan",
        "low": "yellow",
        "rest": "red",
    }
    return colors.get(intensity, "white")


def get_score_color(score: float, good: float = 70, fair: float = 50) -> str:
    if score >= good:
        return "green"
    elif score >= fair:
        return "yellow"
    return "red"


def load_json(path: str) -> Any:
    """Read a JSON input file."""
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def load_json_object(path: str) -> dict:
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must contain a JSON object", field="input")
    return data


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data), highlight=False)


# ---------------------------------------------------------------------------
# profile
# ---------------------------------------------------------------------------


def render_model(model: MetabolicModel) -> None:
    table = Table(title="Metabolic Profile", box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    wkg = f" ({model.cp_w_per_kg:.2f} W/kg)" if model.cp_w_per_kg else ""
    table.add_row("Mode", f"{model.mode} ({model.points_used} test points)")
    table.add_row("Critical Power", f"{model.critical_power_watts:.0f} W{wkg}")
    table.add_row("W' alactic", f"{model.w_alactic_joules / 1000:.1f} kJ")
    table.add_row("W' lactic", f"{model.w_lactic_joules / 1000:.1f} kJ")
    table.add_row("Peak glycolytic power", f"{model.peak_glycolytic_power_watts:.0f} W")
    table.add_row("VLaMax", f"{model.vlamax:.2f} ({model.vlamax_class})")
    table.add_row("FatMax", f"{model.fat_max_watts:.0f} W")
    table.add_row("LT1", f"{model.lt1_watts:.0f} W")
    table.add_row("LT2", f"{model.lt2_watts:.0f} W")
    table.add_row("Lean body mass", f"{model.lean_body_mass_kg:.1f} kg")

    split = model.energy_system_split
    table.add_row(
        "Energy systems",
        f"aerobic {split.aerobic_pct}% / alactic {split.alactic_pct}% / lactic {split.lactic_pct}%",
    )
    console.print(table)
    console.print()


def render_zones(zones: List[Zone]) -> None:
    table = Table(title="Training Zones", box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Name")
    table.add_column("Watts", justify="right")
    table.add_column("% CP", justify="right")
    table.add_column("CHO/FAT/PRO", justify="right")
    table.add_column("kcal/h", justify="right")
    table.add_column("CHO g/h", justify="right")
    table.add_column("FAT g/h", justify="right")

    for zone in zones:
        data = zone.to_dict()
        ratios = zone.substrate_ratios
        consumption = data["consumption"]
        if data["min_watts"] == data["max_watts"]:
            watts = f"{data['min_watts']}"
        else:
            watts = f"{data['min_watts']}-{data['max_watts']}"
        table.add_row(
            zone.id,
            zone.name,
            watts,
            f"{zone.percent_of_cp[0]:.0f}-{zone.percent_of_cp[1]:.0f}",
            f"{ratios.cho:.0%}/{ratios.fat:.0%}/{ratios.pro:.0%}",
            str(consumption["kcal_per_hour"]),
            str(consumption["cho_g_per_hour"]),
            str(consumption["fat_g_per_hour"]),
        )

    console.print(table)
    console.print()


def cmd_profile(args) -> None:
    """Fit the metabolic model from a power-duration test."""
    data = load_json_object(args.input)

    points = parse_power_points(data.get("points", []))
    body = BodyComposition.model_validate(data.get("body", {}))
    manual = ManualOverride.model_validate(data["manual"]) if data.get("manual") else None

    model = fit_metabolic_model(points, body, manual)
    zones = build_zone_table(model, args.ge)

    if args.json:
        print_json({
            "model": model.to_dict(),
            "zones": {key: zone.to_dict() for key, zone in zones.items()},
        })
        return

    console.print()
    console.print(Panel("[bold]Metabolic Profiler[/bold]"))
    console.print()
    render_model(model)
    render_zones(list(zones.values()))


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


def cmd_load(args) -> None:
    """Show the CTL / ATL / TSB series for a window."""
    data = load_json(args.input)
    sessions = data.get("sessions", []) if isinstance(data, dict) else data
    today = date.fromisoformat(args.today) if args.today else date.today()

    result = calculate_training_load(sessions, args.days, today)
    summary = result.summary
    current = result.points[-1]
    recommendation = get_training_recommendation(current.balance, current.acwr)

    if args.json:
        payload = result.to_dict()
        payload["recommendation"] = recommendation
        print_json(payload)
        return

    console.print()
    console.print(Panel("[bold]Training Load[/bold]"))
    console.print()

    table = Table(title=f"Fitness Metrics (Last {args.days} Days)", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Load", justify="right")
    table.add_column("CTL", justify="right")
    table.add_column("ATL", justify="right")
    table.add_column("TSB", justify="right")
    table.add_column("ACWR", justify="right")
    table.add_column("Risk", style="bold")

    for p in result.points:
        tsb_color = "green" if p.balance > 0 else "yellow" if p.balance > -10 else "red"
        table.add_row(
            p.date.isoformat(),
            f"{p.daily_training_stress:.1f}",
            f"{p.chronic_load:.1f}",
            f"{p.acute_load:.1f}",
            Text(f"{p.balance:+.1f}", style=tsb_color),
            f"{p.acwr:.2f}",
            Text(p.risk_zone.upper(), style=get_risk_color(p.risk_zone)),
        )

    console.print(table)
    console.print()

    totals = Table(title="Summary", box=box.SIMPLE, show_header=False)
    totals.add_column("Metric", style="cyan")
    totals.add_column("Value", justify="right")
    totals.add_row("Ramp rate", f"{summary.ramp_rate:+.1f} CTL/week")
    totals.add_row("Total TSS", f"{summary.total_tss:.0f}")
    totals.add_row("Avg TSS (training days)", f"{summary.avg_tss:.1f}")
    totals.add_row("Peak TSS", f"{summary.peak_tss:.0f}")
    totals.add_row("Training hours", f"{summary.total_hours:.1f}")
    totals.add_row("Active days", str(summary.active_days))
    console.print(totals)

    console.print(Panel(recommendation, title="Guidance", border_style=get_risk_color(current.risk_zone)))
    console.print()


# ---------------------------------------------------------------------------
# readiness
# ---------------------------------------------------------------------------


def render_readiness(result: ReadinessResult, biometrics: BiometricsSnapshot, verbose: bool) -> None:
    scores = Table(title="Today's Scores", box=box.ROUNDED)
    scores.add_column("Score", style="cyan")
    scores.add_column("Value", justify="right")
    scores.add_column("Status")

    scores.add_row(
        "Readiness",
        Text(f"{result.readiness_score}/100", style=get_score_color(result.readiness_score)),
        f"HRV {result.hrv_status.value}, sleep {result.sleep_status.value}",
    )
    scores.add_row(
        "Recovery",
        Text(f"{result.recovery_score}/100", style=get_score_color(result.recovery_score)),
        "",
    )
    # Low stress is good
    scores.add_row(
        "Stress",
        Text(f"{result.stress_score}/100", style=get_score_color(100 - result.stress_score, 50, 30)),
        "",
    )
    scores.add_row("Strain (yesterday)", f"{result.strain_score:.1f}/21", result.fatigue_status.value)
    console.print(scores)
    console.print()

    if verbose:
        factors = Table(title="Readiness Factors", box=box.SIMPLE)
        factors.add_column("Factor", style="cyan")
        factors.add_column("Adjustment", justify="right")
        for name, delta in readiness_adjustments(biometrics).items():
            color = "green" if delta > 0 else "red" if delta < 0 else "white"
            factors.add_row(name.replace("_", " "), Text(f"{delta:+.0f}", style=color))
        console.print(factors)
        console.print()

    color = get_intensity_color(result.recommended_intensity.value)
    console.print(Panel(
        f"[bold {color}]{result.recommended_intensity.value.upper()}[/bold {color}] "
        f"({result.load_adjustment_pct:+d}% load)\n{result.message}",
        title="Recommendation",
        border_style=color,
    ))
    console.print()


def cmd_readiness(args) -> None:
    """Analyze today's biometrics."""
    data = load_json_object(args.input)
    strain_sessions = data.pop("sessions", None)

    biometrics = BiometricsSnapshot.model_validate(data)
    result = analyze_readiness(biometrics)
    daily_strain = calculate_daily_strain(strain_sessions) if strain_sessions else None

    if args.json:
        payload = result.to_dict()
        if daily_strain is not None:
            payload["daily_strain"] = daily_strain
        print_json(payload)
        return

    console.print()
    console.print(Panel("[bold]Readiness[/bold]"))
    console.print()
    render_readiness(result, biometrics, args.verbose)
    if daily_strain is not None:
        console.print(f"Day strain: [bold]{daily_strain:.1f}[/bold]/21")
        console.print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="athlete-model",
        description="Athlete modeling engine - metabolic profile, training load and readiness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  athlete-model profile test.json
  athlete-model profile test.json --ge 0.22 --json
  athlete-model load sessions.json --days 42 --today 2025-03-01
  athlete-model readiness biometrics.json --verbose
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging and score breakdowns")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Profile command
    profile_p = subparsers.add_parser("profile", help="Fit the metabolic model and zones")
    profile_p.add_argument("input", help="JSON file with points, body and optional manual")
    profile_p.add_argument("--ge", type=float, default=None, help="Gross efficiency (0-1]")
    profile_p.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    # Load command
    load_p = subparsers.add_parser("load", help="Show CTL / ATL / TSB for a window")
    load_p.add_argument("input", help="JSON file with a list of sessions")
    load_p.add_argument("--days", "-d", type=int, default=42, help="Days in the window")
    load_p.add_argument("--today", type=str, help="Last day of the window (YYYY-MM-DD)")
    load_p.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    # Readiness command
    readiness_p = subparsers.add_parser("readiness", help="Analyze today's biometrics")
    readiness_p.add_argument("input", help="JSON file with biometrics (optional 'sessions')")
    readiness_p.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    commands = {
        "profile": cmd_profile,
        "load": cmd_load,
        "readiness": cmd_readiness,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        command(args)
    except AthleteModelingError as e:
        logger.debug(repr(e))
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        return 1
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid input: {e.error_count()} error(s)[/red]")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"[red]  {escape(location)}: {escape(error['msg'])}[/red]")
        return 1
    except (OSError, ValueError) as e:
        # Unreadable file, malformed JSON or a bad --today date
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
