"""
Offline simulation demo.

Feeds a run of noisy raw samples for one device through the full pipeline
(in-memory store, fixed clock) and prints the synthesized readings and the
resulting health view.

Run with: vitalsim-simulate --count 12 --hour 8 --seed 7
"""

import argparse
from datetime import UTC, datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vitalsim.domain.models import GlucosePredictionRequest, RawSensorReading
from vitalsim.services.health_data import HealthDataService
from vitalsim.services.history import InMemoryHistoryStore
from vitalsim.services.sources import FixedClock, SeededRandomSource

console = Console()

SAMPLE_INTERVAL_SECONDS = 5


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the healthy-vitals synthesis offline.")
    parser.add_argument("--device", default="demo-device", help="Device id to simulate")
    parser.add_argument("--count", type=int, default=10, help="Number of samples to ingest")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: random)")
    parser.add_argument(
        "--hour", type=int, default=None, help="Hour of day 0-23 (default: current UTC hour)"
    )
    args = parser.parse_args(argv)
    if args.count <= 0:
        parser.error("--count must be positive")
    if args.hour is not None and not 0 <= args.hour <= 23:
        parser.error("--hour must be within 0..23")
    return args


def _raw_sample(device_id: str, index: int, noise: SeededRandomSource) -> RawSensorReading:
    """A deliberately implausible sample, the kind a loose finger clip produces."""
    return RawSensorReading(
        device_id=device_id,
        timestamp=index * SAMPLE_INTERVAL_SECONDS * 1000,
        heart_rate=round(noise.uniform() * 180),
        heart_rate_avg=round(noise.uniform() * 180),
        spo2=round(80 + noise.uniform() * 20, 1),
        temperature=round(33 + noise.uniform() * 8, 2),
        red=round(noise.uniform() * 200000),
        ir=round(noise.uniform() * 200000),
    )


def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    clock = FixedClock(datetime.now(UTC), hour=args.hour)
    service = HealthDataService(
        store=InMemoryHistoryStore(),
        rng=SeededRandomSource(args.seed),
        clock=clock,
    )
    noise = SeededRandomSource(None if args.seed is None else args.seed + 1)

    hour = clock.hour_of_day()
    console.print(
        Panel(f"🩺 Simulating {args.count} readings of {args.device} at hour {hour}", style="blue")
    )

    table = Table(title="Synthesized Readings")
    table.add_column("#", style="dim")
    table.add_column("HR in", style="red")
    table.add_column("HR", style="green")
    table.add_column("SpO2 in", style="red")
    table.add_column("SpO2", style="green")
    table.add_column("Temp in", style="red")
    table.add_column("Temp", style="green")
    table.add_column("Glucose", style="cyan")

    for index in range(args.count):
        raw = _raw_sample(args.device, index, noise)
        reading = service.ingest(raw).reading
        table.add_row(
            str(index + 1),
            str(raw.heart_rate),
            str(reading.heart_rate),
            str(raw.spo2),
            f"{reading.spo2:.1f}",
            str(raw.temperature),
            f"{reading.temperature:.2f}",
            f"{reading.last_glucose:.1f}" if reading.last_glucose is not None else "-",
        )
        clock.advance(SAMPLE_INTERVAL_SECONDS)

    console.print(table)

    view = service.health_view(args.device).unwrap()
    summary = Table(title="Health View")
    summary.add_column("Field", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Score", f"{view.health_score.score} ({view.health_score.status})")
    summary.add_row("Heart rate", view.vitals.heart_rate.category)
    summary.add_row("SpO2", view.vitals.spo2.category)
    summary.add_row("Temperature", view.vitals.temperature.category)
    summary.add_row("Glucose", f"{view.glucose.value} mg/dL ({view.glucose.category})")
    summary.add_row("Signal quality", view.quality_indicators.signal_quality)
    console.print(summary)

    last = view.vitals
    prediction = service.predict_glucose(
        GlucosePredictionRequest(
            heart_rate=last.heart_rate.value,
            spo2=last.spo2.value,
            temperature=last.temperature.value,
        )
    ).prediction
    console.print(
        f"\n🔮 Single-shot glucose estimate: {prediction.glucose_level} mg/dL "
        f"({prediction.category})",
        style="yellow",
    )
    return 0


def main() -> None:
    try:
        raise SystemExit(run())
    except KeyboardInterrupt:
        console.print("\n👋 Simulation stopped by user", style="yellow")


if __name__ == "__main__":
    main()
