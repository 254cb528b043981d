"""Command line helpers for running the Fitts's Law experiment."""
from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

from .analysis import format_summary_table
from .conditions import load_conditions
from .config import ExperimentConfig
from .errors import ConfigurationError
from .export import export_filename
from .sequence import build_trial_sequence
from .simulation import SimulatedParticipant, run_simulated_session
from .trial import TrialRunner

DEFAULT_REPETITIONS = ExperimentConfig.__dataclass_fields__["repetitions"].default
DEFAULT_SETTLE_DELAY_MS = ExperimentConfig.__dataclass_fields__["settle_delay_ms"].default
DEFAULT_WINDOW_SIZE = ExperimentConfig.__dataclass_fields__["window_size"].default


def build_arg_parser() -> argparse.ArgumentParser:
    """Create an argument parser exposing the runtime options."""

    parser = argparse.ArgumentParser(
        description=(
            "Launch the Fitts's Law pointing task. "
            "Without --dry-run or --simulate a PsychoPy window is opened."
        )
    )
    parser.add_argument(
        "--participant",
        type=str,
        default="",
        help="Participant label stored with every trial (default: anonymous).",
    )
    parser.add_argument(
        "--repetitions",
        type=int,
        default=DEFAULT_REPETITIONS,
        help="How many times each condition is presented (default: %(default)s).",
    )
    parser.add_argument(
        "--conditions",
        type=Path,
        default=None,
        help=(
            "JSON file with a list of {\"distance\": .., \"width\": ..} objects. "
            "Uses the built-in nine-condition set when omitted."
        ),
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="Folder where CSV/JSON outputs will be saved (default: %(default)s).",
    )
    parser.add_argument(
        "--settle-delay-ms",
        type=float,
        default=DEFAULT_SETTLE_DELAY_MS,
        help="Pause between a target hit and the next START (default: %(default)s).",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=list(DEFAULT_WINDOW_SIZE),
        help="Presentation area in pixels (default: %(default)s).",
    )
    parser.add_argument(
        "--full-screen",
        action="store_true",
        help="Open the PsychoPy window full screen.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the trial order and target angles (default: random).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print one line per completed trial.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable windowed debug mode with a smaller window.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help=(
            "Print the conditions with their index of difficulty and the shuffled "
            "trial order, then exit without launching PsychoPy."
        ),
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help=(
            "Run a scripted synthetic participant through the full session and print "
            "the analysis instead of opening a window."
        ),
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="With --simulate, also write the trial CSV into --data-dir.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ExperimentConfig:
    """Translate parsed options into a validated :class:`ExperimentConfig`."""

    config = ExperimentConfig(
        repetitions=args.repetitions,
        participant_id=args.participant,
        results_directory=str(args.data_dir),
        settle_delay_ms=args.settle_delay_ms,
        window_size=tuple(args.window_size),
        full_screen=args.full_screen,
        seed=args.seed,
        log_trials_to_console=args.verbose,
        debug_mode=args.debug,
    )
    if args.conditions is not None:
        config.condition_pairs = [
            (condition.distance, condition.width)
            for condition in load_conditions(args.conditions)
        ]
    config.validate()
    return config


def main(argv: list[str] | None = None) -> None:
    """Parse command line options and execute the experiment."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except (ConfigurationError, FileNotFoundError) as exc:
        parser.error(str(exc))

    if args.dry_run:
        perform_dry_run(config)
        return
    if args.simulate:
        perform_simulation(config, export=args.export)
        return

    # PsychoPy is only needed for the real window.
    from .experiment import FittsLawExperiment

    experiment = FittsLawExperiment(config)
    experiment.run()


def perform_dry_run(config: ExperimentConfig) -> None:
    """Print the condition set and one shuffled trial order, then exit."""

    conditions = config.validate()
    print(f"Dry-run: {len(conditions)} conditions x {config.repetitions} repetitions.")
    for index, condition in enumerate(conditions):
        print(
            f"[{index:02}] distance={condition.distance:g} | width={condition.width:g} "
            f"| ID={condition.id:.3f} bits"
        )
    sequence = build_trial_sequence(conditions, config.repetitions, random.Random(config.seed))
    order = " ".join(str(spec.condition_index) for spec in sequence)
    print(f"Trial order ({len(sequence)} trials): {order}")
    print("Dry-run complete.")


def perform_simulation(config: ExperimentConfig, *, export: bool = False) -> None:
    """Run the synthetic participant and print the results table."""

    runner = TrialRunner.from_config(config, clock=lambda: 0.0)
    participant = SimulatedParticipant(seed=config.seed)
    result = run_simulated_session(
        runner,
        participant,
        repetitions=config.repetitions,
        participant_id=config.participant_id or "simulated",
    )
    completed, _ = runner.progress()
    print(f"Simulated {completed} trials for '{runner.participant_id}'.")
    print(format_summary_table(result))
    if export:
        output_dir = Path(config.results_directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        filename = output_dir / export_filename(runner.participant_id)
        with filename.open("w", newline="", encoding="utf-8") as csv_file:
            csv_file.write(runner.export_records())
        print(f"Saved trial data to {filename}")


if __name__ == "__main__":  # pragma: no cover - module level CLI hook
    main(sys.argv[1:])
