"""PsychoPy presentation layer for the Fitts's Law pointing task.

PsychoPy draws the START control and the targets and reports mouse clicks.
Everything else (sequencing, timing, recording, analysis) is delegated to
:class:`fitts_law.trial.TrialRunner` through its event methods.  PsychoPy uses
a centred, y-up pixel frame while the recorded data use a top-left, y-down
frame, so positions are converted at this boundary.
"""
from __future__ import annotations

from pathlib import Path
import random
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from psychopy import core, event, gui, visual
from psychopy.hardware import keyboard

from .analysis import AnalysisResult, ConditionSummary, RegressionResult, format_summary_table
from .config import ExperimentConfig
from .errors import ConfigurationError, ExperimentAbort, TimingAnomaly
from .export import export_filename
from .geometry import Bounds, Point
from .template import BaseExperiment
from .trial import TrialRunner, TrialState


if TYPE_CHECKING:
    from psychopy.visual.window import Window
else:  # pragma: no cover - used only for static analysis fallbacks
    Window = Any


def to_window_coords(point: Point, bounds: Bounds) -> Tuple[float, float]:
    """Convert a top-left/y-down point to PsychoPy's centred pixel frame."""

    x, y = point
    return x - bounds.width / 2.0, bounds.height / 2.0 - y


def to_core_coords(pos: Tuple[float, float], bounds: Bounds) -> Point:
    """Convert a PsychoPy pixel position back to the recorded frame."""

    x, y = pos
    return x + bounds.width / 2.0, bounds.height / 2.0 - y


class FittsLawExperiment(BaseExperiment):
    """Run the pointing task in a PsychoPy window."""

    def __init__(self, config: ExperimentConfig | None = None):
        self.config = config or ExperimentConfig()
        self.conditions = self.config.validate()
        super().__init__(
            experiment_name=self.config.experiment_name,
            results_directory=self.config.results_directory,
        )

    # ------------------------------------------------------------------
    # GUI helpers
    # ------------------------------------------------------------------
    def collect_participant_info(self) -> Dict[str, str]:
        """Display an info dialog to collect the participant ID and repetitions."""

        info = {
            "Participant ID": self.config.participant_id,
            "Trials per condition": str(self.config.repetitions),
        }
        dialog = gui.DlgFromDict(info, title="Fitts's Law", screen=-1)
        if not dialog.OK:
            core.quit()
        try:
            self.config.repetitions = int(info["Trials per condition"])
        except ValueError as exc:
            raise ConfigurationError(
                f"Trials per condition must be a whole number, got {info['Trials per condition']!r}"
            ) from exc
        self.config.participant_id = info["Participant ID"]
        self.config.validate()

        instruction_dialog = gui.Dlg(title="Instructions", screen=-1)
        instruction_dialog.addText(self.config.instructions_text())
        instruction_dialog.show()
        return {key: str(value) for key, value in info.items()}

    # ------------------------------------------------------------------
    # Window creation
    # ------------------------------------------------------------------
    def create_window(self) -> Window:
        """Create the PsychoPy window in pixel units."""

        fullscreen_flag = self.config.full_screen and not self.config.debug_mode
        win = visual.Window(
            size=list(self.config.active_window_size()),
            fullscr=fullscreen_flag,
            units="pix",
            color=list(self.config.background_color),
            colorSpace="rgb",
            screen=self.config.screen_index,
            allowGUI=self.config.debug_mode or not fullscreen_flag,
        )
        return win

    @staticmethod
    def window_bounds(win: Window) -> Bounds:
        width, height = win.size
        return Bounds(width=float(width), height=float(height))

    def _check_quit(self, kb: keyboard.Keyboard) -> None:
        quit_list = list(self.config.quit_keys)
        for key in kb.getKeys(quit_list, waitRelease=False):
            if key.name in quit_list:
                raise ExperimentAbort(f"Quit key '{key.name}' pressed")

    # ------------------------------------------------------------------
    # Trial loop
    # ------------------------------------------------------------------
    def run_trials(self, win: Window, runner: TrialRunner) -> None:
        """Draw the task and forward clicks to ``runner`` until it finishes."""

        bounds = runner.bounds
        clock = core.Clock()
        mouse = event.Mouse(win=win, visible=True)
        kb = keyboard.Keyboard()
        kb.clearEvents()

        start_button = visual.Rect(
            win,
            width=self.config.start_target_size,
            height=self.config.start_target_size,
            pos=(0, 0),
            fillColor=self.config.start_color,
            lineColor=None,
        )
        start_label = visual.TextStim(win, text="START", height=16, color="white", bold=True)
        target = visual.Rect(win, width=1, height=1, fillColor=self.config.target_color, lineColor=None)
        status = visual.TextStim(
            win,
            text="",
            pos=(0, bounds.height / 2.0 - 24),
            height=18,
            color="black",
        )

        runner.initialize(self.config.repetitions, self.config.participant_id)
        was_pressed = False
        while runner.state is not TrialState.FINISHED:
            runner.poll(clock.getTime() * 1000.0)
            self._check_quit(kb)

            pressed = bool(mouse.getPressed()[0])
            clicked = pressed and not was_pressed
            was_pressed = pressed

            spec = runner.current_spec
            if runner.state is TrialState.AWAITING_START and spec is not None:
                start_button.draw()
                start_label.draw()
                if clicked and start_button.contains(mouse.getPos()):
                    placed = runner.on_start_triggered(clock.getTime() * 1000.0)
                    if placed is not None:
                        target.width = target.height = spec.width
                        target.pos = to_window_coords(placed, bounds)
            elif runner.state is TrialState.AWAITING_TARGET:
                target.draw()
                if clicked and target.contains(mouse.getPos()):
                    click = to_core_coords(tuple(mouse.getPos()), bounds)
                    try:
                        runner.on_target_hit(click[0], click[1], clock.getTime() * 1000.0)
                    except TimingAnomaly:
                        # logged by the runner; the same trial is shown again
                        pass

            status.text = self._status_line(runner)
            status.draw()
            win.flip()

    @staticmethod
    def _status_line(runner: TrialRunner) -> str:
        completed, total = runner.progress()
        spec = runner.current_spec
        parts = [f"Trial {min(completed + 1, total)}/{total}"]
        if spec is not None:
            parts.append(f"ID {spec.id:.2f}")
        last = runner.last_movement_time_ms
        if last is not None:
            parts.append(f"Last MT {last:.0f} ms")
            parts.append(f"Accuracy {runner.running_accuracy_pct():.1f}%")
        return "   ".join(parts)

    def _show_completion(self, win: Window, result: AnalysisResult) -> None:
        """Show the results table until a key is pressed (or 30 s pass)."""

        message = visual.TextStim(
            win,
            text="Experiment Complete!\n\n" + format_summary_table(result),
            font="Courier New",
            height=16,
            color="black",
            wrapWidth=win.size[0] * 0.9,
        )
        message.draw()
        win.flip()
        event.waitKeys(maxWait=30.0)

    # ------------------------------------------------------------------
    # Data persistence
    # ------------------------------------------------------------------
    def save_results(self, runner: TrialRunner) -> Path:
        """Save the trial CSV, the participant info and (when finished) the summary."""

        filename = self.output_dir() / export_filename(runner.participant_id)
        self.save_records_csv(runner.records, filename)
        self.save_experiment_info()
        if runner.results is not None:
            self.save_summary_json(runner.results)
        return filename

    # ------------------------------------------------------------------
    # Experiment entry point
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Execute the full experiment pipeline."""

        participant_info = self.collect_participant_info()
        self.experiment_info.update(participant_info)

        def _report(
            summaries: Tuple[ConditionSummary, ...],
            regression: Optional[RegressionResult],
        ) -> None:
            print(f"Completed {sum(s.trial_count for s in summaries)} trials.")
            if regression is not None:
                print(f"{regression.equation()}  (R² = {regression.r_squared:.3f})")

        win = self.create_window()
        runner = TrialRunner(
            self.conditions,
            self.window_bounds(win),
            settle_delay_ms=self.config.settle_delay_ms,
            rng=random.Random(self.config.seed),
            on_complete=_report,
            log_to_console=self.config.log_trials_to_console,
        )
        aborted = False
        try:
            self.run_trials(win, runner)
            if runner.results is not None:
                self._show_completion(win, runner.results)
        except ExperimentAbort as exc:
            aborted = True
            print(f"Experiment aborted: {exc}")
        finally:
            win.close()

        if len(runner.records) or not aborted:
            data_file = self.save_results(runner)
            print(f"Saved {len(runner.records)} trials to {data_file}")
        if runner.results is not None:
            print(format_summary_table(runner.results))

        core.quit()


__all__ = ["FittsLawExperiment", "to_core_coords", "to_window_coords"]
