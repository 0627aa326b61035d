"""
Run reporting: totals, the in-place progress line, the per-file table and
the final summary.
"""

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from tqdm import tqdm

from image_optimizer.options import RunOptions
from image_optimizer.processor import FileOutcome, reduction_percent

RULE = '=' * 60


def format_size(size_bytes: float) -> str:
    """Human-readable file size."""
    for unit in ('B', 'KB', 'MB', 'GB'):
        if abs(size_bytes) < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


@dataclass
class RunTotals:
    files_attempted: int = 0
    files_succeeded: int = 0
    total_original_bytes: int = 0
    total_output_bytes: int = 0

    def add(self, outcome: FileOutcome) -> None:
        """Fold one outcome in. Failed files count as attempted only."""
        self.files_attempted += 1
        if outcome.succeeded:
            self.files_succeeded += 1
            self.total_original_bytes += outcome.original_size
            self.total_output_bytes += outcome.output_size

    @property
    def files_failed(self) -> int:
        return self.files_attempted - self.files_succeeded

    @property
    def saved_bytes(self) -> int:
        return self.total_original_bytes - self.total_output_bytes

    @property
    def reduction_percent(self) -> float:
        return reduction_percent(self.total_original_bytes, self.total_output_bytes)


class RunReporter:
    """
    Collects FileOutcomes for one run and prints progress and results.

    Progress is a single tqdm line rewritten in place; anything that needs
    per-file events should read the outcomes, not the output.
    """

    TABLE_HEADERS = ('#', 'Original', 'Size', 'Output', 'Size', 'Reduction', 'Status')
    PROGRESS_FORMAT = "Processing {n_fmt} of {total_fmt}"

    def __init__(self, total: int, show_report: bool = False, stream: Optional[TextIO] = None):
        self.total = total
        self.show_report = show_report
        self.stream = stream or sys.stdout
        self.console = Console(file=self.stream)
        self.totals = RunTotals()
        self.outcomes: List[FileOutcome] = []
        self._progress: Optional[tqdm] = None

    def _print(self, text: str = '') -> None:
        print(text, file=self.stream)

    def announce(self, options: RunOptions, count: int) -> None:
        """Print the run configuration before processing starts."""
        self._print(f"Optimizing {count} images with the following options:")
        self._print(f"  Format: {options.target_format.value}")
        self._print(f"  Quality: {options.quality}")
        self._print(f"  Width: {options.width or 'Original'}")
        self._print(f"  Height: {options.height or 'Original'}")
        self._print(f"  Aspect: {options.aspect_mode.value}")
        self._print(f"  Preserve format: {'yes' if options.preserve_original_format else 'no'}")
        self._print(f"  Output folder: {options.output_root}")

    def no_images(self, source_root: str) -> None:
        self._print(f"0 images found in '{source_root}'. Nothing to optimize.")

    # -------------------------------------------------------------- progress

    def _progress_bar(self) -> tqdm:
        if self._progress is None:
            self._progress = tqdm(
                total=self.total,
                file=self.stream,
                bar_format=self.PROGRESS_FORMAT,
                unit="file",
                leave=False,
                mininterval=0,
                miniters=1,
            )
        return self._progress

    def record(self, outcome: FileOutcome) -> None:
        """Account for one finished file and refresh the progress line."""
        progress = self._progress_bar()
        self.totals.add(outcome)
        self.outcomes.append(outcome)
        if not outcome.succeeded:
            # Write error to tqdm to not mess up the progress line
            tqdm.write(f"❌ Error processing {outcome.original_path}: {outcome.error}", file=self.stream)
        progress.update(1)

    def _close_progress(self) -> None:
        if self._progress is not None:
            self._progress.close()
            self._progress = None

    # --------------------------------------------------------------- results

    def _row(self, outcome: FileOutcome) -> tuple:
        if outcome.succeeded:
            return (
                str(outcome.index),
                outcome.original_path,
                format_size(outcome.original_size),
                outcome.output_path,
                format_size(outcome.output_size),
                f"{outcome.reduction_percent:.2f}%",
                'success',
            )
        return (
            str(outcome.index),
            outcome.original_path,
            format_size(outcome.original_size),
            outcome.output_path or '-',
            '-',
            '-',
            outcome.status,
        )

    def print_table(self) -> None:
        table = Table(title="Optimized images")
        for header in self.TABLE_HEADERS:
            justify = 'right' if header in ('#', 'Size', 'Reduction') else 'left'
            table.add_column(header, justify=justify)
        for outcome in self.outcomes:
            table.add_row(*(escape(cell) for cell in self._row(outcome)))
        self.console.print(table)

    def print_summary(self) -> None:
        totals = self.totals
        self._print(RULE)
        self._print("🎉 OPTIMIZATION SUMMARY")
        self._print(RULE)
        self._print(f"📁 Images optimized: {totals.files_succeeded} of {totals.files_attempted}")
        if totals.files_failed:
            self._print(f"❌ Errors: {totals.files_failed}")
        self._print(f"💾 Total size: {format_size(totals.total_original_bytes)} → "
                    f"{format_size(totals.total_output_bytes)}")
        self._print(f"📉 Total reduction: {totals.reduction_percent:.2f}%")
        self._print(f"💵 Space saved: {format_size(totals.saved_bytes)}")
        self._print(RULE)

    def finish(self) -> RunTotals:
        """Close the progress line, print the table if asked, then the summary."""
        self._close_progress()
        if self.show_report and self.outcomes:
            self._print()
            self.print_table()
        self._print()
        self.print_summary()
        return self.totals
