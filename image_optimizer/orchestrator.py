"""
One optimization run: discover, prepare the output root, process every
image, report.
"""

import logging
import os
from typing import Optional, TextIO

from image_optimizer import planner
from image_optimizer.discovery import discover
from image_optimizer.errors import OutputPrepError
from image_optimizer.options import RunOptions
from image_optimizer.processor import FileProcessor
from image_optimizer.reporter import RunReporter, RunTotals

log = logging.getLogger(__name__)


def prepare_output_root(output_root: str) -> None:
    try:
        os.makedirs(output_root, exist_ok=True)
    except OSError as e:
        raise OutputPrepError(f"Cannot create output folder '{output_root}': {e.strerror or e}") from e


def optimize_images(options: RunOptions, processor: Optional[FileProcessor] = None,
                    stream: Optional[TextIO] = None) -> RunTotals:
    """
    Optimize every image under options.source_root.

    Per-file failures are recorded in the returned totals; only structural
    problems abort the run.

    Raises:
        DiscoveryError: a source directory could not be read
        OutputPrepError: the output root could not be created
    """
    images = discover(options.source_root, exclude=[options.output_root])
    prepare_output_root(options.output_root)

    reporter = RunReporter(len(images), options.show_report, stream)
    if not images:
        reporter.no_images(options.source_root)
        return reporter.totals

    processor = processor or FileProcessor()
    reporter.announce(options, len(images))

    for index, image_ref in enumerate(images, 1):
        plan = planner.plan(options, image_ref, image_ref.original_format)
        log.debug("Plan for %s: %s", image_ref.absolute_path, plan)
        reporter.record(processor.process(index, image_ref, plan, options.output_root))

    return reporter.finish()
