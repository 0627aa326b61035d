"""
Apply a TransformPlan to one image and record what happened.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from image_optimizer.codecs import RasterCodec, SvgOptimizer
from image_optimizer.discovery import ImageRef
from image_optimizer.planner import TransformPlan

log = logging.getLogger(__name__)


def reduction_percent(original_size: int, output_size: int) -> float:
    """Size reduction in percent; 0.0 when the original is empty."""
    if original_size <= 0:
        return 0.0
    return (original_size - output_size) / original_size * 100


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one file. error is None on success."""

    index: int
    original_path: str
    original_size: int
    output_path: Optional[str]
    output_size: int
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        return "success" if self.succeeded else f"error: {self.error}"

    @property
    def reduction_percent(self) -> float:
        if not self.succeeded:
            return 0.0
        return reduction_percent(self.original_size, self.output_size)


def output_path_for(image_ref: ImageRef, plan: TransformPlan, output_root: str) -> str:
    """output_root/<relative directory>/<stem>.<output format>"""
    filename = f"{image_ref.stem}.{plan.output_format.value}"
    return os.path.join(output_root, image_ref.relative_directory, filename)


class FileProcessor:
    """Runs the codecs for one file at a time. Failures never escape process()."""

    def __init__(self, raster_codec: Optional[RasterCodec] = None,
                 svg_optimizer: Optional[SvgOptimizer] = None):
        self.raster_codec = raster_codec or RasterCodec()
        self.svg_optimizer = svg_optimizer or SvgOptimizer()

    def process(self, index: int, image_ref: ImageRef, plan: TransformPlan,
                output_root: str) -> FileOutcome:
        """
        Transform a single image.

        Args:
            index: 1-based position of the file in the run
            image_ref: File to transform
            plan: How to transform it
            output_root: Root of the mirrored output tree

        Returns:
            FileOutcome, with error set if any step failed
        """
        input_path = image_ref.absolute_path
        original_size = 0
        output_path = None

        try:
            original_size = os.path.getsize(input_path)
            output_path = output_path_for(image_ref, plan, output_root)
            os.makedirs(os.path.dirname(output_path), exist_ok=True)

            if plan.is_passthrough:
                self._optimize_svg(input_path, output_path, plan)
            else:
                self.raster_codec.transform(input_path, output_path, plan)

            output_size = os.path.getsize(output_path)

        except Exception as e:
            log.warning("Error processing %s: %s", input_path, e)
            log.debug("Traceback for %s", input_path, exc_info=True)
            return FileOutcome(index, input_path, original_size, output_path, 0, str(e) or type(e).__name__)

        log.info("Optimized: %s -> %s", input_path, output_path)
        return FileOutcome(index, input_path, original_size, output_path, output_size)

    def _optimize_svg(self, input_path: str, output_path: str, plan: TransformPlan) -> None:
        with open(input_path, 'r', encoding='utf-8') as f:
            svg_text = f.read()
        optimized = self.svg_optimizer.optimize(svg_text, multipass=plan.codec_params.get('multipass', True))
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(optimized)
