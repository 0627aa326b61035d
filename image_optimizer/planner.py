"""
Per-file transform planning.

plan() is a pure function of the run options and a file's original format:
it decides the output format, the optional resize and the encoder settings.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from image_optimizer.discovery import ImageRef
from image_optimizer.options import DEFAULT_FORMAT, AspectMode, OutputFormat, RunOptions

MIN_PNG_LEVEL = 0
MAX_PNG_LEVEL = 9


@dataclass(frozen=True)
class ResizeSpec:
    width: Optional[int]
    height: Optional[int]
    fit: AspectMode
    entropy_anchor: bool = False


@dataclass(frozen=True)
class TransformPlan:
    output_format: OutputFormat
    resize: Optional[ResizeSpec] = None
    codec_params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_passthrough(self) -> bool:
        return self.output_format is OutputFormat.SVG


def png_compress_level(quality: int) -> int:
    """Map a 1-100 quality score to a zlib compression level (80 -> 1, 1 -> 9, 100 -> 0)."""
    return max(MIN_PNG_LEVEL, min(MAX_PNG_LEVEL, (100 - quality) // 11))


def _codec_params(output_format: OutputFormat, quality: int) -> Dict[str, Any]:
    if output_format in (OutputFormat.JPG, OutputFormat.WEBP):
        return {'quality': quality}
    if output_format is OutputFormat.PNG:
        return {
            'compress_level': png_compress_level(quality),
            'adaptive_filtering': True,
            'palette': True,
        }
    return {'multipass': True}


def _resize_spec(options: RunOptions) -> Optional[ResizeSpec]:
    if not options.resizes:
        return None
    return ResizeSpec(
        width=options.width,
        height=options.height,
        fit=options.aspect_mode,
        entropy_anchor=options.aspect_mode is AspectMode.CROP,
    )


def plan(options: RunOptions, image_ref: Optional[ImageRef], original_format: str) -> TransformPlan:
    """
    Decide how a single file is transformed.

    Args:
        options: Global run options
        image_ref: The file being planned
        original_format: Normalized source format ('jpg', 'png', 'webp' or 'svg')

    Returns:
        TransformPlan for the file
    """
    if original_format == OutputFormat.SVG.value:
        return TransformPlan(OutputFormat.SVG, None, _codec_params(OutputFormat.SVG, options.quality))

    if options.target_format is DEFAULT_FORMAT and options.preserve_original_format:
        output_format = OutputFormat(original_format)
    else:
        output_format = options.target_format

    return TransformPlan(
        output_format=output_format,
        resize=_resize_spec(options),
        codec_params=_codec_params(output_format, options.quality),
    )
