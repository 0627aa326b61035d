"""
Image codecs used by the file processor.

RasterCodec wraps Pillow: decode, resize according to a ResizeSpec, and
re-encode as JPEG, PNG or WebP. SvgOptimizer wraps scour for vector files.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np
from PIL import Image
from scour import scour

from image_optimizer.options import AspectMode, OutputFormat
from image_optimizer.planner import ResizeSpec, TransformPlan

log = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS

# Number of candidate windows tried along the overflowing axis when cropping.
ENTROPY_STEPS = 16


def calculate_entropy(gray: np.ndarray) -> float:
    """Shannon entropy (bits) of an 8-bit grayscale array."""
    hist = np.bincount(gray.ravel(), minlength=256)
    hist = hist[hist > 0]
    if hist.size == 0:
        return 0.0
    p = hist / hist.sum()
    return float(-np.sum(p * np.log2(p)))


def entropy_offset(gray: np.ndarray, window: int, axis: int) -> int:
    """
    Pick where a crop window of the given length starts along one axis.

    Candidate windows are slid across the overflow and the one with the
    highest entropy (most detail) wins. Ties keep the centered window.

    Args:
        gray: 2D uint8 array (rows, cols)
        window: Length of the crop window along axis
        axis: 0 to slide vertically, 1 to slide horizontally

    Returns:
        Offset of the chosen window
    """
    overflow = gray.shape[axis] - window
    if overflow <= 0:
        return 0

    def window_entropy(offset: int) -> float:
        if axis == 0:
            return calculate_entropy(gray[offset:offset + window, :])
        return calculate_entropy(gray[:, offset:offset + window])

    best_offset = overflow // 2
    best_entropy = window_entropy(best_offset)

    step = max(1, overflow // ENTROPY_STEPS)
    offsets = list(range(0, overflow + 1, step))
    if offsets[-1] != overflow:
        offsets.append(overflow)

    for offset in offsets:
        entropy = window_entropy(offset)
        if entropy > best_entropy:
            best_offset, best_entropy = offset, entropy

    return best_offset


def _has_alpha(img: Image.Image) -> bool:
    return 'A' in img.getbands() or 'transparency' in img.info


class RasterCodec:
    """Pillow-backed raster transform: decode, resize, encode, write."""

    def transform(self, input_path: str, output_path: str, plan: TransformPlan) -> None:
        """
        Produce output_path from input_path according to plan.

        Raises:
            OSError, ValueError: on unreadable input or encoder failure
        """
        with Image.open(input_path) as img:
            img.load()
            if plan.resize is not None:
                img = self.resize(img, plan.resize)
            self.encode(img, output_path, plan.output_format, plan.codec_params)

    # ---------------------------------------------------------------- resize

    @staticmethod
    def _target_box(size: Tuple[int, int], spec: ResizeSpec) -> Tuple[int, int]:
        """Fill in a missing width or height from the source aspect ratio."""
        src_w, src_h = size
        if spec.width and spec.height:
            return spec.width, spec.height
        if spec.width:
            return spec.width, max(1, round(src_h * spec.width / src_w))
        return max(1, round(src_w * spec.height / src_h)), spec.height

    def resize(self, img: Image.Image, spec: ResizeSpec) -> Image.Image:
        box_w, box_h = self._target_box(img.size, spec)

        # With only one side given the box already has the source aspect ratio.
        if not (spec.width and spec.height) or spec.fit is AspectMode.STRETCH:
            return img.resize((box_w, box_h), RESAMPLE)
        if spec.fit is AspectMode.CROP:
            return self._cover(img, box_w, box_h, spec.entropy_anchor)
        return self._inside(img, box_w, box_h)

    @staticmethod
    def _inside(img: Image.Image, box_w: int, box_h: int) -> Image.Image:
        ratio = min(box_w / img.width, box_h / img.height)
        new_size = (max(1, round(img.width * ratio)), max(1, round(img.height * ratio)))
        if new_size == img.size:
            return img
        return img.resize(new_size, RESAMPLE)

    @staticmethod
    def _cover(img: Image.Image, box_w: int, box_h: int, entropy_anchor: bool) -> Image.Image:
        ratio = max(box_w / img.width, box_h / img.height)
        scaled_w = max(box_w, round(img.width * ratio))
        scaled_h = max(box_h, round(img.height * ratio))
        if (scaled_w, scaled_h) != img.size:
            img = img.resize((scaled_w, scaled_h), RESAMPLE)

        left = (scaled_w - box_w) // 2
        top = (scaled_h - box_h) // 2
        if entropy_anchor:
            gray = np.asarray(img.convert('L'))
            if scaled_w > box_w:
                left = entropy_offset(gray, box_w, axis=1)
            if scaled_h > box_h:
                top = entropy_offset(gray, box_h, axis=0)

        return img.crop((left, top, left + box_w, top + box_h))

    # ---------------------------------------------------------------- encode

    def encode(self, img: Image.Image, output_path: str,
               output_format: OutputFormat, params: Dict[str, Any]) -> None:
        encoders = {
            OutputFormat.JPG: self._save_jpeg,
            OutputFormat.PNG: self._save_png,
            OutputFormat.WEBP: self._save_webp,
        }
        if output_format not in encoders:
            raise ValueError(f"Raster codec cannot encode '{output_format.value}'")
        encoders[output_format](img, output_path, params)
        log.debug("Encoded %s as %s with %s", output_path, output_format.value, params)

    @staticmethod
    def _save_jpeg(img: Image.Image, output_path: str, params: Dict[str, Any]) -> None:
        if img.mode not in ('RGB', 'L'):
            img = img.convert('RGB')
        img.save(
            output_path,
            format='JPEG',
            quality=params['quality'],
            optimize=True,
            progressive=True,
        )

    @staticmethod
    def _save_png(img: Image.Image, output_path: str, params: Dict[str, Any]) -> None:
        # Pillow's zlib encoder already filters each scanline adaptively; the
        # palette pass is where most of the size goes.
        if params.get('palette') and img.mode not in ('P', '1', 'L'):
            if _has_alpha(img):
                img = img.convert('RGBA').quantize(colors=256, method=Image.Quantize.FASTOCTREE)
            else:
                img = img.convert('RGB').quantize(colors=256)
        img.save(output_path, format='PNG', compress_level=params['compress_level'])

    @staticmethod
    def _save_webp(img: Image.Image, output_path: str, params: Dict[str, Any]) -> None:
        if img.mode not in ('RGB', 'RGBA'):
            img = img.convert('RGBA' if _has_alpha(img) else 'RGB')
        img.save(
            output_path,
            format='WEBP',
            quality=params['quality'],
            method=4,  # Good balance of speed/compression
        )


class SvgOptimizer:
    """scour-backed SVG minifier with an SVGO-style multipass mode."""

    MAX_PASSES = 10

    def __init__(self, options: Optional[Any] = None):
        self.options = options if options is not None else self.default_options()

    @staticmethod
    def default_options():
        options = scour.sanitizeOptions()
        options.strip_comments = True
        options.remove_metadata = True
        options.remove_descriptive_elements = True
        options.strip_xml_prolog = True
        options.strip_xml_space_attribute = True
        options.enable_viewboxing = True
        options.shorten_ids = True
        options.embed_rasters = False
        options.indent_type = 'none'
        options.newlines = False
        options.quiet = True
        return options

    def optimize(self, svg_text: str, multipass: bool = True) -> str:
        """
        Minify SVG markup.

        With multipass, passes repeat on their own output until a pass no
        longer shrinks it, up to MAX_PASSES.
        """
        best = scour.scourString(svg_text, self.options)
        passes = 1
        while multipass and passes < self.MAX_PASSES:
            candidate = scour.scourString(best, self.options)
            passes += 1
            if len(candidate) >= len(best):
                break
            best = candidate
        log.debug("SVG optimized in %d passes: %d -> %d chars", passes, len(svg_text), len(best))
        return best
