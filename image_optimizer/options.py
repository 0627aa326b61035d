"""
Run options and their defaults.

A RunOptions value is built once from the command line and handed explicitly
to every stage of the run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from image_optimizer.errors import ValidationError


class OutputFormat(str, Enum):
    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
    SVG = "svg"  # passthrough only, never a CLI choice


class AspectMode(str, Enum):
    SCALE = "scale"      # fit inside the box, keep aspect ratio
    CROP = "crop"        # cover the box, crop the overflow
    STRETCH = "stretch"  # exact box, ignore aspect ratio


DEFAULT_FORMAT = OutputFormat.JPG
DEFAULT_QUALITY = 80
DEFAULT_WIDTH = None  # original width
DEFAULT_HEIGHT = None  # original height
DEFAULT_ASPECT = "scale"
DEFAULT_FOLDER = "optimized_images"
DEFAULT_SOURCE = "."

SUPPORTED_FORMATS = ["jpg", "png", "webp"]
ASPECT_CHOICES = ["scale", "crop", "false"]

MIN_QUALITY = 1
MAX_QUALITY = 100


def parse_format(value: Union[str, OutputFormat]) -> OutputFormat:
    """Map a target format name to OutputFormat, raising ValidationError if unsupported."""
    name = value.value if isinstance(value, OutputFormat) else value
    if name not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Format must be one of: {', '.join(SUPPORTED_FORMATS)} (got {value!r})"
        )
    return OutputFormat(name)


def parse_aspect(value: Union[str, bool, AspectMode]) -> AspectMode:
    """
    Map an aspect value to AspectMode.

    Strings must be one of ASPECT_CHOICES exactly; 'false' (or a literal
    False) is the spelling of stretch.
    """
    if isinstance(value, AspectMode):
        return value
    if value is False or value == "false":
        return AspectMode.STRETCH
    if value in ("scale", "crop"):
        return AspectMode(value)
    raise ValidationError(
        f"Aspect must be 'scale', 'crop' or false (got {value!r})"
    )


@dataclass(frozen=True)
class RunOptions:
    target_format: OutputFormat = DEFAULT_FORMAT
    quality: int = DEFAULT_QUALITY
    width: Optional[int] = DEFAULT_WIDTH
    height: Optional[int] = DEFAULT_HEIGHT
    aspect_mode: AspectMode = AspectMode.SCALE
    output_root: str = DEFAULT_FOLDER
    preserve_original_format: bool = True
    show_report: bool = False
    source_root: str = DEFAULT_SOURCE

    def __post_init__(self):
        # Normalise loose inputs (plain strings) so callers can pass CLI values.
        object.__setattr__(self, "target_format", parse_format(self.target_format))
        object.__setattr__(self, "aspect_mode", parse_aspect(self.aspect_mode))

        if isinstance(self.quality, bool) or not isinstance(self.quality, int):
            raise ValidationError(f"Quality must be an integer (got {self.quality!r})")
        if not MIN_QUALITY <= self.quality <= MAX_QUALITY:
            raise ValidationError(
                f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY} (got {self.quality})"
            )
        for name in ("width", "height"):
            size = getattr(self, name)
            if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size <= 0):
                raise ValidationError(f"{name.capitalize()} must be a positive integer (got {size!r})")

    @property
    def resizes(self) -> bool:
        return bool(self.width or self.height)
