"""
AssertImage - Pixel-level image comparison for automated test suites.
Compares a generated image against an expected reference image and reports the
mean absolute channel difference as a score in [0, 1].

- Decoding delegated to Pillow; every format Pillow reads is accepted.
- Per-channel differences accumulated with numpy in 64-bit integers.
- assert_equals fails closed: a comparison error is an assertion failure.
- assert_not_equals fails open: images that cannot be compared are
  considered different.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from importlib import resources
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Constants
SMALL_VALUE = 0.00000001
CHANNEL_MAX = 255.0
CHANNEL_COUNT = 3
DEFAULT_DELTA = 0.0
VERSION = "1.0.0"


class AssertImageError(Exception):
    """Base class for image comparison errors"""
    pass

class InvalidInputError(AssertImageError):
    """An image reference is missing"""
    pass

class UnreadableFileError(AssertImageError):
    """Image file is missing, unreadable or not an image"""
    pass

class DimensionMismatchError(AssertImageError):
    """Images decode fine but do not have the same size"""
    pass

class ConfigError(AssertImageError):
    """Configuration related errors"""
    pass


class ImageAssertionError(AssertionError):
    """Raised by the assertion helpers when two images fail the tolerance check.

    ``difference`` is None when the difference could not be computed.
    """

    def __init__(self, text: str, expected: Any = None, actual: Any = None,
                 difference: Optional[float] = None):
        super().__init__(text)
        self.expected = expected
        self.actual = actual
        self.difference = difference


@dataclass
class AssertImageConfig:
    """Defaults used by the command line front end"""
    delta: float = DEFAULT_DELTA
    message: Optional[str] = None

    @classmethod
    def from_json(cls, path: str) -> 'AssertImageConfig':
        """Load configuration from JSON file"""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            return cls(**data)
        except Exception as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

    def to_json(self, path: str):
        """Save configuration to JSON file"""
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)


@dataclass(frozen=True, eq=False)
class RasterImage:
    """A decoded image: one row-major (R, G, B) uint8 triple per pixel"""
    identifier: str
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid image size: {self.width}x{self.height}")
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 2 or pixels.shape[1] != CHANNEL_COUNT:
            raise ValueError(f"Pixels must be an (N, {CHANNEL_COUNT}) array, got {np.shape(pixels)}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Pixels must be uint8, got {pixels.dtype}")
        # Private read-only copy, the caller's array is left untouched
        pixels = np.array(pixels, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, 'pixels', pixels)

    @property
    def pixel_count(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_image(cls, img: Image.Image, identifier: str) -> 'RasterImage':
        """Build a raster from a Pillow image. Alpha, if any, is dropped."""
        if img.mode != 'RGB':
            img = img.convert('RGB')
        width, height = img.size
        pixels = np.array(img, dtype=np.uint8).reshape(-1, CHANNEL_COUNT)
        return cls(identifier, width, height, pixels)


ImageSource = Union[str, os.PathLike, BinaryIO, Image.Image, RasterImage]


def source_identifier(source: ImageSource) -> str:
    """Human readable identifier of an image source, used in diagnostics"""
    if source is None:
        return "None"
    if isinstance(source, RasterImage):
        return source.identifier
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    if isinstance(source, Image.Image):
        return getattr(source, 'filename', None) or repr(source)
    name = getattr(source, 'name', None)
    return str(name) if name else repr(source)


def load_raster(source: ImageSource, label: str = "Expected") -> RasterImage:
    """
    Decode an image source into a RasterImage.

    Args:
        source: Path, binary file object, Pillow image or RasterImage
        label: "Expected" or "Actual", used in error messages

    Raises:
        InvalidInputError: If source is None
        UnreadableFileError: If the file is not readable or not an image
    """
    if source is None:
        raise InvalidInputError(f"{label} image file must not be null.")
    if isinstance(source, RasterImage):
        return source

    identifier = source_identifier(source)
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise UnreadableFileError(f"{label} image file is invalid. {identifier}")

    try:
        if isinstance(source, Image.Image):
            # Opened lazily by the caller, pixel data is decoded here
            raster = RasterImage.from_image(source, identifier)
        else:
            with Image.open(source) as img:
                raster = RasterImage.from_image(img, identifier)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise UnreadableFileError(f"{label} image file is not an image. {identifier}") from e

    logger.debug(f"Decoded {identifier}: {raster.width}x{raster.height}")
    return raster


def image_difference(expected: RasterImage, actual: RasterImage) -> float:
    """
    Mean absolute channel difference between two decoded images.

    Returns:
        Value in [0, 1]; 0 for identical pixels, 1 when every channel of every
        pixel is maximally different (e.g. black vs white)

    Raises:
        DimensionMismatchError: If width, height or pixel count differ
    """
    if actual.width != expected.width or actual.height != expected.height:
        raise DimensionMismatchError(
            "Images dimensions are incompatible. "
            f"Expected image: [{expected.width}px x {expected.height}px]. "
            f"Actual image: [{actual.width}px x {actual.height}px]. "
            f"Expected image file: {expected.identifier}. "
            f"Actual image file: {actual.identifier}.")

    # Only reachable with hand-built rasters, decoded ones always agree with their size
    if expected.pixel_count != actual.pixel_count:
        raise DimensionMismatchError(
            "Images dimensions are incompatible. "
            f"Expected image: [{expected.pixel_count} values]. "
            f"Actual image: [{actual.pixel_count} values]. "
            f"Expected image file: {expected.identifier}. "
            f"Actual image file: {actual.identifier}.")

    # Widen before subtracting: uint8 arithmetic would wrap around
    diff = np.abs(expected.pixels.astype(np.int64) - actual.pixels.astype(np.int64))
    red_diff, green_diff, blue_diff = (int(s) for s in diff.sum(axis=0, dtype=np.int64))

    difference = (red_diff + green_diff + blue_diff) / 3.0 / expected.pixel_count / CHANNEL_MAX
    logger.debug(
        f"Difference {expected.identifier} vs {actual.identifier}: {difference:.8f} "
        f"(R={red_diff}, G={green_diff}, B={blue_diff})")
    return difference


def get_image_difference(expected: ImageSource, actual: ImageSource) -> float:
    """
    Compare two images, pixel by pixel, and return the difference.

    Args:
        expected: The reference image
        actual: The generated image

    Returns:
        The fraction of difference between the two images, in [0, 1]

    Raises:
        InvalidInputError: If an image is None
        UnreadableFileError: If an image file is not readable or not an image
        DimensionMismatchError: If the image sizes differ
    """
    if expected is None:
        raise InvalidInputError("Expected image file must not be null.")
    if actual is None:
        raise InvalidInputError("Actual image file must not be null.")

    expected_raster = load_raster(expected, "Expected")
    actual_raster = load_raster(actual, "Actual")
    return image_difference(expected_raster, actual_raster)


def get_fail_message(message: Optional[str], expected: ImageSource, actual: ImageSource,
                     difference: Optional[float]) -> str:
    """Four line diagnostic reported by the assertion helpers"""
    return (
        f"{message or ''}\n"
        f"Expected  : {source_identifier(expected)}\n"
        f"Actual    : {source_identifier(actual)}\n"
        f"Difference: {'N/A' if difference is None else f'{difference * 100:.2f}%'}"
    )


def assert_equals(expected: ImageSource, actual: ImageSource, delta: float,
                  message: Optional[str] = None) -> None:
    """
    Fail unless the images differ by at most ``delta``.

    Any error while comparing is reported as an assertion failure with the
    difference shown as N/A.
    """
    try:
        difference = get_image_difference(expected, actual)
    except Exception as e:
        raise ImageAssertionError(
            get_fail_message(message, expected, actual, None),
            expected, actual, None) from e

    if difference > delta:
        raise ImageAssertionError(
            get_fail_message(message, expected, actual, difference),
            expected, actual, difference)


def assert_not_equals(expected: ImageSource, actual: ImageSource, delta: float,
                      message: Optional[str] = None) -> None:
    """
    Fail if the images differ by at most ``delta``.

    Images that cannot be compared (missing file, size mismatch, ...) are
    considered different, so the assertion passes.
    """
    try:
        difference = get_image_difference(expected, actual)
    except Exception as e:
        logger.debug(f"Comparison failed, images considered different: {e}")
        return

    if difference <= delta:
        raise ImageAssertionError(
            get_fail_message(message, expected, actual, difference),
            expected, actual, difference)


def get_resource_file(resource: str, package: str = "assertimage") -> Optional[Path]:
    """Filesystem path of a resource shipped in ``package``, or None"""
    try:
        candidate = resources.files(package).joinpath(resource)
    except ModuleNotFoundError:
        return None
    if not isinstance(candidate, Path) or not candidate.is_file():
        return None
    return candidate
