"""AssertImage package
Exporting the comparison functions and assertion helpers for external use.

Example:
    from assertimage import assert_equals, get_image_difference
"""
from .core import (
    AssertImageConfig,
    AssertImageError,
    ConfigError,
    DimensionMismatchError,
    ImageAssertionError,
    InvalidInputError,
    RasterImage,
    UnreadableFileError,
    SMALL_VALUE,
    VERSION,
    assert_equals,
    assert_not_equals,
    get_fail_message,
    get_image_difference,
    get_resource_file,
    image_difference,
    load_raster,
)

__all__ = [
    'AssertImageConfig',
    'AssertImageError',
    'ConfigError',
    'DimensionMismatchError',
    'ImageAssertionError',
    'InvalidInputError',
    'RasterImage',
    'UnreadableFileError',
    'SMALL_VALUE',
    'VERSION',
    'assert_equals',
    'assert_not_equals',
    'get_fail_message',
    'get_image_difference',
    'get_resource_file',
    'image_difference',
    'load_raster',
]
