#!/usr/bin/env python3
"""
Demo script for AssertImage
Creates test images and compares them against a reference image
"""

import os
import tempfile

import numpy as np
from PIL import Image, ImageDraw
from tabulate import tabulate

from assertimage import (
    ImageAssertionError,
    assert_equals,
    assert_not_equals,
    get_image_difference,
)


def create_test_images(directory):
    """Render a small chart as the reference and a few variants of it"""

    print("Creating test images...")

    # Reference: bar chart on a light grid, as a plotting test would produce
    reference = Image.new('RGB', (320, 240), color=(245, 245, 245))
    draw = ImageDraw.Draw(reference)
    for x in range(0, 320, 40):
        draw.line([(x, 0), (x, 240)], fill=(210, 210, 210))
    for y in range(0, 240, 40):
        draw.line([(0, y), (320, y)], fill=(210, 210, 210))
    for i, value in enumerate([60, 140, 100, 190, 80]):
        left = 30 + i * 55
        draw.rectangle([left, 220 - value, left + 35, 220], fill=(31, 119, 180))
    draw.line([(20, 220), (300, 220)], fill='black', width=2)
    draw.line([(20, 20), (20, 220)], fill='black', width=2)

    original = os.path.join(directory, 'chart_reference.png')
    reference.save(original)
    print("✓ Created chart_reference.png")

    # One bar is taller
    tweaked = reference.copy()
    ImageDraw.Draw(tweaked).rectangle([140, 90, 175, 120], fill=(31, 119, 180))
    modified = os.path.join(directory, 'chart_one_bar_taller.png')
    tweaked.save(modified)
    print("✓ Created chart_one_bar_taller.png (one bar changed)")

    # Lossy copy
    compressed = os.path.join(directory, 'chart_reference.jpg')
    reference.save(compressed, quality=30)
    print("✓ Created chart_reference.jpg (JPEG quality 30)")

    # Colours inverted
    inverted = Image.fromarray(255 - np.asarray(reference))
    different = os.path.join(directory, 'chart_inverted.png')
    inverted.save(different)
    print("✓ Created chart_inverted.png (inverted colours)")

    # Different size
    resized = os.path.join(directory, 'chart_small.png')
    reference.resize((160, 120)).save(resized)
    print("✓ Created chart_small.png (half size)")

    return original, [modified, compressed, different, resized]


def run_demo():
    """Run the AssertImage demonstration"""
    print("=" * 60)
    print("AssertImage - Demo")
    print("=" * 60)

    delta = 0.01
    with tempfile.TemporaryDirectory() as directory:
        original, candidates = create_test_images(directory)

        rows = []
        for candidate in candidates:
            name = os.path.basename(candidate)
            try:
                difference = f"{get_image_difference(original, candidate):.2%}"
            except Exception as e:
                difference = f"N/A ({type(e).__name__})"

            try:
                assert_equals(original, candidate, delta)
                equals = "✅ PASS"
            except ImageAssertionError:
                equals = "❌ FAIL"

            try:
                assert_not_equals(original, candidate, delta)
                not_equals = "✅ PASS"
            except ImageAssertionError:
                not_equals = "❌ FAIL"

            rows.append([name, difference, equals, not_equals])

        print(f"\nComparison against chart_reference.png (delta {delta:.0%}):\n")
        headers = ["Image", "Difference", "assert_equals", "assert_not_equals"]
        print(tabulate(rows, headers=headers, tablefmt="grid"))

    print("\n" + "=" * 60)
    print("Demo Complete!")
    print("=" * 60)


if __name__ == '__main__':
    run_demo()
