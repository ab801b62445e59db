#!/usr/bin/env python3
"""Batch analyze page screenshots and write JSON and HTML reports."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from analyze import run_pipeline, render_html, describe_balance


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp'}
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in extensions)


def analyze_directory(images: list[Path], output_dir: Path) -> tuple[int, list]:
    """
    Analyze each image and write <stem>-palette.json / .html into output_dir.

    Returns:
        (succeeded count, list of (image name, error message) failures)
    """
    total = len(images)
    succeeded = 0
    failed = []

    for i, image_path in enumerate(images, 1):
        try:
            img_start = time.perf_counter()
            result = run_pipeline(image_path)
            img_elapsed = time.perf_counter() - img_start

            json_file = output_dir / f"{image_path.stem}-palette.json"
            html_file = output_dir / f"{image_path.stem}-palette.html"
            if json_file.exists() or html_file.exists():
                print(f"  Warning: Overwriting reports for {image_path.name}", file=sys.stderr)
            json_file.write_text(json.dumps(result.to_dict(), indent=2))
            html_file.write_text(render_html(result, str(image_path)))

            print(f"[{i}/{total}] {image_path.name} → {describe_balance(result)} "
                  f"({result.dark_percentage:.0f}% dark, {img_elapsed:.2f}s)")
            succeeded += 1

        except (OSError, ValueError) as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    return succeeded, failed


def main():
    parser = argparse.ArgumentParser(
        description='Batch analyze page screenshots and write palette reports.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for JSON and HTML output files'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    # Validate input directory
    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        sys.exit(2)

    output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        sys.exit(2)

    batch_start = time.perf_counter()
    succeeded, failed = analyze_directory(images, output_dir)
    batch_elapsed = time.perf_counter() - batch_start

    # Summary
    print()
    print(f"Completed: {succeeded}/{len(images)} succeeded in {batch_elapsed:.2f}s")
    if succeeded > 0:
        print(f"Average: {batch_elapsed / succeeded:.2f}s per image")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        sys.exit(1)


if __name__ == '__main__':
    main()
