#!/usr/bin/env python3
"""
Page palette analysis.

Summarizes the color composition of a rendered page screenshot: dark/light
balance and dominant colors, as a text report, JSON, or an HTML report.
"""

import logging
from html import escape

from color_analysis import AnalysisResult, analyze
from image_source import ImageSource, load_pixel_buffer


logger = logging.getLogger(__name__)


# =============================================================================
# Pipeline
# =============================================================================

def run_pipeline(source: ImageSource) -> AnalysisResult:
    """Load an image into an analysis buffer and analyze it.

    Raises:
        FileNotFoundError: If the image file doesn't exist
        ValueError: If the image can't be decoded or is too large
    """
    pixel_buffer = load_pixel_buffer(source)
    logger.debug("Analysis buffer: %d bytes", len(pixel_buffer))
    return analyze(pixel_buffer)


# =============================================================================
# Render
# =============================================================================

def describe_balance(result: AnalysisResult) -> str:
    if result.dark_percentage == 0 and result.light_percentage == 0:
        return "no data"
    if result.dark_percentage >= result.light_percentage:
        return "mostly dark"
    return "mostly light"


def render(result: AnalysisResult) -> str:
    """Render an analysis result as a text report."""
    if not result.dominant_colors:
        return "No color data."

    lines = []
    lines.append(f"BALANCE: {describe_balance(result)}")
    lines.append(f"Dark: {result.dark_percentage:.1f}% | Light: {result.light_percentage:.1f}%")
    lines.append(f"Distinct colors: {result.total_colors} | Shown: {len(result.dominant_colors)}")
    lines.append("")

    lines.append("DOMINANT COLORS:")
    lines.append("")
    for color in result.dominant_colors:
        tone = "dark" if color.is_dark else "light"
        lines.append(f"  {color.hex}  RGB{color.rgb}  {color.percentage:5.1f}%  "
                     f"luminance {color.luminance:.3f}  {tone}")

    return "\n".join(lines)


def text_color_for_background(is_dark: bool) -> str:
    """Return black or white text color based on background classification."""
    return "#fff" if is_dark else "#000"


def render_html(result: AnalysisResult, image_path: str) -> str:
    """Render an analysis result as a standalone HTML page."""
    safe_path = escape(image_path)

    css = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #f5f5f5;
            color: #333;
            line-height: 1.5;
            padding: 2rem;
            max-width: 900px;
            margin: 0 auto;
        }
        h1 { font-size: 1.5rem; margin-bottom: 0.5rem; }
        h2 { font-size: 1.2rem; margin: 2rem 0 1rem; border-bottom: 1px solid #ddd; padding-bottom: 0.5rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 1rem; }
        .balance-bar {
            display: flex;
            height: 24px;
            border-radius: 6px;
            overflow: hidden;
            font-size: 0.75rem;
            font-weight: 600;
        }
        .balance-bar .dark { background: #222; color: #fff; padding-left: 0.5rem; }
        .balance-bar .light { background: #eee; color: #000; text-align: right; padding-right: 0.5rem; }
        .palette-strip {
            display: flex;
            height: 80px;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            margin: 1.5rem 0;
        }
        .palette-strip .swatch {
            display: flex;
            align-items: flex-end;
            justify-content: center;
            padding: 0.5rem;
            font-size: 0.7rem;
            font-weight: 500;
        }
        .color-card {
            background: #fff;
            border-radius: 8px;
            padding: 1rem;
            margin-bottom: 1rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
            display: grid;
            grid-template-columns: 60px 1fr;
            gap: 1rem;
        }
        .color-card .swatch {
            width: 60px;
            height: 60px;
            border-radius: 6px;
            display: flex;
            align-items: center;
            justify-content: center;
            font-size: 0.65rem;
            font-weight: 600;
        }
        .color-card .info { font-size: 0.85rem; }
        .color-card .tone { font-weight: 600; text-transform: capitalize; }
        .color-card .values { font-family: monospace; color: #555; font-size: 0.8rem; }
    """

    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'  <title>Palette: {safe_path}</title>',
        f'  <style>{css}</style>',
        '</head>',
        '<body>',
    ]

    lines.append(f'<h1>{describe_balance(result).capitalize()}</h1>')
    lines.append(f'<p class="meta">Source: {safe_path}</p>')
    lines.append(f'<p class="meta">{result.total_colors} distinct colors | '
                 f'{len(result.dominant_colors)} shown</p>')

    # Dark/light balance bar
    lines.append('<div class="balance-bar">')
    if result.dark_percentage > 0:
        lines.append(f'  <div class="dark" style="flex:{result.dark_percentage:.1f}">'
                     f'{result.dark_percentage:.1f}% dark</div>')
    if result.light_percentage > 0:
        lines.append(f'  <div class="light" style="flex:{result.light_percentage:.1f}">'
                     f'{result.light_percentage:.1f}% light</div>')
    lines.append('</div>')

    # Palette strip
    lines.append('<div class="palette-strip">')
    total_share = sum(c.percentage for c in result.dominant_colors) or 1
    for color in result.dominant_colors:
        width_pct = max(3, (color.percentage / total_share) * 100)  # min 3% for visibility
        text_color = text_color_for_background(color.is_dark)
        lines.append(f'  <div class="swatch" style="background:{color.hex}; color:{text_color}; '
                     f'flex:{width_pct:.1f}">{color.hex}</div>')
    lines.append('</div>')

    # Color details
    lines.append('<h2>Dominant Colors</h2>')
    for color in result.dominant_colors:
        text_color = text_color_for_background(color.is_dark)
        tone = "dark" if color.is_dark else "light"
        lines.append('<div class="color-card">')
        lines.append(f'  <div class="swatch" style="background:{color.hex}; color:{text_color}">{color.hex}</div>')
        lines.append('  <div class="info">')
        lines.append(f'    <span class="tone">{tone}</span>')
        lines.append(f'    <div class="values">RGB{color.rgb} · {color.percentage:.1f}%</div>')
        lines.append(f'    <div class="values">Luminance: {color.luminance:.3f} · '
                     f'Brightness: {color.brightness:.0f}</div>')
        lines.append('  </div>')
        lines.append('</div>')

    lines.append('</body>')
    lines.append('</html>')

    return '\n'.join(lines)


# =============================================================================
# CLI
# =============================================================================

if __name__ == '__main__':
    import argparse
    import json
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(
        description='Analyze the dark/light balance and dominant colors of a page screenshot.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the result as JSON instead of a text report'
    )
    parser.add_argument(
        '--output', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write HTML report. Optionally specify path, otherwise auto-names from input.'
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
    image_path = Path(args.input)

    try:
        result = run_pipeline(image_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render(result))

    if args.output:
        if args.output is True:
            output_path = image_path.with_name(f"{image_path.stem}-palette.html")
        else:
            output_path = Path(args.output)

        try:
            output_path.write_text(render_html(result, str(image_path)))
            print(f"\nWrote: {output_path}", file=sys.stderr if args.json else sys.stdout)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            sys.exit(1)
