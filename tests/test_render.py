from analyze import describe_balance, render, render_html
from color_analysis import AnalysisResult, DominantColor


def sample_result() -> AnalysisResult:
    return AnalysisResult(
        dominant_colors=[
            DominantColor(rgb=(10, 10, 20), hex='#0a0a14', percentage=70.0,
                          brightness=1.6, luminance=0.0063, is_dark=True),
            DominantColor(rgb=(240, 240, 240), hex='#f0f0f0', percentage=30.0,
                          brightness=223.2, luminance=0.8753, is_dark=False),
        ],
        dark_percentage=70.0,
        light_percentage=30.0,
        total_colors=2,
    )


def test_describe_balance():
    assert describe_balance(sample_result()) == "mostly dark"
    light = AnalysisResult(dark_percentage=10.0, light_percentage=90.0)
    assert describe_balance(light) == "mostly light"
    assert describe_balance(AnalysisResult.empty()) == "no data"


def test_render_lists_every_color():
    text = render(sample_result())
    assert text.startswith("BALANCE: mostly dark")
    assert "Dark: 70.0% | Light: 30.0%" in text
    assert "#0a0a14" in text and "#f0f0f0" in text


def test_render_empty_result():
    assert render(AnalysisResult.empty()) == "No color data."


def test_render_html_escapes_source_path():
    html = render_html(sample_result(), '<shot>.png')
    assert '&lt;shot&gt;.png' in html
    assert '<shot>.png' not in html
    assert html.count('class="color-card"') == 2
    assert 'background:#f0f0f0; color:#000' in html
