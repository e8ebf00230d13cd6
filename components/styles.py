"""
CSS, color constants and Plotly theme for the ABS Deal Modeler
"""
from engine.deal import Rating

# =============================================================================
# COLOR PALETTE
# =============================================================================

DARK_BG = "#0a1929"
DARK_BG_SECONDARY = "#1a2332"

CYAN_PRIMARY = "#4cc9f0"
MINT_ACCENT = "#06ffa5"

SUCCESS_GREEN = "#06ffa5"
WARNING_ORANGE = "#ffa15a"
ERROR_RED = "#ef553b"

TEXT_PRIMARY = "#ffffff"
TEXT_SECONDARY = "#b0bec5"
TEXT_MUTED = "#78909c"

CHART_COLORS = [
    "#4cc9f0",  # Cyan
    "#06ffa5",  # Mint
    "#ffa15a",  # Orange
    "#ef553b",  # Red
    "#ab63fa",  # Purple
    "#636efa",  # Blue
    "#00cc96",  # Teal
    "#fecb52",  # Yellow
]

# Investment grade on the navy spectrum, high yield in bronze, equity in charcoal
RATING_COLORS = {
    Rating.AAA: "#1C2156",
    Rating.AA: "#1E3278",
    Rating.A: "#0047BB",
    Rating.BBB: "#0779BF",
    Rating.BB: "#996B1F",
    Rating.B: "#7A5518",
    Rating.NR: "#4A4A4A",
}

STATUS_COLORS = {
    "safe": SUCCESS_GREEN,
    "impaired": WARNING_ORANGE,
    "loss": ERROR_RED,
}


def rating_color(rating: Rating) -> str:
    """Chart color for a rating"""
    return RATING_COLORS[rating]


# =============================================================================
# CSS STYLES
# =============================================================================

def get_page_css() -> str:
    """Returns the main CSS for the dashboard pages"""
    return f"""
    <style>
    .stApp {{
        background: linear-gradient(135deg, {DARK_BG} 0%, {DARK_BG_SECONDARY} 100%);
    }}

    .main-header {{
        font-size: 2.2rem;
        font-weight: 700;
        background: linear-gradient(90deg, {CYAN_PRIMARY}, {MINT_ACCENT});
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        background-clip: text;
        margin-bottom: 0.5rem;
    }}

    .sub-header {{
        color: {TEXT_SECONDARY};
        font-size: 1rem;
        margin-bottom: 1.5rem;
    }}

    .status-badge {{
        display: inline-block;
        padding: 0.2rem 0.6rem;
        border-radius: 12px;
        font-size: 0.75rem;
        font-weight: 600;
    }}
    .status-pass {{ background: rgba(6, 255, 165, 0.15); color: {SUCCESS_GREEN}; }}
    .status-fail {{ background: rgba(239, 85, 59, 0.15); color: {ERROR_RED}; }}

    #MainMenu {{visibility: hidden;}}
    footer {{visibility: hidden;}}
    </style>
    """


def get_plotly_theme() -> dict:
    """Returns Plotly layout defaults for the dashboard theme"""
    return {
        "template": "plotly_dark",
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "font": {
            "family": "Inter, -apple-system, BlinkMacSystemFont, sans-serif",
            "color": TEXT_SECONDARY,
        },
        "xaxis": {
            "gridcolor": "rgba(76, 201, 240, 0.1)",
            "linecolor": "rgba(76, 201, 240, 0.2)",
            "tickcolor": TEXT_MUTED,
        },
        "yaxis": {
            "gridcolor": "rgba(76, 201, 240, 0.1)",
            "linecolor": "rgba(76, 201, 240, 0.2)",
            "tickcolor": TEXT_MUTED,
        },
        "colorway": CHART_COLORS,
    }


def status_badge(text: str, status: str = "pass") -> str:
    """Generate HTML for a status badge"""
    return f'<span class="status-badge status-{status}">{text}</span>'


def page_header(title: str, subtitle: str = None) -> str:
    """Generate HTML for a page header"""
    subtitle_html = f'<p class="sub-header">{subtitle}</p>' if subtitle else ""
    return f"""
    <h1 class="main-header">{title}</h1>
    {subtitle_html}
    """
