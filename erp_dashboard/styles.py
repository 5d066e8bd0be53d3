"""
Design tokens: light "workshop" theme.
Colors, custom CSS and the Plotly template.
"""

# ─── Color Tokens ───

COLORS = {
    # Backgrounds
    "bg_base": "#f6f7f9",
    "bg_surface": "#ffffff",
    "border": "#e3e6eb",
    # Text
    "text_primary": "#1c2430",
    "text_secondary": "#4b5563",
    "text_muted": "#8a94a3",
    # Accent (brand orange)
    "primary": "#e8590c",
    "primary_dim": "rgba(232,89,12,0.10)",
    # Semantic
    "success": "#2f9e44",
    "danger": "#e03131",
    "danger_dim": "rgba(224,49,49,0.08)",
    "warning": "#f08c00",
    "warning_dim": "rgba(240,140,0,0.10)",
    "info": "#1c7ed6",
}

CHART_COLORS = [
    COLORS["primary"],
    COLORS["info"],
    COLORS["success"],
    COLORS["warning"],
    "#7048e8",  # violet
    "#0c8599",  # teal
]

AGING_COLORS = {
    "0-30": COLORS["success"],
    "31-60": COLORS["warning"],
    "61-90": COLORS["primary"],
    "90+": COLORS["danger"],
}

LEVEL_COLORS = {
    "INFO": COLORS["info"],
    "WARNING": COLORS["warning"],
    "URGENT": COLORS["danger"],
}

STATUS_COLORS = {
    "PROFITABLE": COLORS["success"],
    "BREAK_EVEN": COLORS["info"],
    "LOSING": COLORS["danger"],
    "INCOMPLETE": COLORS["text_muted"],
}

SOURCE_COLORS = {
    "rental": COLORS["primary"],
    "contract": COLORS["info"],
    "service": COLORS["success"],
}


# ─── Plotly Template ───

PLOTLY_TEMPLATE = {
    "layout": {
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "font": {"family": "Inter, sans-serif", "color": COLORS["text_secondary"], "size": 12},
        "xaxis": {"gridcolor": COLORS["border"], "zerolinecolor": COLORS["border"]},
        "yaxis": {"gridcolor": COLORS["border"], "zerolinecolor": COLORS["border"]},
        "legend": {"bgcolor": "rgba(0,0,0,0)"},
        "colorway": CHART_COLORS,
        "margin": {"l": 10, "r": 10, "t": 10, "b": 10},
    }
}


# ─── Custom CSS ───

CUSTOM_CSS = """
<style>
.block-container {
    padding-top: 1.25rem !important;
    max-width: 1240px !important;
}

[data-testid="stMetric"] {
    background: """ + COLORS["bg_surface"] + """;
    border: 1px solid """ + COLORS["border"] + """;
    border-radius: 10px;
    padding: 16px 14px;
}
[data-testid="stMetricLabel"] {
    font-size: 0.75rem !important;
    font-weight: 600 !important;
    color: """ + COLORS["text_muted"] + """ !important;
    text-transform: uppercase !important;
}

.section-hdr {
    margin: 1rem 0 0.75rem 0;
    padding-bottom: 0.4rem;
    border-bottom: 2px solid """ + COLORS["primary_dim"] + """;
}
.section-hdr h2 {
    font-size: 1.2rem !important;
    font-weight: 700 !important;
    color: """ + COLORS["text_primary"] + """ !important;
    margin: 0 !important;
}
.section-hdr .sub {
    font-size: 0.8rem;
    color: """ + COLORS["text_muted"] + """;
}

.warn-banner {
    background: """ + COLORS["warning_dim"] + """;
    border-left: 3px solid """ + COLORS["warning"] + """;
    border-radius: 6px;
    padding: 10px 14px;
    margin-bottom: 10px;
    font-size: 0.88rem;
    color: """ + COLORS["text_primary"] + """;
}
.warn-banner.danger {
    background: """ + COLORS["danger_dim"] + """;
    border-left-color: """ + COLORS["danger"] + """;
}

.dash-header h1 {
    font-size: 1.6rem !important;
    font-weight: 700 !important;
    color: """ + COLORS["text_primary"] + """ !important;
    margin: 0 0 4px 0 !important;
}
.dash-header .meta {
    font-size: 0.8rem;
    color: """ + COLORS["text_muted"] + """;
}

.level-badge {
    display: inline-block;
    font-size: 0.7rem;
    font-weight: 700;
    padding: 2px 8px;
    border-radius: 4px;
    color: #ffffff;
}

.dash-footer {
    text-align: center;
    padding: 1.25rem 0 0.5rem 0;
    font-size: 0.75rem;
    color: """ + COLORS["text_muted"] + """;
    border-top: 1px solid """ + COLORS["border"] + """;
    margin-top: 1rem;
}
</style>
"""
