"""
Reusable HTML snippets for the dashboard.
Return strings for st.markdown(html, unsafe_allow_html=True).
"""

from html import escape

from erp_dashboard.styles import LEVEL_COLORS, COLORS


def dashboard_header(tenant: str, month: str) -> str:
    """Main dashboard header."""
    return f"""
    <div class="dash-header">
        <h1>Pénzügyi áttekintés</h1>
        <div class="meta">Bérlő: {escape(tenant)} &middot; Hónap: {escape(month)}</div>
    </div>
    """


def section_header(title: str, subtitle: str = None) -> str:
    """Section header with accent border."""
    sub_html = f'<div class="sub">{subtitle}</div>' if subtitle else ""
    return f"""
    <div class="section-hdr">
        <h2>{title}</h2>
        {sub_html}
    </div>
    """


def warning_banner(message: str, danger: bool = False) -> str:
    """Amber (or red) alert banner."""
    variant = " danger" if danger else ""
    return f'<div class="warn-banner{variant}">{message}</div>'


def level_badge(level: str) -> str:
    """Colored badge of an expiration level."""
    color = LEVEL_COLORS.get(level, COLORS["text_muted"])
    return f'<span class="level-badge" style="background:{color}">{escape(level)}</span>'


def footer(api_url: str) -> str:
    return f"""
    <div class="dash-footer">
        Adatforrás: {escape(api_url)} &middot; Frissítés 5 percenként
    </div>
    """
