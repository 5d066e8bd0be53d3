"""
Rental ERP - financial dashboard
Equipment payback, receivables aging, expiring rentals and revenue forecast.

Run:
    streamlit run erp_dashboard/app.py --server.port 8502
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Make sure the project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import logging

import streamlit as st
import plotly.graph_objects as go
import pandas as pd

from erp_dashboard.api.kgc_client import KgcClient
from erp_dashboard.config import API_BASE_URL, TENANT_ID, TOP_DEBTORS_LIMIT
from erp_dashboard.logging_config import configure_logging
from erp_dashboard.models.rental_models import ExpirationLevel
from erp_dashboard.services.equipment_profit_service import EquipmentProfitService
from erp_dashboard.services.receivables_service import (
    build_aging_report,
    aging_invoices_frame,
)
from erp_dashboard.services.rental_expiration_service import (
    check_expirations,
    group_by_level,
    notifications_frame,
)
from erp_dashboard.services.revenue_forecast_service import RevenueForecastService
from erp_dashboard.styles import (
    CUSTOM_CSS,
    PLOTLY_TEMPLATE,
    COLORS,
    AGING_COLORS,
    SOURCE_COLORS,
    STATUS_COLORS,
)
from erp_dashboard.components import (
    dashboard_header,
    section_header,
    warning_banner,
    level_badge,
    footer,
)
from erp_dashboard.utils.caching import cached, clear_all_caches
from erp_dashboard.utils.formatting import format_huf, format_percent, format_days
from erp_dashboard.utils.params import clamp_days, clamp_limit, parse_month, month_key

configure_logging()
logger = logging.getLogger("erp_dashboard.app")


# ═══════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════

st.set_page_config(
    page_title="Pénzügyi áttekintés",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(CUSTOM_CSS, unsafe_allow_html=True)


# ═══════════════════════════════════════════════════════
# DATA LOADING (cached)
# ═══════════════════════════════════════════════════════

@cached()
def load_raw_data(tenant_id: str):
    """Fetch raw rows from the ERP API (cached for 5 min)."""
    client = KgcClient()
    invoices = client.get_unpaid_invoices(tenant_id)
    rentals = client.get_active_rentals(tenant_id)
    equipment = client.list_equipment(tenant_id)
    return invoices, rentals, equipment


@cached()
def load_forecast(tenant_id: str, month_str: str, now: datetime):
    client = KgcClient()
    month = parse_month(month_str, now.date())
    return RevenueForecastService(client).get_forecast(tenant_id, month, now)


@cached()
def load_equipment_profits(tenant_id: str, equipment_ids: tuple[str, ...]):
    service = EquipmentProfitService(KgcClient())
    return [service.calculate_profit(eq_id, tenant_id) for eq_id in equipment_ids]


def compute_all_metrics(invoices, rentals, now: datetime, top_limit: int, window_days: int) -> dict:
    """Run the calculators over the raw rows."""
    aging = build_aging_report(invoices, now, top_limit=top_limit)
    # Narrower sidebar window hides the far end of the 7-day notification range
    notifications = [
        n for n in check_expirations(rentals, now)
        if n.days_until_expiry <= window_days
    ]
    return {
        "aging": aging,
        "aging_df": aging_invoices_frame(aging),
        "notifications": notifications,
        "by_level": group_by_level(notifications),
        "notifications_df": notifications_frame(notifications),
    }


# ═══════════════════════════════════════════════════════
# SIDEBAR
# ═══════════════════════════════════════════════════════

now = datetime.now(timezone.utc)

with st.sidebar:
    st.title("Beállítások")
    tenant_id = st.text_input("Tenant ID", value=TENANT_ID or "")
    month_input = st.text_input("Előrejelzés hónapja (ÉÉÉÉ-HH)", value=month_key(now.date()))
    top_limit = clamp_limit(
        st.number_input("Top adósok száma", min_value=1, max_value=20, value=TOP_DEBTORS_LIMIT),
        default=TOP_DEBTORS_LIMIT,
    )
    window_days = clamp_days(
        st.slider("Lejárati ablak (nap)", min_value=1, max_value=7, value=7),
    )
    if st.button("Adatok frissítése", use_container_width=True):
        clear_all_caches()
        st.rerun()
    st.caption("Gyorsítótár: 5 perc")

if not tenant_id:
    st.info("Adja meg a tenant azonosítót a bal oldali sávban (KGC_TENANT_ID).")
    st.stop()

forecast_month = parse_month(month_input, now.date())

st.markdown(
    dashboard_header(tenant=tenant_id, month=month_key(forecast_month)),
    unsafe_allow_html=True,
)


# ═══════════════════════════════════════════════════════
# LOAD & COMPUTE
# ═══════════════════════════════════════════════════════

try:
    with st.spinner("Adatok betöltése..."):
        invoices, rentals, equipment = load_raw_data(tenant_id)
        m = compute_all_metrics(invoices, rentals, now, top_limit, window_days)
        forecast = load_forecast(tenant_id, month_key(forecast_month), now.replace(second=0, microsecond=0))
        profits = load_equipment_profits(tenant_id, tuple(e["id"] for e in equipment if e.get("id")))
except Exception as e:
    logger.exception("dashboard data load failed", extra={"tenant_id": tenant_id})
    st.error(f"Hiba az ERP API elérésekor: {e}")
    st.info("Ellenőrizze a tokent vagy futtassa:\n`python -m erp_dashboard.api.auth`")
    st.stop()


# ═══════════════════════════════════════════════════════
# WARNINGS
# ═══════════════════════════════════════════════════════

aging = m["aging"]
by_level = m["by_level"]
comparison = forecast.comparison

warnings_html = []

overdue_rentals = [n for n in by_level[ExpirationLevel.URGENT] if n.is_overdue]
if overdue_rentals:
    warnings_html.append(warning_banner(
        f"<strong>{len(overdue_rentals)} lejárt bérlés</strong> vár lezárásra vagy hosszabbításra",
        danger=True,
    ))

over_90 = aging.bucket("90+")
if over_90 and over_90.count:
    warnings_html.append(warning_banner(
        f"90 napon túli kintlévőség: <strong>{format_huf(over_90.total_amount)}</strong> "
        f"({over_90.count} számla)"
    ))

if comparison.trend == "down":
    warnings_html.append(warning_banner(
        f"Várható bevétel csökken: <strong>{format_percent(comparison.change_percent, 2)}</strong> "
        f"az előző hónaphoz képest"
    ))

if warnings_html:
    st.markdown("".join(warnings_html), unsafe_allow_html=True)


# ═══════════════════════════════════════════════════════
# ROW 1: KPIs
# ═══════════════════════════════════════════════════════

st.markdown(section_header("Fő mutatók"), unsafe_allow_html=True)

c1, c2, c3, c4 = st.columns(4)

with c1:
    st.metric(label="Kintlévőség", value=format_huf(aging.total_receivables))

with c2:
    st.metric(
        label="Várható bevétel",
        value=format_huf(forecast.total_forecast),
        delta=format_percent(comparison.change_percent, 2) if comparison.previous_month else None,
        help=f"Előző havi tény: {format_huf(comparison.previous_month)}",
    )

with c3:
    st.metric(
        label=f"Lejáró bérlések ({window_days} nap)",
        value=str(len(m["notifications"])),
        help=f"{len(by_level[ExpirationLevel.URGENT])} sürgős, "
             f"{len(by_level[ExpirationLevel.WARNING])} figyelmeztetés",
    )

with c4:
    profitable = sum(1 for p in profits if p.status.value == "PROFITABLE")
    st.metric(
        label="Megtérült bérgépek",
        value=f"{profitable} / {len(profits)}",
    )


# ═══════════════════════════════════════════════════════
# ROW 2: RECEIVABLES AGING
# ═══════════════════════════════════════════════════════

st.markdown(
    section_header("Kintlévőségek korosítása", "Lejárat óta eltelt napok szerint"),
    unsafe_allow_html=True,
)

col_chart, col_debtors = st.columns([3, 2])

with col_chart:
    fig_aging = go.Figure(go.Bar(
        y=[f"{b.label} nap" for b in aging.buckets],
        x=[b.total_amount for b in aging.buckets],
        orientation="h",
        marker_color=[AGING_COLORS.get(b.label, COLORS["text_muted"]) for b in aging.buckets],
        text=[f"{format_huf(b.total_amount)}  ({b.count} db)" for b in aging.buckets],
        textposition="auto",
    ))
    fig_aging.update_layout(
        template=PLOTLY_TEMPLATE,
        height=280,
        xaxis=dict(visible=False),
        yaxis=dict(autorange="reversed"),
        showlegend=False,
    )
    st.plotly_chart(fig_aging, use_container_width=True)

with col_debtors:
    st.caption("Legnagyobb adósok")
    if aging.top_debtors:
        st.dataframe(
            pd.DataFrame([{
                "Partner": d.partner_name,
                "Tartozás": format_huf(d.total_debt),
                "Számlák": d.invoice_count,
                "Legrégebbi lejárat": d.oldest_due_date.strftime("%Y.%m.%d."),
            } for d in aging.top_debtors]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.success("Nincs nyitott kintlévőség.")

if not m["aging_df"].empty:
    with st.expander(f"Nyitott számlák ({len(m['aging_df'])})"):
        st.dataframe(m["aging_df"], use_container_width=True, hide_index=True)


# ═══════════════════════════════════════════════════════
# ROW 3: EXPIRING RENTALS
# ═══════════════════════════════════════════════════════

st.markdown(section_header("Lejáró bérlések", f"Következő {window_days} nap és lejártak"), unsafe_allow_html=True)

if m["notifications"]:
    for level in (ExpirationLevel.URGENT, ExpirationLevel.WARNING, ExpirationLevel.INFO):
        items = by_level[level]
        if not items:
            continue
        st.markdown(f"{level_badge(level.value)} &nbsp; {len(items)} bérlés", unsafe_allow_html=True)
        st.dataframe(
            pd.DataFrame([{
                "Partner": n.partner_name,
                "Telefon": n.partner_phone or "",
                "Gép": n.equipment_name,
                "Lejárat": format_days(n.days_until_expiry),
            } for n in items]),
            use_container_width=True,
            hide_index=True,
        )
    with st.expander("Értesítés szövegek"):
        st.dataframe(
            m["notifications_df"][["level", "message"]],
            use_container_width=True,
            hide_index=True,
        )
else:
    st.success(f"Nincs lejáró bérlés a következő {window_days} napban.")


# ═══════════════════════════════════════════════════════
# ROW 4: REVENUE FORECAST
# ═══════════════════════════════════════════════════════

st.markdown(
    section_header("Várható bevétel", f"{forecast.forecast_month} forrásonként"),
    unsafe_allow_html=True,
)

col_donut, col_cmp = st.columns([3, 2])

with col_donut:
    if forecast.total_forecast > 0:
        fig_donut = go.Figure(go.Pie(
            labels=[s.label for s in forecast.sources],
            values=[s.amount for s in forecast.sources],
            hole=0.55,
            marker=dict(colors=[SOURCE_COLORS.get(s.type) for s in forecast.sources]),
            textinfo="label+percent",
        ))
        fig_donut.update_layout(
            template=PLOTLY_TEMPLATE,
            height=320,
            showlegend=False,
            annotations=[dict(
                text=f"<b>{format_huf(forecast.total_forecast)}</b>",
                x=0.5, y=0.5, showarrow=False,
            )],
        )
        st.plotly_chart(fig_donut, use_container_width=True)
    else:
        st.info("Nincs várható bevétel a kiválasztott hónapra.")

with col_cmp:
    for s in forecast.sources:
        st.caption(f"{s.label}: **{format_huf(s.amount)}** ({s.percentage}%, {s.count} tétel)")
    trend_label = {"up": "Növekvő", "down": "Csökkenő", "stable": "Stabil"}[comparison.trend]
    st.metric(
        label="Trend az előző hónaphoz",
        value=trend_label,
        delta=format_huf(comparison.change_amount) if comparison.previous_month else None,
    )


# ═══════════════════════════════════════════════════════
# ROW 5: EQUIPMENT PAYBACK
# ═══════════════════════════════════════════════════════

st.markdown(section_header("Bérgépek megtérülése"), unsafe_allow_html=True)

if profits:
    df_profit = pd.DataFrame([p.to_dict() for p in profits])
    complete = df_profit[df_profit["status"] != "INCOMPLETE"].sort_values("roi", ascending=False)

    if not complete.empty:
        fig_roi = go.Figure(go.Bar(
            x=complete["equipmentId"],
            y=complete["roi"],
            marker_color=[STATUS_COLORS[s] for s in complete["status"]],
            hovertemplate="<b>%{x}</b><br>ROI: %{y:.2f}%<extra></extra>",
        ))
        fig_roi.add_hline(y=0, line_dash="dash", line_color=COLORS["text_muted"], opacity=0.5)
        fig_roi.update_layout(template=PLOTLY_TEMPLATE, height=320, yaxis=dict(title="ROI %"))
        st.plotly_chart(fig_roi, use_container_width=True)

        st.dataframe(
            pd.DataFrame({
                "Bérgép": complete["equipmentId"],
                "Vételár": complete["purchasePrice"].map(format_huf),
                "Bevétel": complete["totalRentalRevenue"].map(format_huf),
                "Szerviz": complete["totalServiceCost"].map(format_huf),
                "Profit": complete["profit"].map(format_huf),
                "ROI": complete["roi"].map(lambda v: format_percent(v, 2)),
                "Státusz": complete["status"],
            }),
            use_container_width=True,
            hide_index=True,
        )

    incomplete = df_profit[df_profit["status"] == "INCOMPLETE"]
    if not incomplete.empty:
        with st.expander(f"Hiányos adatok ({len(incomplete)} gép)"):
            st.dataframe(
                incomplete[["equipmentId", "error"]],
                use_container_width=True,
                hide_index=True,
            )
else:
    st.info("Nincs bérgép a tenanthoz.")


# ═══════════════════════════════════════════════════════
# FOOTER
# ═══════════════════════════════════════════════════════

st.markdown(footer(API_BASE_URL), unsafe_allow_html=True)
