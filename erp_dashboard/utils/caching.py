"""
Cache helpers for the dashboard.
Avoid hitting the ERP API again on every Streamlit rerun.
"""

import streamlit as st

from erp_dashboard.config import CACHE_TTL


def cached(ttl: int = CACHE_TTL):
    """Decorator around st.cache_data with the dashboard defaults."""
    return st.cache_data(ttl=ttl, show_spinner=False)


def clear_all_caches():
    """Drop every cached API response."""
    st.cache_data.clear()
