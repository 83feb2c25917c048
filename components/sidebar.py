# merchant_dashboard/components/sidebar.py
import streamlit as st

MENU_ITEMS = [
    ("🏠", "Home"),
    ("🏬", "Stores"),
    ("📦", "Products"),
    ("📚", "Catalogue"),
    ("📣", "Promotions"),
    ("📊", "Reports"),
    ("📄", "Docs"),
    ("⚙️", "Settings"),
]
ACTIVE_ITEM = "Products"


def render_sidebar(dashboard_config, store):
    """Returns True when the user asked for a data refresh."""
    with st.sidebar:
        st.header(dashboard_config.get('store_name', 'Merchant Dashboard'))
        for icon, label in MENU_ITEMS:
            st.button(f"{icon} {label}", key=f"menu_{label}", disabled=label != ACTIVE_ITEM,
                      type="primary" if label == ACTIVE_ITEM else "secondary", use_container_width=True)

        st.markdown("---")
        refresh = st.button("🔄 Refresh Data", use_container_width=True)
        if store.last_updated:
            st.caption(f"Data last updated: {store.last_updated.strftime('%Y-%m-%d %H:%M:%S')}")

        merchant = dashboard_config.get('merchant_name')
        if merchant:
            st.markdown("---")
            st.markdown(f"**{merchant}**")
            st.caption(dashboard_config.get('merchant_email', ''))
    return refresh
