# merchant_dashboard/Home.py
import streamlit as st

from utils.config_loader import APP_CONFIG
from utils.data_loader import get_catalog_store, build_catalog_frame, catalog_kpis, filter_catalog
from components.sidebar import render_sidebar
from components.category_directory import render_category_directory
from components.category_dialog import open_category_dialog
from components.product_wizard_dialog import open_product_wizard

st.set_page_config(
    page_title="Merchant Dashboard",
    page_icon="🛍️",
    layout="wide"
)

if "error" in APP_CONFIG:
    st.error(f"Configuration Error: {APP_CONFIG['error']}")
    st.stop()

store = get_catalog_store()

if render_sidebar(APP_CONFIG.get('dashboard', {}), store):
    get_catalog_store(force_refresh=True)


# --- SUCCESS CALLBACKS ---
def on_category_saved(name):
    store.reload_categories()
    st.session_state.flash = f"Category '{name}' created successfully!"


def on_product_saved(submission):
    store.reload_products(submission.category)
    st.session_state.flash = f"Product '{submission.product_name}' saved successfully!"


flash = st.session_state.pop('flash', None)
if flash:
    st.toast(flash, icon="✅")

# --- HEADER ---
col1, col2, col3 = st.columns([4, 1, 1])
with col1:
    st.title("Dashboard")
with col2:
    if st.button("Add Category", use_container_width=True):
        open_category_dialog(store, on_save=on_category_saved)
with col3:
    if st.button("Add Product", type="primary", use_container_width=True):
        open_product_wizard(store, on_save=on_product_saved)

# --- KPI DASHBOARD ---
df = build_catalog_frame(store)
kpis = catalog_kpis(store, df)

st.markdown("---")
st.header("📈 Catalog at a Glance")
kpi1, kpi2, kpi3 = st.columns(3)
kpi1.metric("Categories", f"{kpis['categories']:,}")
kpi2.metric("Products", f"{kpis['products']:,}")
kpi3.metric("Brands", f"{kpis['brands']:,}")
if kpis['unavailable']:
    st.caption(f"Products could not be loaded for {kpis['unavailable']} categor{'y' if kpis['unavailable'] == 1 else 'ies'}.")

# --- CATEGORY DIRECTORY ---
st.markdown("---")
st.header("🗂️ Categories")
render_category_directory(store)

# --- PRODUCT EXPLORER ---
st.markdown("---")
with st.expander("🔍 Product Explorer"):
    search_term = st.text_input("Search by product, brand or category", placeholder="Enter a value to filter the table...")
    filtered_df = filter_catalog(df, search_term)
    st.dataframe(filtered_df, use_container_width=True, hide_index=True,
                 column_config={"Image": st.column_config.ImageColumn("Image")})
    st.info(f"Showing {len(filtered_df)} of {len(df)} total products.")
