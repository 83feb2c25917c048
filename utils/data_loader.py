# merchant_dashboard/utils/data_loader.py
import streamlit as st
import pandas as pd
from connectors.backend_connector import BackendConnector
from services.catalog_store import CatalogStore
from utils.config_loader import APP_CONFIG

CATALOG_COLUMNS = ['Category', 'Product', 'Brand', 'Price', 'Image']


def get_catalog_store(force_refresh=False):
    """
    Returns the session's CatalogStore, loading it from the backend on first use.
    All views read from this one store.
    """
    if 'catalog_store' not in st.session_state:
        backend_config = APP_CONFIG.get('backend', {})
        connector = BackendConnector.from_config(APP_CONFIG)
        st.session_state.catalog_store = CatalogStore(connector, max_workers=backend_config.get('max_workers', 8))
        force_refresh = True

    store = st.session_state.catalog_store
    if force_refresh:
        with st.spinner("Loading catalog..."):
            store.load()
    return store


def build_catalog_frame(store):
    """Flattens the store into one row per product, in category order."""
    rows = []
    for category in store.categories:
        for product in store.products_for(category.id):
            rows.append({
                'Category': category.name,
                'Product': product.name,
                'Brand': product.brand,
                'Price': product.display_price,
                'Image': store.connector.image_url(product.image),
            })
    return pd.DataFrame(rows, columns=CATALOG_COLUMNS)


def catalog_kpis(store, df):
    return {
        'categories': len(store.categories),
        'products': len(df),
        'brands': df['Brand'].dropna().nunique(),
        'unavailable': len(store.failed),
    }


def filter_catalog(df, search_term):
    if not search_term or df.empty:
        return df
    mask = df['Product'].str.contains(search_term, case=False, na=False, regex=False) | \
           df['Brand'].str.contains(search_term, case=False, na=False, regex=False) | \
           df['Category'].str.contains(search_term, case=False, na=False, regex=False)
    return df[mask]
