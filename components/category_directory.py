# merchant_dashboard/components/category_directory.py
import streamlit as st

CARDS_PER_ROW = 4


def render_category_directory(store):
    if not store.categories:
        st.info("No categories yet. Use **Add Category** to create the first one.")
        return

    for start in range(0, len(store.categories), CARDS_PER_ROW):
        row = store.categories[start:start + CARDS_PER_ROW]
        for column, category in zip(st.columns(CARDS_PER_ROW), row):
            with column:
                with st.container(border=True):
                    st.subheader(category.name)
                    for product in store.products_for(category.id):
                        _render_product(store, product)


def _render_product(store, product):
    image_col, text_col = st.columns([1, 3])
    with image_col:
        image_url = store.connector.image_url(product.image)
        if image_url:
            st.image(image_url, width=64)
    with text_col:
        st.markdown(f"**{product.name}**")
        st.caption(f"Price: {product.display_price}")
        if product.brand:
            st.markdown(f":blue-background[{product.brand}]")
