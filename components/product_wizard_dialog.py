# merchant_dashboard/components/product_wizard_dialog.py
import streamlit as st

from services.product_wizard import LAST_STEP, STEP_TITLES, ProductWizard, format_number, parse_values
from services.schemas import ImageAsset

WIZARD_KEY = "product_wizard"
DISCOUNT_LABELS = {"percentage": "%", "flat": "$"}


def open_product_wizard(store, on_save):
    # A fresh wizard on every open; closing the dialog discards it.
    st.session_state[WIZARD_KEY] = ProductWizard(store.categories)
    product_wizard_dialog(store, on_save)


def _key(wizard, name):
    return f"wizard-{wizard.token}-{name}"


def _seed(key, value):
    if key not in st.session_state:
        st.session_state[key] = value


def _field_error(wizard, path):
    message = wizard.validation_errors.get(path)
    if message:
        st.caption(f":red[{message}]")


def _refresh():
    st.rerun(scope="fragment")


# --- Step 1 ---

def _render_description(wizard, store):
    form = wizard.form

    key = _key(wizard, "product_name")
    _seed(key, form.product_name)
    product_name = st.text_input("Product Name *", key=key)
    _field_error(wizard, "product_name")

    options = wizard.category_ids
    key = _key(wizard, "category")
    if form.category in options:
        _seed(key, form.category)
    if not options:
        st.warning("No categories available. Create a category first.")
    category = st.selectbox("Category *", options=options, index=None, key=key,
                            format_func=lambda cid: store.category_name(cid) or cid,
                            placeholder="Choose a category...")
    _field_error(wizard, "category")

    key = _key(wizard, "brand")
    _seed(key, form.brand)
    brand = st.text_input("Brand *", key=key)
    _field_error(wizard, "brand")

    upload = st.file_uploader("Upload Image *", type=["png", "jpg", "jpeg", "gif", "webp"], key=_key(wizard, "image"))
    image = None
    if upload is not None:
        image = ImageAsset(name=upload.name, content=upload.getvalue(), mime_type=upload.type)
    elif form.image is not None:
        st.caption(f"Selected image: {form.image.name}")
    _field_error(wizard, "image")

    wizard.update_description(product_name=product_name, category=category or "", brand=brand, image=image)


# --- Step 2 ---

def _render_variants(wizard, store):
    if wizard.step_error:
        st.error(wizard.step_error)

    option_col, values_col, _ = st.columns([2, 3, 1])
    option_col.markdown("**Option \\***")
    values_col.markdown("**Values \\***")

    for index, variant in enumerate(list(wizard.form.variants)):
        option_col, values_col, remove_col = st.columns([2, 3, 1])
        option_key = _key(wizard, f"variant-{variant.uid}-option")
        values_key = _key(wizard, f"variant-{variant.uid}-values")
        _seed(option_key, variant.option)
        _seed(values_key, ", ".join(variant.values))
        with option_col:
            option = st.text_input("Option", key=option_key, placeholder="Option", label_visibility="collapsed")
            _field_error(wizard, f"variants.{index}.option")
        with values_col:
            values = st.text_input("Values", key=values_key, placeholder="Enter values, comma separated",
                                   label_visibility="collapsed")
            _field_error(wizard, f"variants.{index}.values")
        wizard.update_variant(index, option=option, values=parse_values(values))
        if remove_col.button("🗑️", key=_key(wizard, f"variant-{variant.uid}-remove")):
            wizard.remove_variant(index)
            _refresh()

    _field_error(wizard, "variants")
    if st.button("➕ Add Option", key=_key(wizard, "add-variant")):
        wizard.add_variant()
        _refresh()


# --- Step 3 ---

def _render_combinations(wizard, store):
    header = st.columns([2, 3, 1, 2, 1])
    header[0].markdown("**Combination**")
    header[1].markdown("**SKU \\***")
    header[2].markdown("**In stock**")
    header[3].markdown("**Quantity**")
    if wizard.step_error:
        st.error(wizard.step_error)

    for index, combination in enumerate(list(wizard.form.combinations)):
        row_key = f"r{wizard.revision}-combination-{index}"
        label_col, sku_col, stock_col, quantity_col, remove_col = st.columns([2, 3, 1, 2, 1])
        label_col.write(combination.label or "-")

        sku_key = _key(wizard, f"{row_key}-sku")
        _seed(sku_key, combination.sku)
        with sku_col:
            sku = st.text_input("SKU", key=sku_key, placeholder="SKU", label_visibility="collapsed")
            _field_error(wizard, f"combinations.{index}.sku")
        wizard.set_sku(index, sku)

        stock_key = _key(wizard, f"{row_key}-in-stock")
        _seed(stock_key, combination.in_stock)
        with stock_col:
            in_stock = st.toggle("In stock", key=stock_key, label_visibility="collapsed")
        wizard.set_in_stock(index, in_stock)

        quantity_key = _key(wizard, f"{row_key}-quantity")
        if not combination.in_stock:
            st.session_state[quantity_key] = 0
        _seed(quantity_key, combination.quantity)
        with quantity_col:
            quantity = st.number_input("Quantity", key=quantity_key, min_value=0, step=1,
                                       disabled=not combination.in_stock, label_visibility="collapsed")
            _field_error(wizard, f"combinations.{index}.quantity")
        if combination.in_stock:
            wizard.set_quantity(index, quantity)

        if remove_col.button("🗑️", key=_key(wizard, f"{row_key}-remove")):
            wizard.remove_combination(index)
            _refresh()

    _field_error(wizard, "combinations")
    if st.button("➕ Add Combination", key=_key(wizard, "add-combination")):
        wizard.add_combination()
        _refresh()


# --- Step 4 ---

def _render_pricing(wizard, store):
    form = wizard.form

    key = _key(wizard, "price")
    _seed(key, format_number(form.price))
    price = st.text_input("Price *", key=key)
    _field_error(wizard, "price")

    discount_col, type_col = st.columns([3, 1])
    key = _key(wizard, "discount")
    _seed(key, format_number(form.discount))
    with discount_col:
        discount = st.text_input("Discount *", key=key)
        _field_error(wizard, "discount")

    key = _key(wizard, "discount_type")
    _seed(key, form.discount_type)
    with type_col:
        discount_type = st.radio("Type", options=list(DISCOUNT_LABELS), key=key, horizontal=True,
                                 format_func=DISCOUNT_LABELS.get)

    wizard.set_price(price)
    wizard.set_discount(discount)
    wizard.set_discount_type(discount_type)


STEP_RENDERERS = {
    1: _render_description,
    2: _render_variants,
    3: _render_combinations,
    4: _render_pricing,
}


@st.dialog("Add Product", width="large")
def product_wizard_dialog(store, on_save):
    wizard = st.session_state.get(WIZARD_KEY)
    if wizard is None:
        return
    st.caption("Enter the details of your new product.")

    # --- STEP SELECTOR ---
    for step, column in zip(STEP_TITLES, st.columns(len(STEP_TITLES))):
        if column.button(STEP_TITLES[step], key=_key(wizard, f"step-{step}"), use_container_width=True,
                         disabled=not wizard.can_select(step),
                         type="primary" if step == wizard.current_step else "secondary"):
            wizard.select_step(step)
            _refresh()

    st.markdown("---")
    STEP_RENDERERS[wizard.current_step](wizard, store)
    st.markdown("---")

    # --- FOOTER ---
    close_col, prev_col, next_col = st.columns(3)
    if close_col.button("Close", key=_key(wizard, "close"), use_container_width=True):
        st.session_state.pop(WIZARD_KEY, None)
        st.rerun()
    if prev_col.button("Previous", key=_key(wizard, "previous"), use_container_width=True,
                       disabled=wizard.current_step == 1):
        wizard.previous_step()
        _refresh()
    if wizard.current_step < LAST_STEP:
        if next_col.button("Next", key=_key(wizard, "next"), type="primary", use_container_width=True):
            wizard.next_step()
            _refresh()
    elif next_col.button("Submit", key=_key(wizard, "submit"), type="primary", use_container_width=True,
                         disabled=not wizard.is_valid):
        with st.spinner("Saving product..."):
            saved = wizard.submit(store.connector, on_save=on_save)
        if saved:
            st.session_state.pop(WIZARD_KEY, None)
            st.rerun()

    if wizard.submit_error:
        st.error(wizard.submit_error)
