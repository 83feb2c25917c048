# merchant_dashboard/components/category_dialog.py
import streamlit as st

from services.category_form import CategoryForm

FORM_KEY = "category_form"
NAME_INPUT_KEY = "category_name_input"


def open_category_dialog(store, on_save):
    st.session_state[FORM_KEY] = CategoryForm()
    st.session_state.pop(NAME_INPUT_KEY, None)
    category_dialog(store, on_save)


def _close():
    st.session_state.pop(FORM_KEY, None)
    st.session_state.pop(NAME_INPUT_KEY, None)
    st.rerun()


@st.dialog("Add category")
def category_dialog(store, on_save):
    form = st.session_state.setdefault(FORM_KEY, CategoryForm())
    form.name = st.text_input("Category name", key=NAME_INPUT_KEY, placeholder="Category name")

    cancel_col, save_col = st.columns(2)
    if cancel_col.button("Cancel", use_container_width=True):
        _close()
    if save_col.button("Save", type="primary", use_container_width=True):
        if form.submit(store.connector, on_save=on_save):
            _close()
