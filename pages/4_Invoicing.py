from __future__ import annotations

import pandas as pd
import streamlit as st

from error_guard import render_guard
from invoicing import VAT_OPTIONS, add_invoice_product, format_rate, list_invoice_products, vat_rate
from page_shell import bootstrap_page
from ui import page_header

with render_guard():
    ctx = bootstrap_page("/invoicing", title="Invoicing")
    page_header("Invoicing · Products & services")

    with st.spinner("Loading items..."):
        result = list_invoice_products(ctx.org.id)
    if not result.ok:
        st.error(f"Failed to load items: {result.error}")
    products = result.data or []

    if products:
        df = pd.DataFrame(products)
        df["Rate"] = df["default_rate"].map(format_rate)
        df["VAT"] = df["default_vat"].map(lambda v: f"{vat_rate(v)}%")
        st.dataframe(
            df[["name", "description", "Rate", "VAT"]].rename(
                columns={"name": "Item", "description": "Description"}
            ),
            hide_index=True,
            use_container_width=True,
        )
    else:
        st.caption("No items yet. Add the products and services you invoice for.")

    if ctx.access.get("can_edit"):
        with st.form("add_product_form", clear_on_submit=True):
            st.markdown("#### Add item")
            name = st.text_input("Name")
            description = st.text_input("Description")
            cols = st.columns(2)
            rate = cols[0].number_input("Default rate (£)", min_value=0.0, step=1.0, format="%.2f")
            vat_labels = {option["value"]: option["label"] for option in VAT_OPTIONS}
            vat = cols[1].selectbox("VAT", list(vat_labels), index=1, format_func=vat_labels.get)
            submitted = st.form_submit_button("Add item", type="primary")
        if submitted:
            try:
                add_invoice_product(ctx.org.id, name, description, rate, vat, access=ctx.access)
            except ValueError as err:
                st.error(str(err))
            except Exception as err:
                st.error(f"Failed to add item: {err}")
            else:
                st.toast("Item added successfully")
                st.rerun()
