import pytest

from services.product_wizard import (
    DUPLICATE_SKUS_ERROR,
    INCOMPLETE_VARIANT_ERROR,
    SUBMIT_FAILED_ERROR,
    Combination,
    ProductWizard,
    Variant,
    coerce_number,
    derive_combinations,
    find_duplicate_skus,
    parse_values,
)


def fill_description(wizard, image):
    wizard.update_description(product_name="Basic Tee", category="c1", brand="Lemon", image=image)


def wizard_at_step(step, categories, image):
    wizard = ProductWizard(categories)
    fill_description(wizard, image)
    if step > 1:
        assert wizard.next_step()
    if step > 2:
        wizard.update_variant(0, option="Size", values=["S", "M"])
        assert wizard.next_step()
    return wizard


# --- derive_combinations ---

def test_derive_combinations_is_cartesian_product_in_variant_order():
    variants = [Variant("Size", ["S", "M"]), Variant("Color", ["Red"])]
    combinations = derive_combinations(variants, [])
    assert [c.label for c in combinations] == ["S /Red", "M /Red"]
    assert all(c == Combination(label=c.label) for c in combinations)


def test_derive_combinations_size_is_product_of_value_counts():
    variants = [Variant("Size", ["S", "M", "L"]), Variant("Color", ["Red", "Blue"]), Variant("Fit", ["Slim"])]
    assert len(derive_combinations(variants, [])) == 6


def test_derive_combinations_keeps_prior_when_a_variant_is_incomplete():
    prior = [Combination(sku="A1", in_stock=True, quantity=3)]
    assert derive_combinations([Variant("Size", ["S"]), Variant("", ["x"])], prior) == prior
    assert derive_combinations([Variant("Size", [])], prior) == prior
    assert derive_combinations([], prior) == prior


def test_derive_combinations_resets_previous_entries():
    prior = [Combination(sku="A1", in_stock=True, quantity=3, label="S")]
    combinations = derive_combinations([Variant("Size", ["S"])], prior)
    assert combinations == [Combination(label="S")]


# --- helpers ---

@pytest.mark.parametrize("raw, expected", [
    ("100", 100), ("12abc", 12), ("abc", 0), ("", 0), (None, 0), ("19.99", 19.99), ("-5", -5), (7, 7),
    ("9" * 400, 0), (float("inf"), 0), (float("nan"), 0),
])
def test_coerce_number(raw, expected):
    assert coerce_number(raw) == expected


def test_parse_values_strips_blanks_and_repeats():
    assert parse_values(" Red, Blue ,, Red,") == ["Red", "Blue"]


def test_find_duplicate_skus():
    combos = [Combination(sku="A1"), Combination(sku="A1"), Combination(sku="B")]
    assert find_duplicate_skus(combos) == ["A1"]


def test_find_duplicate_skus_ignores_surrounding_whitespace():
    combos = [Combination(sku="A1"), Combination(sku="A1 ")]
    assert find_duplicate_skus(combos) == ["A1"]


# --- step 1 ---

def test_next_is_blocked_until_description_is_valid(categories, image):
    wizard = ProductWizard(categories)
    assert not wizard.next_step()
    assert wizard.current_step == 1
    assert wizard.validation_errors["product_name"] == "Product name is required"
    assert wizard.validation_errors["category"] == "Category is required"
    assert wizard.validation_errors["brand"] == "Brand is required"
    assert wizard.validation_errors["image"] == "Image is required"

    fill_description(wizard, image)
    assert wizard.validation_errors == {}
    assert wizard.next_step()
    assert wizard.current_step == 2


def test_unknown_category_is_rejected(categories, image):
    wizard = ProductWizard(categories)
    wizard.update_description(product_name="Tee", category="missing", brand="Lemon", image=image)
    assert not wizard.next_step()
    assert wizard.validation_errors == {"category": "Select a valid category"}


def test_empty_image_is_rejected(categories, image):
    wizard = ProductWizard(categories)
    fill_description(wizard, image.model_copy(update={"content": b""}))
    assert not wizard.next_step()
    assert "image" in wizard.validation_errors


# --- step 2 ---

def test_add_variant_rejected_while_last_row_incomplete(categories, image):
    wizard = wizard_at_step(2, categories, image)
    assert not wizard.add_variant()
    assert wizard.step_error == INCOMPLETE_VARIANT_ERROR

    wizard.update_variant(0, option="Size")
    assert not wizard.add_variant()

    wizard.update_variant(0, values=["S"])
    assert wizard.add_variant()
    assert wizard.step_error is None
    assert wizard.form.variants[-1] == Variant()


def test_add_variant_allowed_on_empty_list(categories, image):
    wizard = wizard_at_step(2, categories, image)
    wizard.remove_variant(0)
    assert wizard.add_variant()
    assert len(wizard.form.variants) == 1


def test_variant_edit_regenerates_combinations(categories, image):
    wizard = wizard_at_step(2, categories, image)
    wizard.update_variant(0, option="Size", values=["S", "M"])
    wizard.add_variant()
    wizard.update_variant(1, option="Color", values=["Red"])
    assert [c.label for c in wizard.form.combinations] == ["S /Red", "M /Red"]

    wizard.form.combinations[0].sku = "A1"
    revision = wizard.revision
    wizard.update_variant(1, values=["Red", "Blue"])
    assert len(wizard.form.combinations) == 4
    assert all(c.sku == "" for c in wizard.form.combinations)
    assert wizard.revision > revision


def test_unchanged_variant_update_keeps_combinations(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_sku(0, "A1")
    wizard.update_variant(0, option="Size", values=["S", "M"])
    assert wizard.form.combinations[0].sku == "A1"


def test_variants_step_requires_complete_rows(categories, image):
    wizard = wizard_at_step(2, categories, image)
    assert not wizard.next_step()
    assert wizard.validation_errors["variants.0.option"] == "Option is required"
    assert wizard.validation_errors["variants.0.values"] == "At least one value is required"


# --- step 3 ---

def test_duplicate_skus_block_advancement_until_fixed(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_sku(0, "A1")
    wizard.set_sku(1, "A1")
    assert not wizard.next_step()
    assert wizard.current_step == 3
    assert wizard.step_error == DUPLICATE_SKUS_ERROR

    wizard.set_sku(1, "A2")
    assert wizard.step_error is None
    assert wizard.next_step()
    assert wizard.current_step == 4


def test_skus_differing_only_by_whitespace_report_duplicates(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_sku(0, "A1")
    wizard.set_sku(1, "A1 ")
    assert not wizard.next_step()
    assert wizard.step_error == DUPLICATE_SKUS_ERROR


def test_oversized_quantity_becomes_zero(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_quantity(0, "1" * 400)
    assert wizard.form.combinations[0].quantity == 0


def test_in_stock_requires_positive_quantity(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_sku(0, "A1")
    wizard.set_sku(1, "A2")
    wizard.set_in_stock(0, True)
    assert not wizard.next_step()
    assert wizard.validation_errors == {"combinations.0.quantity": "Quantity must be greater than 0"}

    wizard.set_quantity(0, "5")
    assert wizard.validation_errors == {}
    assert wizard.next_step()


def test_toggling_out_of_stock_forces_zero_quantity(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_in_stock(0, True)
    wizard.set_quantity(0, 12)
    wizard.set_in_stock(0, False)
    assert wizard.form.combinations[0].quantity == 0


def test_add_combination_only_when_rows_are_filled(categories, image):
    wizard = wizard_at_step(3, categories, image)
    assert not wizard.add_combination()

    wizard.set_sku(0, "A1")
    wizard.set_sku(1, "A2")
    wizard.set_in_stock(1, True)
    assert not wizard.add_combination()

    wizard.set_quantity(1, 2)
    assert wizard.add_combination()
    assert wizard.form.combinations[-1] == Combination()


# --- navigation ---

def test_previous_never_validates_and_floors_at_first_step(categories, image):
    wizard = wizard_at_step(3, categories, image)
    wizard.update_description(product_name="")
    assert wizard.previous_step()
    assert wizard.previous_step()
    assert wizard.current_step == 1
    assert wizard.previous_step()
    assert wizard.current_step == 1
    assert wizard.validation_errors == {}


def test_step_selection_is_gated_by_current_step(categories, image):
    wizard = wizard_at_step(2, categories, image)
    assert wizard.can_select(1) and wizard.can_select(2)
    assert not wizard.can_select(3)
    assert not wizard.select_step(4)
    assert wizard.select_step(1)
    assert wizard.current_step == 1
    assert not wizard.can_select(2)


# --- step 4 and submission ---

def test_non_numeric_price_and_discount_become_zero(categories, image):
    wizard = ProductWizard(categories)
    wizard.set_price("abc")
    wizard.set_discount("")
    assert wizard.form.price == 0
    assert wizard.form.discount == 0


def test_negative_price_is_invalid(categories, image):
    wizard = ProductWizard(categories)
    wizard.set_price("-1")
    assert wizard.validate_step(4) == {"price": "Price cannot be negative"}


def test_oversized_price_becomes_zero(categories):
    wizard = ProductWizard(categories)
    wizard.set_price("9" * 400)
    assert wizard.form.price == 0
    assert wizard.validate_step(4) == {}


def test_infinite_price_is_invalid(categories):
    wizard = ProductWizard(categories)
    wizard.form.price = float("inf")
    assert "price" in wizard.validate_step(4)


def test_unknown_discount_type_is_refused(categories):
    with pytest.raises(ValueError):
        ProductWizard(categories).set_discount_type("bogus")


def test_full_run_produces_one_multipart_submission(categories, image, fake_connector):
    saved = []
    wizard = ProductWizard(categories)
    fill_description(wizard, image)
    assert wizard.next_step()

    wizard.update_variant(0, option="Size", values=["M"])
    assert wizard.next_step()

    assert [c.label for c in wizard.form.combinations] == ["M"]
    wizard.set_sku(0, "TEE-M")
    wizard.set_in_stock(0, True)
    wizard.set_quantity(0, 5)
    assert wizard.next_step()

    wizard.set_price("100")
    wizard.set_discount("0")
    wizard.set_discount_type("percentage")
    assert wizard.is_valid

    assert wizard.submit(fake_connector, on_save=saved.append)
    assert len(fake_connector.created_products) == 1
    category_id, fields, files = fake_connector.created_products[0]
    assert category_id == "c1"
    assert fields == [
        ("productName", "Basic Tee"),
        ("category", "c1"),
        ("brand", "Lemon"),
        ("price", "100"),
        ("discount", "0"),
        ("discountType", "percentage"),
        ("variants[0][option]", "Size"),
        ("variants[0][values][0]", "M"),
        ("combinations[0][sku]", "TEE-M"),
        ("combinations[0][inStock]", "true"),
        ("combinations[0][quantity]", "5"),
    ]
    assert files == {"image": ("shirt.png", b"\x89PNG fake", "image/png")}
    assert saved[0].product_name == "Basic Tee"


def test_submit_is_a_noop_while_invalid(categories, fake_connector):
    wizard = ProductWizard(categories)
    assert not wizard.is_valid
    assert not wizard.submit(fake_connector)
    assert fake_connector.created_products == []


def test_failed_submit_keeps_values_and_reports(categories, image, failing_connector):
    wizard = wizard_at_step(3, categories, image)
    wizard.set_sku(0, "A1")
    wizard.set_sku(1, "A2")
    assert wizard.next_step()
    saved = []

    assert not wizard.submit(failing_connector, on_save=saved.append)
    assert wizard.submit_error == SUBMIT_FAILED_ERROR
    assert saved == []
    assert wizard.form.product_name == "Basic Tee"
    assert wizard.current_step == 4
