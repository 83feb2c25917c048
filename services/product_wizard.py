# merchant_dashboard/services/product_wizard.py
import itertools
import logging
import math
import re
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from services.schemas import STEP_SCHEMAS, ImageAsset, ProductSubmission, validate_payload

logger = logging.getLogger(__name__)

STEP_TITLES = {1: "Description", 2: "Variants", 3: "Combinations", 4: "Price Info"}
FIRST_STEP, LAST_STEP = 1, 4

COMBINATION_SEPARATOR = " /"
DISCOUNT_TYPES = ("percentage", "flat")

DUPLICATE_SKUS_ERROR = "Duplicate SKUs detected, please ensure all SKUs are unique."
INCOMPLETE_VARIANT_ERROR = "Please fill out the previous variant fields before adding a new one."
SUBMIT_FAILED_ERROR = "Failed to add product. Check logs for more details."

_NUMBER_PREFIX = re.compile(r"\s*([+-]?\d+(?:\.\d+)?)")


@dataclass
class Variant:
    option: str = ""
    values: List[str] = field(default_factory=list)
    uid: str = field(default_factory=lambda: uuid.uuid4().hex[:8], compare=False, repr=False)

    def is_complete(self):
        return bool(self.option.strip()) and len(self.values) > 0


@dataclass
class Combination:
    sku: str = ""
    in_stock: bool = False
    quantity: int = 0
    label: str = ""


@dataclass
class ProductForm:
    product_name: str = ""
    category: str = ""
    brand: str = ""
    image: Optional[ImageAsset] = None
    variants: List[Variant] = field(default_factory=lambda: [Variant()])
    combinations: List[Combination] = field(default_factory=lambda: [Combination()])
    price: float = 0
    discount: float = 0
    discount_type: str = "percentage"


def coerce_number(raw):
    """Reads the leading number out of user text; anything unreadable or non-finite becomes 0."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw if math.isfinite(raw) else 0
    match = _NUMBER_PREFIX.match(str(raw or ""))
    if not match:
        return 0
    number = float(match.group(1))
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def normalize_values(values):
    """Strips blanks and repeats while keeping the order the values were entered in."""
    cleaned = (str(value).strip() for value in values or [])
    return list(dict.fromkeys(value for value in cleaned if value))


def parse_values(text):
    return normalize_values((text or "").split(","))


def derive_combinations(variants, prior):
    """
    Cartesian product of the variant values, one blank combination per tuple.

    Only applies when every variant has an option and at least one value;
    otherwise the prior combinations are returned unchanged. Regeneration
    never carries SKU, stock or quantity over from the prior list.
    """
    if not variants or not all(variant.is_complete() for variant in variants):
        return list(prior)
    return [
        Combination(label=COMBINATION_SEPARATOR.join(values))
        for values in itertools.product(*(variant.values for variant in variants))
    ]


def find_duplicate_skus(combinations):
    seen, duplicates = set(), []
    for combination in combinations:
        sku = combination.sku.strip()
        if sku in seen and sku not in duplicates:
            duplicates.append(sku)
        seen.add(sku)
    return duplicates


def format_number(value):
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def build_form_fields(submission):
    """Flattens a submission into the indexed multipart fields the backend expects."""
    fields = [
        ("productName", submission.product_name),
        ("category", submission.category),
        ("brand", submission.brand),
        ("price", format_number(submission.price)),
        ("discount", format_number(submission.discount)),
        ("discountType", submission.discount_type),
    ]
    for index, variant in enumerate(submission.variants):
        fields.append((f"variants[{index}][option]", variant.option))
        for value_index, value in enumerate(variant.values):
            fields.append((f"variants[{index}][values][{value_index}]", value))
    for index, combination in enumerate(submission.combinations):
        fields.append((f"combinations[{index}][sku]", combination.sku))
        fields.append((f"combinations[{index}][inStock]", "true" if combination.in_stock else "false"))
        fields.append((f"combinations[{index}][quantity]", str(combination.quantity)))
    return fields


def build_files(submission):
    image = submission.image
    return {"image": (image.name, image.content, image.mime_type or "application/octet-stream")}


class ProductWizard:
    def __init__(self, categories=None):
        self.categories = list(categories or [])
        self.current_step = FIRST_STEP
        self.form = ProductForm()
        self.validation_errors = {}
        self.step_error = None
        self.submit_error = None
        # Widget keys embed the token and revision so regenerated rows start blank.
        self.token = uuid.uuid4().hex[:8]
        self.revision = 0

    # --- Validation ---

    @property
    def category_ids(self):
        return [category.id for category in self.categories]

    def _payload(self):
        form = self.form
        return {
            "product_name": form.product_name,
            "category": form.category,
            "brand": form.brand,
            "image": form.image,
            "variants": [{"option": v.option, "values": list(v.values)} for v in form.variants],
            "combinations": [
                {"sku": c.sku, "in_stock": c.in_stock, "quantity": c.quantity} for c in form.combinations
            ],
            "price": form.price,
            "discount": form.discount,
            "discount_type": form.discount_type,
        }

    def validate_step(self, step):
        schema = STEP_SCHEMAS[step]
        payload = {name: value for name, value in self._payload().items() if name in schema.model_fields}
        _, errors = validate_payload(schema, payload, self.category_ids)
        return errors

    @property
    def is_valid(self):
        _, errors = validate_payload(ProductSubmission, self._payload(), self.category_ids)
        return not errors

    def build_submission(self):
        return ProductSubmission.model_validate(self._payload(), context={"category_ids": self.category_ids})

    def _changed(self):
        if self.validation_errors:
            self.validation_errors = self.validate_step(self.current_step)

    # --- Navigation ---

    def next_step(self):
        if self.current_step >= LAST_STEP:
            return False
        self.validation_errors = self.validate_step(self.current_step)
        if self.current_step == 3 and find_duplicate_skus(self.form.combinations):
            self.step_error = DUPLICATE_SKUS_ERROR
            return False
        if self.validation_errors:
            return False
        self.step_error = None
        self.current_step += 1
        return True

    def previous_step(self):
        self.current_step = max(FIRST_STEP, self.current_step - 1)
        self.validation_errors = {}
        self.step_error = None
        return True

    def can_select(self, step):
        return FIRST_STEP <= step <= self.current_step

    def select_step(self, step):
        if not self.can_select(step):
            return False
        if step != self.current_step:
            self.current_step = step
            self.validation_errors = {}
            self.step_error = None
        return True

    # --- Step 1: description ---

    def update_description(self, product_name=None, category=None, brand=None, image=None):
        if product_name is not None:
            self.form.product_name = product_name
        if category is not None:
            self.form.category = category
        if brand is not None:
            self.form.brand = brand
        if image is not None:
            self.form.image = image
        self._changed()

    # --- Step 2: variants ---

    def add_variant(self):
        variants = self.form.variants
        if variants and not variants[-1].is_complete():
            self.step_error = INCOMPLETE_VARIANT_ERROR
            return False
        self.step_error = None
        variants.append(Variant())
        self._variants_changed()
        return True

    def update_variant(self, index, option=None, values=None):
        variant = self.form.variants[index]
        new_option = variant.option if option is None else option
        new_values = variant.values if values is None else normalize_values(values)
        if new_option == variant.option and new_values == variant.values:
            return
        variant.option = new_option
        variant.values = new_values
        self._variants_changed()

    def remove_variant(self, index):
        del self.form.variants[index]
        self._variants_changed()

    def _variants_changed(self):
        previous = self.form.combinations
        self.form.combinations = derive_combinations(self.form.variants, previous)
        if self.form.combinations != previous:
            self.revision += 1
            logger.debug(f"Regenerated {len(self.form.combinations)} combinations.")
        self._changed()

    # --- Step 3: combinations ---

    def can_add_combination(self):
        return not any(
            not combination.sku or (combination.in_stock and not combination.quantity)
            for combination in self.form.combinations
        )

    def add_combination(self):
        if not self.can_add_combination():
            return False
        self.form.combinations.append(Combination())
        self._changed()
        return True

    def remove_combination(self, index):
        del self.form.combinations[index]
        self.revision += 1
        self._changed()

    def set_sku(self, index, sku):
        self.form.combinations[index].sku = sku
        if self.step_error == DUPLICATE_SKUS_ERROR and not find_duplicate_skus(self.form.combinations):
            self.step_error = None
        self._changed()

    def set_in_stock(self, index, in_stock):
        combination = self.form.combinations[index]
        combination.in_stock = bool(in_stock)
        if not combination.in_stock:
            combination.quantity = 0
        self._changed()

    def set_quantity(self, index, raw):
        self.form.combinations[index].quantity = int(coerce_number(raw))
        self._changed()

    # --- Step 4: pricing ---

    def set_price(self, raw):
        self.form.price = coerce_number(raw)
        self._changed()

    def set_discount(self, raw):
        self.form.discount = coerce_number(raw)
        self._changed()

    def set_discount_type(self, discount_type):
        if discount_type not in DISCOUNT_TYPES:
            raise ValueError(f"Unknown discount type: {discount_type}")
        self.form.discount_type = discount_type
        self._changed()

    # --- Submission ---

    def submit(self, connector, on_save=None):
        if not self.is_valid:
            return False
        submission = self.build_submission()
        self.submit_error = None
        if not connector.create_product(submission.category, build_form_fields(submission), build_files(submission)):
            self.submit_error = SUBMIT_FAILED_ERROR
            return False
        logger.info(f"Product '{submission.product_name}' submitted to category {submission.category}.")
        if on_save is not None:
            on_save(submission)
        return True
