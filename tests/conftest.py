import os
import sys

import pytest

# Make the dashboard's top-level packages importable when pytest runs from the repo root
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from services.schemas import Category, ImageAsset  # noqa: E402


@pytest.fixture
def categories():
    return [Category(id="c1", name="T-shirt"), Category(id="c2", name="Shoes")]


@pytest.fixture
def image():
    return ImageAsset(name="shirt.png", content=b"\x89PNG fake", mime_type="image/png")


class FakeConnector:
    """Records write calls and answers with canned results."""

    def __init__(self, create_ok=True):
        self.create_ok = create_ok
        self.created_categories = []
        self.created_products = []

    def create_category(self, name):
        self.created_categories.append(name)
        return self.create_ok

    def create_product(self, category_id, fields, files):
        self.created_products.append((category_id, fields, files))
        return self.create_ok


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def failing_connector():
    return FakeConnector(create_ok=False)
