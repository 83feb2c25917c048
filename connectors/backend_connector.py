# merchant_dashboard/connectors/backend_connector.py
import requests
import logging
import threading
from pydantic import ValidationError

from services.schemas import Category, ProductSummary

logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    """Raised when a read from the catalog backend fails."""


def _response_text(exc):
    response = getattr(exc, "response", None)
    return response.text[:200] if response is not None else "no response"


class BackendConnector:
    def __init__(self, base_url, timeout=30, session=None):
        if not base_url:
            logger.error("Backend base URL is not provided.")
            raise ValueError("Backend base URL is required.")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self):
        """An injected session is shared; otherwise each thread gets its own requests.Session."""
        if self._shared_session is not None:
            return self._shared_session
        if not hasattr(self._local, "session"):
            self._local.session = requests.Session()
        return self._local.session

    @classmethod
    def from_config(cls, config, session=None):
        backend = config.get('backend', {})
        return cls(base_url=backend.get('base_url'), timeout=backend.get('timeout', 30), session=session)

    def url(self, path):
        return f"{self.base_url}/{str(path).lstrip('/')}"

    def image_url(self, image_path):
        """Product images come back as paths relative to the backend origin."""
        if not image_path:
            return None
        if image_path.startswith(("http://", "https://")):
            return image_path
        return self.url(image_path)

    def _get_json(self, path):
        url = self.url(path)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching {url}: {e} - Response: {_response_text(e)}")
            raise BackendError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            logger.error(f"Error decoding JSON from {url}: {e}")
            raise BackendError(f"GET {url} returned invalid JSON") from e

    def get_categories(self):
        data = self._get_json("categories")
        try:
            categories = [Category.model_validate(item) for item in data]
        except (TypeError, ValidationError) as e:
            logger.error(f"Malformed category list from backend: {e}")
            raise BackendError("Malformed category list") from e
        logger.info(f"Fetched {len(categories)} categories.")
        return categories

    def get_products(self, category_id):
        data = self._get_json(f"categories/{category_id}/products")
        if not isinstance(data, list):
            logger.error(f"Malformed product list for category {category_id}: expected a list")
            raise BackendError(f"Malformed product list for category {category_id}")
        products = []
        for item in data:
            try:
                products.append(ProductSummary.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product in category {category_id}: {e}")
        logger.info(f"Fetched {len(products)} products for category {category_id}.")
        return products

    def create_category(self, name):
        """
        Creates a category.
        :param name: The category name.
        :return: True when the backend answered with a success status, False otherwise.
        """
        url = self.url("categories")
        try:
            response = self.session.post(url, json={"name": name}, timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Successfully created category '{name}'.")
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to create category '{name}': {e} - Response: {_response_text(e)}")
            return False

    def create_product(self, category_id, fields, files):
        """
        Creates a product under a category with a multipart request.
        :param category_id: The category the product belongs to.
        :param fields: Ordered list of (name, value) form fields.
        :param files: Mapping of file field name to (filename, content, mime type).
        :return: True when the backend answered with a success status, False otherwise.
        """
        url = self.url(f"categories/{category_id}/products")
        try:
            response = self.session.post(url, data=fields, files=files, timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Successfully created product in category {category_id}.")
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to create product in category {category_id}: {e} - Response: {_response_text(e)}")
            return False
