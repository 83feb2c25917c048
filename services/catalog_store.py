# merchant_dashboard/services/catalog_store.py
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime

from connectors.backend_connector import BackendError

logger = logging.getLogger(__name__)


class CatalogStore:
    def __init__(self, connector, max_workers=8):
        self.connector = connector
        self.max_workers = max_workers
        self.categories = []
        self.products = {}
        self.failed = set()
        self.last_updated = None

    def load(self):
        """Fetches the category list, then every category's products concurrently."""
        try:
            categories = self.connector.get_categories()
        except BackendError as e:
            logger.error(f"Could not load categories, keeping previous catalog: {e}")
            return False

        self.categories = categories
        self.products = {}
        self.failed = set()
        self._fetch_products([category.id for category in categories])
        self.last_updated = datetime.now()
        return True

    def reload_categories(self):
        """Re-fetches the category list and loads products only for categories not seen before."""
        try:
            categories = self.connector.get_categories()
        except BackendError as e:
            logger.error(f"Could not refresh categories: {e}")
            return False

        current_ids = {category.id for category in categories}
        new_ids = [category.id for category in categories if category.id not in self.products]
        self.categories = categories
        for stale_id in set(self.products) - current_ids:
            self.products.pop(stale_id, None)
            self.failed.discard(stale_id)
        self._fetch_products(new_ids)
        self.last_updated = datetime.now()
        return True

    def reload_products(self, category_id):
        """Re-fetches one category's products."""
        self._fetch_products([category_id])
        self.last_updated = datetime.now()
        return category_id not in self.failed

    def _fetch_products(self, category_ids):
        if not category_ids:
            return
        workers = max(1, min(self.max_workers, len(category_ids)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.connector.get_products, cid): cid for cid in category_ids}
            for future in as_completed(futures):
                category_id = futures[future]
                try:
                    self.products[category_id] = future.result()
                    self.failed.discard(category_id)
                except BackendError as e:
                    logger.warning(f"Products for category {category_id} unavailable: {e}")
                    self.products[category_id] = []
                    self.failed.add(category_id)

    def products_for(self, category_id):
        return self.products.get(category_id, [])

    def category_name(self, category_id):
        for category in self.categories:
            if category.id == category_id:
                return category.name
        return None

    @property
    def category_ids(self):
        return [category.id for category in self.categories]
