# merchant_dashboard/services/category_form.py
import logging

logger = logging.getLogger(__name__)


class CategoryForm:
    """State behind the "Add category" dialog."""

    def __init__(self, name=""):
        self.name = name

    def submit(self, connector, on_save=None):
        name = self.name.strip()
        if not name:
            return False
        if not connector.create_category(name):
            logger.info(f"Category '{name}' was not created; keeping the dialog input.")
            return False
        if on_save is not None:
            on_save(name)
        self.name = ""
        return True
