"""Order service configuration, read from the environment at import."""

import os


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


PRODUCT_SERVICE_URL = os.getenv("PRODUCT_SERVICE_URL", "http://localhost:8000")
CATALOG_TIMEOUT_MS = int(os.getenv("CATALOG_TIMEOUT_MS", "1000"))

PREMIUM_CATEGORY = os.getenv("PREMIUM_CATEGORY", "Premium")
PREMIUM_ITEM_THRESHOLD = int(os.getenv("PREMIUM_ITEM_THRESHOLD", "3"))
PREMIUM_DISCOUNT_PERCENT = int(os.getenv("PREMIUM_DISCOUNT_PERCENT", "10"))

RESTOCK_ON_CANCEL = _flag("RESTOCK_ON_CANCEL")
OPTIMISTIC_COMMIT = _flag("OPTIMISTIC_COMMIT")
MAX_COMMIT_ATTEMPTS = int(os.getenv("MAX_COMMIT_ATTEMPTS", "3"))
