"""HTTP client for the products service.

Only two calls are needed by the inventory side: fetch a product (to snapshot
its price) and check that a product exists (before registering stock for it).
Every failure is raised as a ``ProductUnavailableError`` subclass: 404 becomes
``ProductNotFoundError``, anything else ``ProductServiceError``.
"""

import logging
from decimal import Decimal

import httpx
from pydantic import BaseModel, ValidationError

from inventory_service.config import Settings
from inventory_service.errors import ProductNotFoundError, ProductServiceError

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/v1/products"


class ProductInfo(BaseModel):
    id: int
    name: str
    price: Decimal
    description: str | None = None


class ProductDirectoryClient:
    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        timeout: float = 5.0,
        retries: int = 3,
        client: httpx.Client | None = None,
    ):
        if client is None:
            client = httpx.Client(
                base_url=base_url,
                timeout=timeout,
                transport=httpx.HTTPTransport(retries=retries),
            )
        self._client = client
        self._headers = {"X-API-Key": api_key} if api_key else {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductDirectoryClient":
        return cls(
            base_url=settings.PRODUCTS_SERVICE_URL,
            api_key=settings.PRODUCTS_SERVICE_API_KEY,
            timeout=settings.PRODUCTS_SERVICE_TIMEOUT,
            retries=settings.PRODUCTS_SERVICE_RETRIES,
        )

    def _get(self, path: str) -> httpx.Response:
        try:
            return self._client.get(path, headers=self._headers)
        except httpx.TimeoutException as e:
            logger.error("Products service timed out on GET %s: %s", path, e)
            raise ProductServiceError(f"Products service timed out: {path}") from e
        except httpx.HTTPError as e:
            logger.error("Products service unreachable on GET %s: %s", path, e)
            raise ProductServiceError(f"Products service unreachable: {path}") from e

    def get_product(self, product_id: int) -> ProductInfo:
        resp = self._get(f"{PRODUCTS_PATH}/{product_id}")
        if resp.status_code == 404:
            logger.warning("Product %s not found in products service", product_id)
            raise ProductNotFoundError(f"Product not found or unavailable: {product_id}")
        if not resp.is_success:
            logger.error("Products service answered %s for product %s", resp.status_code, product_id)
            raise ProductServiceError(f"Products service error ({resp.status_code}) for product {product_id}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise ProductServiceError(f"Products service returned invalid JSON for product {product_id}") from e
        if not payload:
            raise ProductServiceError(f"Products service returned no data for product {product_id}")

        try:
            return ProductInfo.model_validate(payload)
        except ValidationError as e:
            raise ProductServiceError(f"Products service returned malformed data for product {product_id}") from e

    def exists(self, product_id: int) -> bool:
        resp = self._get(f"{PRODUCTS_PATH}/{product_id}/exists")
        if not resp.is_success:
            logger.error("Products service answered %s checking product %s", resp.status_code, product_id)
            raise ProductServiceError(f"Products service error ({resp.status_code}) checking product {product_id}")
        try:
            return resp.json() is True
        except ValueError as e:
            raise ProductServiceError(f"Products service returned invalid JSON checking product {product_id}") from e

    def close(self) -> None:
        self._client.close()
