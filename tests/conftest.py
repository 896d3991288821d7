from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from inventory_service.clients.product_directory import ProductInfo
from inventory_service.config import Settings
from inventory_service.database import create_db_engine, create_session_factory, init_db
from inventory_service.errors import ProductNotFoundError, ProductServiceError
from inventory_service.main import create_app
from inventory_service.services.purchase_workflow import PurchaseWorkflow
from inventory_service.services.stock_ledger import StockLedger
from products_service.database import get_db as get_products_db
from products_service.database import init_db as init_products_db
from products_service.main import app as products_app


class FakeProductDirectory:
    """In-memory stand-in for the products service client."""

    def __init__(self):
        self.products: dict[int, ProductInfo] = {}
        self.down = False
        self.lookups = 0

    def add(self, product_id: int, price: str, name: str = "") -> None:
        self.products[product_id] = ProductInfo(id=product_id, name=name or f"Product {product_id}", price=Decimal(price))

    def get_product(self, product_id: int) -> ProductInfo:
        self.lookups += 1
        if self.down:
            raise ProductServiceError("Products service unreachable")
        if product_id not in self.products:
            raise ProductNotFoundError(f"Product not found or unavailable: {product_id}")
        return self.products[product_id]

    def exists(self, product_id: int) -> bool:
        if self.down:
            raise ProductServiceError("Products service unreachable")
        return product_id in self.products

    def close(self) -> None:
        pass


@pytest.fixture
def products():
    directory = FakeProductDirectory()
    directory.add(1, "10.00", "Keyboard")
    directory.add(2, "2.50", "Mouse pad")
    return directory


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'inventory.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def ledger(products):
    return StockLedger(products)


@pytest.fixture
def workflow(ledger, products):
    return PurchaseWorkflow(ledger, products)


@pytest.fixture
def make_stock(db, ledger):
    def _make(product_id=1, quantity=10, min_quantity=None, max_quantity=None):
        record = ledger.create(db, product_id, quantity, min_quantity, max_quantity)
        db.commit()
        return record

    return _make


@pytest.fixture
def inventory_client(tmp_path, products):
    settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'inventory-api.db'}")
    app = create_app(settings=settings, product_directory=products)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def products_client(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'products.db'}", connect_args={"check_same_thread": False}
    )
    init_products_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    products_app.dependency_overrides[get_products_db] = override_get_db
    # Not entered as a context manager: startup would create the default database file
    client = TestClient(products_app)
    yield client
    client.close()
    products_app.dependency_overrides.clear()
    engine.dispose()
