import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tradepool.api.dependencies import get_catalog
from tradepool.db.database import drop_db, get_session, init_db
from tradepool.main import app
from tradepool.services.card_catalog import CardCatalog, build_card_catalog

CATALOG_RECORDS = [
    {"set": "A1", "id": 1, "name": "Bulbasaur", "rarity": "◊", "image": "a1-1.webp"},
    {"set": "A1", "id": 2, "name": "Ivysaur", "rarity": "◊", "image": "a1-2.webp"},
    {"set": "A1", "id": 3, "name": "Venusaur", "rarity": "◊◊◊", "image": "a1-3.webp"},
    {"set": "A1", "id": 4, "name": "Charmander", "rarity": "◊", "image": "a1-4.webp"},
    {"set": "A1", "id": 5, "name": "Charizard ex", "rarity": "◊◊◊◊", "image": "a1-5.webp"},
    {"set": "A1", "id": 6, "name": "Squirtle", "rarity": "◊◊", "image": "a1-6.webp"},
    {"set": "A1", "id": 7, "name": "Pikachu ex", "rarity": "☆☆", "image": "a1-7.webp"},
    {"set": "A1", "id": 8, "name": "Mewtwo ex", "rarity": "👑", "image": "a1-8.webp"},
    {"set": "A1a", "id": 1, "name": "Exeggcute", "rarity": "◊", "image": "a1a-1.webp"},
    {"set": "P-A", "id": 1, "name": "Potion", "rarity": "Promo", "image": "pa-1.webp"},
]


@pytest.fixture
def catalog_records() -> list[dict]:
    """Raw catalog records as delivered by the catalog download."""
    return [dict(record) for record in CATALOG_RECORDS]


@pytest.fixture
def catalog(catalog_records: list[dict]) -> CardCatalog:
    """Small catalog covering tradeable and non-tradeable tiers."""
    return build_card_catalog(catalog_records)


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await init_db(bind=engine)
    yield engine
    await drop_db(bind=engine)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine, catalog: CardCatalog):
    """Provide an async test client with overridden database session and catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_catalog] = lambda: catalog

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
