from pymongo import MongoClient
from pymongo.database import Database

from catalog.config import get_settings

settings = get_settings()

# MongoClient connects lazily and keeps its own connection pool
client = MongoClient(
    settings.MONGO_URI,
    maxPoolSize=10,
    serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
    tz_aware=True,
)


def get_database():
    """
    Dependency to get the document store database.
    Yields the configured database handle; the client pool is shared.
    """
    db: Database = client[settings.DB_NAME]
    yield db
