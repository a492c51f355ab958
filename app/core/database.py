"""
MongoDB database connection and management
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


class Database:
    """
    MongoDB database manager
    """
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None


database = Database()


async def connect_to_mongo():
    """
    Establish connection to MongoDB
    Called on application startup
    """
    try:
        logger.info("Connecting to MongoDB...")

        database.client = AsyncIOMotorClient(
            settings.MONGODB_URL,
            minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
            maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=10000,
            socketTimeoutMS=10000
        )

        database.db = database.client[settings.MONGODB_DB_NAME]

        # Test connection
        await database.client.admin.command('ping')

        logger.info(f"Successfully connected to MongoDB: {settings.MONGODB_DB_NAME}")

        await create_indexes()

    except ConnectionFailure as e:
        logger.error(f"Failed to connect to MongoDB: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error connecting to MongoDB: {str(e)}")
        raise


async def close_mongo_connection():
    """
    Close MongoDB connection
    Called on application shutdown
    """
    try:
        if database.client:
            database.client.close()
            logger.info("MongoDB connection closed")
    except Exception as e:
        logger.error(f"Error closing MongoDB connection: {str(e)}")


async def get_database() -> AsyncIOMotorDatabase:
    """
    Get database instance
    Used as dependency in API endpoints
    """
    return database.db


async def create_indexes():
    """
    Create indexes for the four store collections
    """
    try:
        db = database.db

        logger.info("Creating database indexes...")

        # OAuth tokens, one row per user and provider
        await db.api_tokens.create_index([("user_id", 1), ("provider", 1)], unique=True)

        # Ad accounts
        await db.ad_accounts.create_index(
            [("user_id", 1), ("platform", 1), ("account_id", 1)], unique=True
        )

        # Leads
        await db.leads.create_index([("user_id", 1), ("created_at", -1)])
        await db.leads.create_index([("user_id", 1), ("form_id", 1)])
        await db.leads.create_index([("user_id", 1), ("status", 1)])

        # Connected forms
        await db.connected_forms.create_index([("user_id", 1), ("created_at", -1)])
        await db.connected_forms.create_index([("form_id", 1)])
        await db.connected_forms.create_index([("user_id", 1), ("website_url", 1)])

        logger.info("Database indexes created successfully")

    except Exception as e:
        logger.error(f"Error creating indexes: {str(e)}")
        # Don't raise - indexes are optimization, not critical


async def check_database_health() -> bool:
    """
    Check if database connection is healthy
    """
    try:
        await database.client.admin.command('ping')
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False
