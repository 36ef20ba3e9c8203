# app/main.py
from app.api import create_app
from app.data.database import Base, engine
from app.utils.logging import get_logger, setup_logging
import uvicorn

# import wszystkich modeli przed create_all
from app.data import models  # noqa: F401

setup_logging()
logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")


init_db()

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
