import logging
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from .base import Base, engine as default_engine

logger = logging.getLogger(__name__)

def init_db(engine: Engine = None):
    """Create any missing tables"""
    # Import models so they register on Base.metadata
    from ..models.auth import User
    from ..models.organisation import Organization, OrganizationMember, Team, TeamMember

    engine = engine or default_engine
    inspector = inspect(engine)

    models = [User, Organization, OrganizationMember, Team, TeamMember]
    missing = [Model for Model in models if not inspector.has_table(Model.__tablename__)]

    for Model in models:
        if Model in missing:
            logger.info(f"Creating table {Model.__tablename__}")
        else:
            logger.info(f"Table {Model.__tablename__} already exists")

    Base.metadata.create_all(engine, tables=[Model.__table__ for Model in missing])
    return [Model.__tablename__ for Model in missing]

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database initialization completed!")
