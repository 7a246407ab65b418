from sqlalchemy import Engine, create_engine
from sqlalchemy.schema import CreateSchema

from .models.pool_manager import POOL_MANAGER_SCHEMA


def create_db_engine(db_url: str, **engine_kwargs) -> Engine:
    """
    Creates a SQLAlchemy engine for the PoolManager state tables.  Postgres stores the tables in the uniswap_v4
    schema.  Other dialects do not support schemas, so the schema is translated away.
    """
    engine = create_engine(db_url, **engine_kwargs)
    if engine.dialect.name == "postgresql":
        return engine
    return engine.execution_options(schema_translate_map={POOL_MANAGER_SCHEMA: None})


def migrate_up(db_engine: Engine):
    """Create Sqlalchemy DB Tables"""
    from .models.base import Base  # pylint: disable=import-outside-toplevel

    if db_engine.dialect.name == "postgresql":
        schemas = {table.schema for table in Base.metadata.tables.values() if table.schema}
        with db_engine.connect() as conn:
            for schema_name in schemas:
                conn.execute(CreateSchema(schema_name, if_not_exists=True))

            conn.commit()

    Base.metadata.create_all(bind=db_engine)
