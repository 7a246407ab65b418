from .migrations import create_db_engine, migrate_up
from .store import EntityStore
