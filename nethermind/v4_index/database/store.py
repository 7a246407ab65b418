import logging
import threading
from typing import Any, Type

from sqlalchemy import Connection, Engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from nethermind.v4_index.exceptions import DatabaseError

from .models import Pool, Position, Swap, Token

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("db").getChild("store")

KEY_LOCK_STRIPES = 64

POOL_UPDATE_FIELDS = frozenset({"liquidity", "tick", "sqrt_price_x96", "token0_price", "token1_price"})


class EntityStore:
    """
    Transactional store for the four PoolManager entities.  Provides point lookups by identity key,
    insert-if-absent for tokens, pools & swaps, partial updates of pools, and an atomic accumulate-upsert for
    position liquidity.

    Postgres & sqlite use native ``ON CONFLICT`` statements.  Position accumulation is a native
    ``ON CONFLICT DO UPDATE`` on postgres, and a read-modify-write under a per-key lock on other dialects.
    """

    db_session: Session
    db_dialect: str

    def __init__(self, db_session: Session):
        self.db_session = db_session
        self.db_dialect = db_session.get_bind().dialect.name

        self._key_locks = tuple(threading.RLock() for _ in range(KEY_LOCK_STRIPES))

    @classmethod
    def from_engine(cls, db_engine: Engine | Connection) -> "EntityStore":
        """Creates a store with a new session bound to db_engine"""
        return cls(sessionmaker(db_engine)())

    def key_lock(self, *key: Any):
        """
        Returns the mutual exclusion lock for an entity key.  Keys share a fixed pool of lock stripes, so
        unrelated keys may serialize on the same lock, but the number of locks never grows.
        """
        return self._key_locks[hash(key) % KEY_LOCK_STRIPES]

    # -------------------------------------------------------
    #    Point Lookups
    # -------------------------------------------------------
    def get_token(self, address: str, chain_id: int) -> Token | None:
        return self.db_session.get(Token, (address, chain_id), populate_existing=True)

    def get_pool(self, pool_id: str, chain_id: int) -> Pool | None:
        return self.db_session.get(Pool, (pool_id, chain_id), populate_existing=True)

    def get_position(self, position_id: str, pool_id: str, chain_id: int) -> Position | None:
        return self.db_session.get(Position, (position_id, pool_id, chain_id), populate_existing=True)

    def get_swap(self, log_id: str) -> Swap | None:
        return self.db_session.get(Swap, log_id, populate_existing=True)

    # -------------------------------------------------------
    #    Inserts & Updates
    # -------------------------------------------------------
    def insert_token_if_absent(self, **values) -> bool:
        """Inserts a Token row.  Returns False if a row with the same (address, chain_id) already exists"""
        return self._insert_if_absent(Token, values)

    def insert_pool_if_absent(self, **values) -> bool:
        """Inserts a Pool row.  Returns False if a row with the same (pool_id, chain_id) already exists"""
        return self._insert_if_absent(Pool, values)

    def insert_swap_if_absent(self, **values) -> bool:
        """Inserts a Swap row.  Returns False if the log id was already recorded"""
        return self._insert_if_absent(Swap, values)

    def update_pool(self, pool_id: str, chain_id: int, **fields) -> Pool:
        """
        Overwrites a subset of a pool's mutable fields.  Raises DatabaseError if the pool does not exist, or if
        fields other than liquidity, tick, sqrt_price_x96 and the token prices are passed.
        """
        if invalid_fields := set(fields) - POOL_UPDATE_FIELDS:
            raise DatabaseError(f"Cannot update immutable pool fields: {sorted(invalid_fields)}")

        pool = self.get_pool(pool_id, chain_id)
        if pool is None:
            raise DatabaseError(f"Cannot update pool {pool_id} on chain {chain_id}.  Pool does not exist")

        for name, value in fields.items():
            setattr(pool, name, value)

        self._flush()
        return pool

    def upsert_position_liquidity(self, liquidity_delta: int, **values) -> int:
        """
        Inserts a Position with liquidity = liquidity_delta, or if the position already exists, adds
        liquidity_delta to the stored liquidity.  The remaining columns of an existing row are left unchanged.

        :param liquidity_delta: signed liquidity change
        :param values: position columns, including position_id, pool_id and chain_id
        :return: liquidity of the position after the upsert
        """
        table = Position.__table__
        values = {**values, "liquidity": liquidity_delta}

        if self.db_dialect == "postgresql":
            self._flush()
            insert_stmt = postgresql.insert(table).values(**values)
            upsert_stmt = insert_stmt.on_conflict_do_update(
                index_elements=list(table.primary_key.columns.keys()),  # type: ignore
                set_={"liquidity": table.c.liquidity + insert_stmt.excluded.liquidity},  # type: ignore
            ).returning(table.c.liquidity)  # type: ignore
            return self._execute(upsert_stmt).scalar_one()

        with self.key_lock("position", values["position_id"], values["pool_id"], values["chain_id"]):
            position = self.get_position(values["position_id"], values["pool_id"], values["chain_id"])
            if position is None:
                self.db_session.add(Position(**values))
                self._flush()
                return liquidity_delta

            position.liquidity = position.liquidity + liquidity_delta
            self._flush()
            return position.liquidity

    # -------------------------------------------------------
    #    Transactions
    # -------------------------------------------------------
    def commit(self):
        """Commits the current transaction.  Rolls back & raises DatabaseError on failure"""
        try:
            self.db_session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Error while committing to DB: {exc}")
            self.db_session.rollback()
            raise DatabaseError("Failed to commit PoolManager state") from exc

    def rollback(self):
        """Discards all changes since the last commit"""
        self.db_session.rollback()

    def close(self):
        """Closes the underlying session"""
        self.db_session.close()

    def _insert_if_absent(self, db_model: Type[DeclarativeBase], values: dict[str, Any]) -> bool:
        table = db_model.__table__
        primary_keys = list(table.primary_key.columns.keys())  # type: ignore

        match self.db_dialect:
            case "postgresql":
                statement = postgresql.insert(table).values(**values).on_conflict_do_nothing(index_elements=primary_keys)
            case "sqlite":
                statement = sqlite.insert(table).values(**values).on_conflict_do_nothing(index_elements=primary_keys)
            case _:
                return self._insert_with_savepoint(db_model, values)

        self._flush()
        return self._execute(statement).rowcount == 1

    def _insert_with_savepoint(self, db_model: Type[DeclarativeBase], values: dict[str, Any]) -> bool:
        try:
            with self.db_session.begin_nested():
                self.db_session.add(db_model(**values))
        except IntegrityError:
            logger.debug(f"Ignored conflicting {db_model.__tablename__} insert: {values}")
            return False
        return True

    def _flush(self):
        try:
            self.db_session.flush()
        except SQLAlchemyError as exc:
            self.db_session.rollback()
            raise DatabaseError(f"Failed to flush pending changes: {exc}") from exc

    def _execute(self, statement):
        try:
            return self.db_session.execute(statement)
        except SQLAlchemyError as exc:
            self.db_session.rollback()
            raise DatabaseError(f"Error while executing statement: {exc}") from exc
