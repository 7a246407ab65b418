from decimal import Decimal
from typing import Annotated

from sqlalchemy import BigInteger, Integer, Numeric, Text
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, mapped_column
from sqlalchemy.types import TypeDecorator

# Binary Data is Represented as a String of Hex Digits
# -- Addresses are stored checksummed, 32 byte ids & hashes are stored as lowercase 0x prefixed hex.


class WideInteger(TypeDecorator):
    """
    Arbitrary width signed integer.  Stored as NUMERIC(78, 0) on postgres, and as exact decimal text on
    other dialects, since sqlite converts NUMERIC values wider than 64 bits to floats.
    """

    impl = Numeric(78, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 0))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: int | None, dialect: Dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return Decimal(int(value))
        return str(int(value))

    def process_result_value(self, value: Decimal | str | None, dialect: Dialect) -> int | None:
        if value is None:
            return None
        return int(value)


ChainId = Annotated[int, mapped_column(Integer, nullable=False)]
LogIdPK = Annotated[str, mapped_column(Text, primary_key=True)]

IndexedAddress = Annotated[str, mapped_column(Text, index=True, nullable=False)]
IndexedBlockNumber = Annotated[int, mapped_column(BigInteger, nullable=False, index=True)]
BlockNumber = Annotated[int, mapped_column(BigInteger, nullable=False)]

UInt128 = Annotated[int, mapped_column(WideInteger, nullable=False)]
UInt160 = Annotated[int, mapped_column(WideInteger, nullable=False)]
Int128 = Annotated[int, mapped_column(WideInteger, nullable=False)]
Int256 = Annotated[int, mapped_column(WideInteger, nullable=False)]

Address = Annotated[str, mapped_column(Text, nullable=False)]
Hash32 = Annotated[str, mapped_column(Text, nullable=False)]
DecimalString = Annotated[str, mapped_column(Text, nullable=False)]


class Base(DeclarativeBase):
    """Base class for PoolManager state tables"""
