from sqlalchemy import Index, Integer, PrimaryKeyConstraint, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import (
    Address,
    Base,
    BlockNumber,
    ChainId,
    DecimalString,
    Hash32,
    IndexedAddress,
    IndexedBlockNumber,
    Int128,
    Int256,
    LogIdPK,
    UInt128,
    UInt160,
    WideInteger,
)

# pylint: disable=missing-class-docstring

POOL_MANAGER_SCHEMA = "uniswap_v4"


class Token(Base):
    __tablename__ = "tokens"

    address: Mapped[str] = mapped_column(Text)
    chain_id: Mapped[ChainId]
    name: Mapped[str]
    symbol: Mapped[str]
    decimals: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    creation_block: Mapped[BlockNumber]

    __table_args__ = (
        PrimaryKeyConstraint("address", "chain_id"),
        {"schema": POOL_MANAGER_SCHEMA},
    )


class Pool(Base):
    __tablename__ = "pools"

    pool_id: Mapped[str] = mapped_column(Text)
    chain_id: Mapped[ChainId]
    currency0: Mapped[IndexedAddress]
    currency1: Mapped[IndexedAddress]
    fee: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_spacing: Mapped[int] = mapped_column(Integer, nullable=False)
    tick: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sqrt_price_x96: Mapped[UInt160]
    liquidity: Mapped[int] = mapped_column(WideInteger, nullable=False, default=0)
    token0_price: Mapped[DecimalString]
    token1_price: Mapped[DecimalString]
    hooks: Mapped[IndexedAddress]
    creation_block: Mapped[BlockNumber]

    __table_args__ = (
        PrimaryKeyConstraint("pool_id", "chain_id"),
        {"schema": POOL_MANAGER_SCHEMA},
    )


class Position(Base):
    __tablename__ = "positions"

    position_id: Mapped[str] = mapped_column(Text)
    pool_id: Mapped[str] = mapped_column(Text)
    chain_id: Mapped[ChainId]
    owner: Mapped[IndexedAddress]
    tick_lower: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_upper: Mapped[int] = mapped_column(Integer, nullable=False)
    liquidity: Mapped[Int256]
    salt: Mapped[Hash32]
    creation_block: Mapped[BlockNumber]

    __table_args__ = (
        PrimaryKeyConstraint("position_id", "pool_id", "chain_id"),
        Index("ix_v4_position_pool", "pool_id", "chain_id"),
        {"schema": POOL_MANAGER_SCHEMA},
    )


class Swap(Base):
    __tablename__ = "swaps"

    id: Mapped[LogIdPK]
    pool_id: Mapped[Hash32]
    sender: Mapped[Address]
    amount0: Mapped[Int128]
    amount1: Mapped[Int128]
    sqrt_price_x96: Mapped[UInt160]
    liquidity: Mapped[UInt128]
    tick: Mapped[int] = mapped_column(Integer, nullable=False)
    fee: Mapped[int] = mapped_column(Integer, nullable=False)
    chain_id: Mapped[ChainId]
    block_number: Mapped[IndexedBlockNumber]

    __table_args__ = (
        Index("ix_v4_swap_pool_block", "pool_id", "block_number"),
        {"schema": POOL_MANAGER_SCHEMA},
    )
