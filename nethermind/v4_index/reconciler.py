import logging
from collections import Counter
from dataclasses import dataclass

from nethermind.v4_index.database.store import EntityStore
from nethermind.v4_index.math import (
    calculate_position_key,
    format_price,
    sqrt_price_x96_to_token_prices,
)
from nethermind.v4_index.tokens.resolver import TokenResolver
from nethermind.v4_index.types.events import (
    InitializeEvent,
    ModifyLiquidityEvent,
    PoolManagerEvent,
    SwapEvent,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("reconciler")


@dataclass
class ReconcilerStats:
    """
    Counters for applied events and non-fatal faults.  Missing references and duplicate initializations do not stop
    processing, but a growing count signals a systematic inconsistency in the upstream event stream.  Counters only
    change once the transaction of an event commits.
    """

    events_applied: int = 0
    initializes: int = 0
    swaps: int = 0
    modify_liquidities: int = 0

    missing_pools: int = 0
    missing_tokens: int = 0
    duplicate_pools: int = 0


class PoolManagerReconciler:
    """
    Projects PoolManager events onto the token, pool, position and swap tables.

    Events must be applied sequentially, in (block number, log index) order for each chain.  Every event is applied
    in its own transaction.  If a handler raises, the transaction is rolled back and the error is propagated.
    """

    store: EntityStore
    resolver: TokenResolver
    stats: ReconcilerStats

    def __init__(self, store: EntityStore, resolver: TokenResolver):
        self.store = store
        self.resolver = resolver
        self.stats = ReconcilerStats()
        self._pending_stats: Counter[str] = Counter()

    def apply(self, event: PoolManagerEvent):
        """
        Applies a single event to the derived state and commits the transaction.

        :param event: InitializeEvent, SwapEvent or ModifyLiquidityEvent
        """
        self._pending_stats.clear()
        try:
            match event:
                case InitializeEvent():
                    self.handle_initialize(event)
                case SwapEvent():
                    self.handle_swap(event)
                case ModifyLiquidityEvent():
                    self.handle_modify_liquidity(event)
                case _:
                    raise TypeError(f"Unsupported PoolManager event: {type(event).__name__}")
        except Exception as exc:
            logger.error(f"Error while applying {type(event).__name__} {getattr(event, 'meta', None)}: {exc}")
            self.store.rollback()
            raise exc

        self.store.commit()
        for name, count in self._pending_stats.items():
            setattr(self.stats, name, getattr(self.stats, name) + count)
        self.stats.events_applied += 1

    def handle_initialize(self, event: InitializeEvent):
        """
        Creates a pool.  Resolves (and stores) the metadata of both currencies, then inserts the pool with zero
        liquidity and prices derived from the initial sqrt price.

        A second Initialize for an existing pool is ignored.  The stored pool is left unchanged.
        """
        chain_id, block_number = event.meta.chain_id, event.meta.block_number
        self._pending_stats["initializes"] += 1

        token_0 = self.resolver.resolve(event.currency0, chain_id, block_number)
        token_1 = self.resolver.resolve(event.currency1, chain_id, block_number)

        price_0, price_1 = sqrt_price_x96_to_token_prices(event.sqrt_price_x96, token_0.decimals, token_1.decimals)

        inserted = self.store.insert_pool_if_absent(
            pool_id=event.pool_id,
            chain_id=chain_id,
            currency0=event.currency0,
            currency1=event.currency1,
            fee=event.fee,
            tick_spacing=event.tick_spacing,
            tick=event.tick,
            sqrt_price_x96=event.sqrt_price_x96,
            liquidity=0,
            token0_price=format_price(price_0),
            token1_price=format_price(price_1),
            hooks=event.hooks,
            creation_block=block_number,
        )

        if not inserted:
            self._pending_stats["duplicate_pools"] += 1
            logger.warning(
                f"Pool {event.pool_id} on chain {chain_id} is already initialized.  "
                f"Ignoring Initialize at block {block_number} ({event.meta.log_id})"
            )
            return

        logger.info(
            f"Initialized pool {event.pool_id} on chain {chain_id}: {token_0.symbol}/{token_1.symbol} "
            f"fee {event.fee} tick spacing {event.tick_spacing}"
        )

    def handle_swap(self, event: SwapEvent):
        """
        Moves a pool to the post-swap state emitted by the event, and appends the swap record.  The pool's
        liquidity, tick, sqrt price and both prices are overwritten with the event's values.
        """
        chain_id = event.meta.chain_id
        self._pending_stats["swaps"] += 1

        pool = self.store.get_pool(event.pool_id, chain_id)
        if pool is None:
            self._pending_stats["missing_pools"] += 1
            logger.error(f"Pool not found for pool {event.pool_id} on chain {chain_id}.  Skipping Swap")
            return

        token_0 = self.resolver.lookup(pool.currency0, chain_id)
        token_1 = self.resolver.lookup(pool.currency1, chain_id)
        if token_0 is None or token_1 is None:
            self._pending_stats["missing_tokens"] += 1
            logger.error(f"Token not found for pool {pool.pool_id} on chain {chain_id}.  Skipping Swap")
            return

        price_0, price_1 = sqrt_price_x96_to_token_prices(event.sqrt_price_x96, token_0.decimals, token_1.decimals)

        self.store.update_pool(
            event.pool_id,
            chain_id,
            liquidity=event.liquidity,
            tick=event.tick,
            sqrt_price_x96=event.sqrt_price_x96,
            token0_price=format_price(price_0),
            token1_price=format_price(price_1),
        )

        if not self.store.insert_swap_if_absent(
            id=event.meta.log_id,
            pool_id=event.pool_id,
            sender=event.sender,
            amount0=event.amount0,
            amount1=event.amount1,
            sqrt_price_x96=event.sqrt_price_x96,
            liquidity=event.liquidity,
            tick=event.tick,
            fee=event.fee,
            chain_id=chain_id,
            block_number=event.meta.block_number,
        ):
            logger.debug(f"Swap {event.meta.log_id} already recorded")

    def handle_modify_liquidity(self, event: ModifyLiquidityEvent):
        """
        Applies a liquidity delta to a position, and to the pool's active liquidity if the position's range
        contains the pool's current tick.

        Positions are keyed by keccak256(owner, tickLower, tickUpper, salt), the same key the PoolManager uses.
        Position liquidity accumulates over every event for the key.
        """
        chain_id = event.meta.chain_id
        self._pending_stats["modify_liquidities"] += 1

        position_id = calculate_position_key(event.sender, event.tick_lower, event.tick_upper, event.salt)

        pool = self.store.get_pool(event.pool_id, chain_id)
        if pool is None:
            self._pending_stats["missing_pools"] += 1
            logger.error(f"Pool not found for pool {event.pool_id} on chain {chain_id}.  Skipping ModifyLiquidity")
            return

        # Pool liquidity only tracks liquidity that is active at the current tick
        if pool.tick is not None and event.tick_lower <= pool.tick <= event.tick_upper:
            self.store.update_pool(event.pool_id, chain_id, liquidity=pool.liquidity + event.liquidity_delta)

        position_liquidity = self.store.upsert_position_liquidity(
            event.liquidity_delta,
            position_id=position_id,
            pool_id=event.pool_id,
            chain_id=chain_id,
            owner=event.sender,
            tick_lower=event.tick_lower,
            tick_upper=event.tick_upper,
            salt=event.salt,
            creation_block=event.meta.block_number,
        )
        logger.debug(f"Position {position_id} in pool {event.pool_id} now has liquidity {position_liquidity}")
