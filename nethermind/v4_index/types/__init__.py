from .events import (
    EventMetadata,
    InitializeEvent,
    ModifyLiquidityEvent,
    PoolManagerEvent,
    SwapEvent,
)
