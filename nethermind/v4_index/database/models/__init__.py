from .base import Base, WideInteger
from .pool_manager import POOL_MANAGER_SCHEMA, Pool, Position, Swap, Token
