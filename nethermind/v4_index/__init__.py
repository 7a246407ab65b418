from .decoding import PoolManagerLogDecoder
from .processor import LogProcessor
from .reconciler import PoolManagerReconciler, ReconcilerStats
