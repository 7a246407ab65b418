import logging
import time
from typing import Any, Iterable, Mapping

from nethermind.v4_index.decoding import PoolManagerLogDecoder
from nethermind.v4_index.exceptions import OrderingError
from nethermind.v4_index.reconciler import PoolManagerReconciler

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("v4_index").getChild("processor")


class LogProcessor:
    """
    Drives the reconciler from an ordered stream of raw PoolManager logs for a single chain.  Fetching logs,
    retrying RPC requests & handling reorgs is left to the ingestion framework delivering the logs.
    """

    chain_id: int
    last_position: tuple[int, int] | None
    """ (block_number, log_index) of the last processed log """

    def __init__(
        self,
        decoder: PoolManagerLogDecoder,
        reconciler: PoolManagerReconciler,
        chain_id: int,
    ):
        self.decoder = decoder
        self.reconciler = reconciler
        self.chain_id = chain_id
        self.last_position = None

    def _log_position(self, log: Mapping[str, Any]) -> tuple[int, int]:
        block_number, log_index = log["blockNumber"], log["logIndex"]
        position = (
            block_number if isinstance(block_number, int) else int(block_number, 16),
            log_index if isinstance(log_index, int) else int(log_index, 16),
        )
        if self.last_position is not None and position <= self.last_position:
            raise OrderingError(
                f"Log at block {position[0]} index {position[1]} delivered after block {self.last_position[0]} "
                f"index {self.last_position[1]} on chain {self.chain_id}"
            )
        return position

    def process_logs(self, logs: Iterable[Mapping[str, Any]]) -> int:
        """
        Decodes and applies each log in order.  Logs of other events are skipped.  A log only advances the
        stream position once it is applied, so a log whose event fails to apply can be delivered again.

        :param logs: raw logs, ordered by (blockNumber, logIndex)
        :return: number of events applied
        """
        start_time = time.time()
        applied = 0
        for log in logs:
            position = self._log_position(log)
            event = self.decoder.decode(log, self.chain_id)
            if event is not None:
                self.reconciler.apply(event)
                applied += 1

            self.last_position = position

        minutes, seconds = divmod(time.time() - start_time, 60)
        logger.info(
            f"Applied {applied} PoolManager events on chain {self.chain_id} in "
            f"{int(minutes)} minutes {seconds:.1f} seconds"
        )
        return applied
