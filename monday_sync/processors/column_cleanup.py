"""
Clear one column on every item of a board.

Used to wipe a file column before re-running an upload batch.
"""

import argparse

from monday_sync.config import settings
from monday_sync.core.logging import configure_logging, get_logger
from monday_sync.processors.base import BaseProcessor
from monday_sync.services.monday import MondayClient

log = get_logger(__name__)


class ColumnCleanupProcessor(BaseProcessor):

    def __init__(self, board_id: int, column_id: str, client: MondayClient | None = None):
        self.board_id = board_id
        self.column_id = column_id
        self.client = client or MondayClient()

    def run(self) -> dict:
        stats = {"items": 0, "cleared": 0, "errors": 0}
        for item_id in self.client.iter_board_item_ids(self.board_id):
            stats["items"] += 1
            if self.client.clear_column(self.board_id, item_id, self.column_id):
                stats["cleared"] += 1
            else:
                stats["errors"] += 1

        if not stats["items"]:
            log.info("no_items_to_clear", board_id=self.board_id)
        log.info("column_cleanup_complete", board_id=self.board_id, column_id=self.column_id, **stats)
        return stats


def main():
    parser = argparse.ArgumentParser(description="Clear a column on every item of a board")
    parser.add_argument("--board-id", type=int, required=True, help="Board id")
    parser.add_argument("--column-id", required=True, help="Column id to clear")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(log_level=args.log_level, json_output=settings.log_json)
    ColumnCleanupProcessor(args.board_id, args.column_id).run()


if __name__ == "__main__":
    main()
