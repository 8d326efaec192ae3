"""Shared loading/error bookkeeping for the screen-state objects."""
import asyncio
import logging
from contextlib import asynccontextmanager

from network.errors import NetworkError, classify
from services.account_service import AccountNotFoundError

logger = logging.getLogger(__name__)


class Presenter:
    def __init__(self):
        self.is_loading = False
        self.error: str | None = None

    @asynccontextmanager
    async def _busy(self, clear_error: bool = True):
        """Run a block with is_loading set, turning failures into `error`.

        Cancellation leaves `error` alone and propagates.
        """
        self.is_loading = True
        if clear_error:
            self.error = None
        try:
            yield
        except asyncio.CancelledError:
            logger.debug("%s: task cancelled", type(self).__name__)
            raise
        except NetworkError as exc:
            logger.warning(
                "%s: %s (%s)", type(self).__name__, exc.message, classify(exc).value
            )
            self.error = exc.message
        except (AccountNotFoundError, ValueError) as exc:
            self.error = str(exc)
        finally:
            self.is_loading = False
