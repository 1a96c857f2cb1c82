"""Abstract base class for account procedures."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger("accounts.procedure")


class BaseProcedure(ABC):
    """Each procedure overrides run() and declares PROCEDURE_NAME."""

    PROCEDURE_NAME: str = ""

    @abstractmethod
    def run(self) -> Any:
        """Execute the procedure against the injected stores."""

    def run_with_tracking(self) -> Any:
        """Wrap run() with timing and completion/failure logging."""
        started = time.monotonic()
        try:
            result = self.run()
        except Exception as exc:
            logger.error(
                "Procedure failed: %s",
                exc,
                extra={
                    "procedure": self.PROCEDURE_NAME,
                    "duration_s": round(time.monotonic() - started, 3),
                },
            )
            raise
        logger.info(
            "Procedure complete",
            extra={
                "procedure": self.PROCEDURE_NAME,
                "duration_s": round(time.monotonic() - started, 3),
            },
        )
        return result
