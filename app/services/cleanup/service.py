import asyncio
import logging
from typing import Any

from app.artifacts.lifecycle import LifecycleController

logger = logging.getLogger(__name__)


class CleanupService:
    def __init__(self, controller: LifecycleController) -> None:
        self.controller = controller

    def expire_artifacts(self) -> dict[str, Any]:
        """Drop every artifact past its TTL, paid or not."""
        expired = self.controller.sweep()
        return {"expired": expired, "remaining": len(self.controller.store)}

    async def run_periodic(self, interval_seconds: float) -> None:
        """Sweep loop for the app lifespan; cancelled on shutdown."""
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.expire_artifacts()
            except Exception:
                logger.exception("artifact_sweep_failed")
