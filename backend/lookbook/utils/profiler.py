"""
Lightweight stage timer for one outfit generation run.
Tracks scoring, selection, the completion call, repair and enrichment.
"""
import time
import logging
from typing import Dict
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class Profiler:
    """Per-run profiler; create one per pipeline invocation"""

    def __init__(self):
        self.timings: Dict[str, float] = {}

    @contextmanager
    def measure(self, stage: str):
        """Context manager for measuring a stage; repeated stages accumulate"""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started
            self.timings[stage] = self.timings.get(stage, 0.0) + elapsed

    def as_milliseconds(self) -> Dict[str, float]:
        return {stage: round(elapsed * 1000, 2) for stage, elapsed in self.timings.items()}

    def get_total(self) -> float:
        return sum(self.timings.values())

    def log_summary(self, prefix: str = "") -> None:
        """Log a summary of all timings"""
        if not self.timings:
            return

        total = self.get_total()
        lines = [f"{prefix}Profiling Summary:"]
        for stage, elapsed in sorted(self.timings.items(), key=lambda x: x[1], reverse=True):
            percentage = (elapsed / total * 100) if total > 0 else 0
            lines.append(f"{prefix}  {stage}: {elapsed*1000:.2f}ms ({percentage:.1f}%)")
        lines.append(f"{prefix}  Total: {total*1000:.2f}ms")
        logger.info("\n".join(lines))
