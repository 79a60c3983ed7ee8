"""
Pipeline orchestration and execution management.

Enforces the wall-clock budget around VideoAnalyzer and keeps run
statistics for monitoring.
"""

import time
import asyncio
import logging
from typing import Dict, Any
from datetime import datetime

from .errors import DownloadError, ExtractionError
from .models import FinalAnalysis, RESULT_TYPES
from .processor import VideoAnalyzer
from .logging_setup import log_exception

logger = logging.getLogger("reel_analyzer")


class AnalysisOrchestrator:
    """Runs analyses under a timeout and tracks their outcomes"""

    def __init__(self, analyzer: VideoAnalyzer, timeout: float = 60.0):
        self.analyzer = analyzer
        self.timeout = timeout
        self.stats = self._empty_stats()

    async def run(self, post_url: str) -> FinalAnalysis:
        """
        Analyze a post within the pipeline budget.

        Returns:
            FinalAnalysis; an irrelevant verdict with source "error" on timeout

        Raises:
            DownloadError: if no provider yields the video
            ExtractionError: if the video cannot be sampled
        """
        start_time = time.time()
        logger.info(f"Starting analysis of {post_url} (budget {self.timeout:.0f}s)")

        try:
            analysis = await asyncio.wait_for(self.analyzer.analyze(post_url), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Analysis of {post_url} exceeded {self.timeout:.0f}s, returning timeout verdict")
            self.stats['timeouts'] += 1
            self._record(start_time)
            return FinalAnalysis.timed_out()
        except (DownloadError, ExtractionError) as e:
            logger.error(f"Analysis of {post_url} failed: {e}")
            self.stats['failed'] += 1
            raise
        except Exception as e:
            log_exception(logger, f"Unexpected error analyzing {post_url}: {e}")
            self.stats['failed'] += 1
            raise

        self.stats['completed'] += 1
        self.stats['verdicts'][analysis.type] += 1
        self._record(start_time)
        return analysis

    def _record(self, start_time: float) -> None:
        self.stats['total_processing_time'] += time.time() - start_time

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'completed': 0,
            'failed': 0,
            'timeouts': 0,
            'verdicts': {result_type: 0 for result_type in RESULT_TYPES},
            'total_processing_time': 0.0,
            'start_time': datetime.now()
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get orchestrator statistics"""
        uptime = (datetime.now() - self.stats['start_time']).total_seconds()
        finished = self.stats['completed'] + self.stats['timeouts']
        attempted = finished + self.stats['failed']

        return {
            'analyses_completed': self.stats['completed'],
            'analyses_failed': self.stats['failed'],
            'analyses_timed_out': self.stats['timeouts'],
            'verdicts': dict(self.stats['verdicts']),
            'total_processing_time': self.stats['total_processing_time'],
            'average_processing_time': (
                self.stats['total_processing_time'] / finished if finished > 0 else 0
            ),
            'uptime_seconds': uptime,
            'success_rate': self.stats['completed'] / attempted if attempted > 0 else 0
        }

    def reset_stats(self) -> None:
        """Reset orchestrator statistics"""
        self.stats = self._empty_stats()
        logger.info("Orchestrator statistics reset")
