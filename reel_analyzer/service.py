"""
Main analyzer service.

Wires configuration, provider and frame store adapters, and pipeline
components into an orchestrator, then serves it over HTTP or runs a
single analysis from the command line.

Usage:
    python -m reel_analyzer.service serve
    python -m reel_analyzer.service analyze https://www.instagram.com/reel/<code>/
"""

import sys
import json
import signal
import asyncio
import argparse
import logging
from typing import Optional, Dict, Any, List

from openai import AsyncOpenAI

from .config import AnalyzerConfig
from .adapters.base import VideoProviderAdapter, FrameStoreAdapter
from .adapters.rapidapi_adapter import InstagramStableScraperAdapter, InstagramScraperApi2Adapter
from .adapters.ytdlp_adapter import YtDlpAdapter
from .adapters.s3_adapter import S3FrameStore
from .errors import DownloadError, ExtractionError
from .taxonomy import ActivityTaxonomy
from .pipeline.fetch import ContentFetcher
from .pipeline.frames import FrameSampler
from .pipeline.metadata import MetadataClassifier
from .pipeline.vision import VisionClassifier
from .pipeline.admission import AdmissionFilter, BoringChecker
from .processor import VideoAnalyzer
from .orchestrator import AnalysisOrchestrator
from .http_server import AnalysisServer
from .logging_setup import setup_logging, log_exception

logger = logging.getLogger("reel_analyzer")


class AnalyzerService:
    """Main analyzer service with adapter-based architecture"""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig.from_env()
        self.providers: List[VideoProviderAdapter] = []
        self.frame_store: Optional[FrameStoreAdapter] = None
        self.orchestrator: Optional[AnalysisOrchestrator] = None
        self.server: Optional[AnalysisServer] = None

    def initialize(self):
        """Initialize adapters and pipeline components based on configuration"""
        try:
            # Setup logging
            setup_logging(self.config.LOG_LEVEL, self.config.LOG_DIR)

            # Validate configuration
            self.config.validate()

            # Initialize adapters
            self._initialize_adapters()

            # Initialize pipeline
            self.orchestrator = AnalysisOrchestrator(self._create_analyzer(), self.config.PIPELINE_TIMEOUT_SEC)

            logger.info("Analyzer service initialized successfully")

        except Exception as e:
            log_exception(logger, f"Failed to initialize analyzer service: {e}")
            raise

    def _initialize_adapters(self):
        """Initialize video provider and frame store adapters"""
        self.providers = [self._create_provider_adapter(name) for name in self.config.provider_order()]

        self.frame_store = self._create_frame_store_adapter()
        if self.frame_store is not None:
            self.frame_store.connect()

        logger.info(
            f"Initialized adapters: providers {[provider.name for provider in self.providers]}, "
            f"{self.config.FRAME_STORE_TYPE} frame store"
        )

    def _create_provider_adapter(self, name: str) -> VideoProviderAdapter:
        """Create a video provider adapter by name"""

        if name == "instagram_stable":
            return InstagramStableScraperAdapter(api_key=self.config.RAPIDAPI_KEY)

        elif name == "instagram_api2":
            return InstagramScraperApi2Adapter(api_key=self.config.RAPIDAPI_KEY)

        elif name == "ytdlp":
            return YtDlpAdapter()

        else:
            raise ValueError(f"Unsupported video provider: {name}")

    def _create_frame_store_adapter(self) -> Optional[FrameStoreAdapter]:
        """Create frame store adapter based on configuration"""

        if self.config.FRAME_STORE_TYPE == "inline":
            return None

        elif self.config.FRAME_STORE_TYPE == "s3":
            config = self.config.FRAME_STORE_CONFIG
            return S3FrameStore(
                bucket=config["bucket"],
                region=config.get("region", "us-east-1"),
                prefix=config.get("prefix", "reel-thumbnails/"),
                public_base_url=config.get("public_base_url")
            )

        else:
            raise ValueError(f"Unsupported frame store type: {self.config.FRAME_STORE_TYPE}")

    def _create_analyzer(self) -> VideoAnalyzer:
        """Build the pipeline components around one shared OpenAI client"""
        taxonomy = ActivityTaxonomy.from_file(self.config.ACTIVITY_TAXONOMY_PATH)
        client = AsyncOpenAI()

        return VideoAnalyzer(
            fetcher=ContentFetcher(
                self.providers,
                provider_timeout=self.config.PROVIDER_TIMEOUT_SEC,
                download_timeout=self.config.DOWNLOAD_TIMEOUT_SEC,
                max_video_bytes=self.config.MAX_VIDEO_BYTES
            ),
            sampler=FrameSampler(
                self.config.SCRATCH_DIR,
                default_count=self.config.FRAME_COUNT,
                max_width=self.config.FRAME_MAX_WIDTH
            ),
            metadata_classifier=MetadataClassifier(client, model=self.config.TEXT_MODEL),
            vision_classifier=VisionClassifier(
                client,
                model=self.config.VISION_MODEL,
                max_concurrent=self.config.VISION_MAX_CONCURRENT
            ),
            admission=AdmissionFilter(taxonomy, BoringChecker(client, model=self.config.TEXT_MODEL)),
            frame_store=self.frame_store
        )

    def serve(self):
        """Serve the analysis API until shutdown"""
        self.server = AnalysisServer(self.orchestrator, host=self.config.HTTP_HOST, port=self.config.HTTP_PORT)
        self.server.serve()

    def analyze(self, post_url: str) -> Dict[str, Any]:
        """Run a single analysis and return the verdict JSON"""
        analysis = asyncio.run(self.orchestrator.run(post_url))
        return analysis.to_dict()

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics"""
        stats = {
            'config': {
                'providers': self.config.provider_order(),
                'frame_store_type': self.config.FRAME_STORE_TYPE,
                'frame_count': self.config.FRAME_COUNT,
                'pipeline_timeout_sec': self.config.PIPELINE_TIMEOUT_SEC
            }
        }

        if self.orchestrator:
            stats['orchestrator'] = self.orchestrator.get_stats()

        return stats


def signal_handler(signum, frame):
    """Handle shutdown signals"""
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Reel analyzer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Serve the analysis HTTP API")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a single post and print the verdict")
    analyze_parser.add_argument("post_url", help="Instagram or TikTok post URL")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    # Setup signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    service = AnalyzerService()

    try:
        service.initialize()
    except Exception as e:
        log_exception(logger, f"Analyzer failed to start: {str(e)}")
        sys.exit(1)

    if args.command == "serve":
        service.serve()
        return

    try:
        result = service.analyze(args.post_url)
    except (DownloadError, ExtractionError) as e:
        result = {'success': False, 'error': type(e).__name__, 'message': str(e)}
        print(json.dumps(result, indent=2))
        sys.exit(2)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
