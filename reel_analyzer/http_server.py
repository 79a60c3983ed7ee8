import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from .errors import DownloadError, ExtractionError
from .orchestrator import AnalysisOrchestrator
from .logging_setup import log_exception

logger = logging.getLogger("reel_analyzer")


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_url: Optional[str] = Field(default=None, alias="postUrl")


class AnalysisServer:
    def __init__(self, orchestrator: AnalysisOrchestrator, host: str = "0.0.0.0", port: int = 8000):
        self.orchestrator = orchestrator
        self.host = host
        self.port = port
        self.app = FastAPI(title="Reel Analyzer API")
        self.setup_routes()

    def setup_routes(self):
        """Setup API routes"""

        @self.app.post("/api/analyze-video")
        async def analyze_video(request: AnalyzeRequest):
            """Classify the video behind a social post URL"""
            post_url = (request.post_url or "").strip()
            if not post_url:
                return JSONResponse(
                    status_code=400,
                    content={"success": False, "error": "ValidationError", "message": "postUrl is required"}
                )

            try:
                analysis = await self.orchestrator.run(post_url)
            except (DownloadError, ExtractionError) as e:
                logger.warning(f"Cannot analyze {post_url}: {e}")
                return JSONResponse(
                    status_code=422,
                    content={"success": False, "error": type(e).__name__, "message": str(e)}
                )
            except Exception as e:
                log_exception(logger, f"Error analyzing {post_url}: {e}")
                return JSONResponse(
                    status_code=500,
                    content={"success": False, "error": "InternalError", "message": "Analysis failed"}
                )

            return analysis.to_dict()

        @self.app.get("/healthz")
        async def health_check():
            """Health check endpoint"""
            return {"ok": True, "status": "healthy"}

        @self.app.get("/stats")
        async def get_stats():
            """Get analyzer statistics"""
            return self.orchestrator.get_stats()

    def serve(self):
        """Run the HTTP server, blocking until shutdown"""
        logger.info(f"Reel analyzer API listening on {self.host}:{self.port}")
        uvicorn.run(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning",  # Reduce uvicorn logging
            access_log=False
        )
