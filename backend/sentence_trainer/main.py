import logging

from fastapi import FastAPI

from .gateway import GenerationGateway
from .gemini_client import GeminiClient
from .manager import SessionManager
from .routers import practice
from .settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def create_app(manager: SessionManager | None = None) -> FastAPI:
	client: GeminiClient | None = None
	if manager is None:
		client = GeminiClient()
		manager = SessionManager(GenerationGateway(client))

	app = FastAPI(title="IELTS Writing Sentence Trainer API")
	app.state.manager = manager
	app.include_router(practice.router)

	@app.get("/info")
	def info():
		return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key), "model": settings.gemini_model}

	@app.on_event("shutdown")
	async def shutdown_event():
		if client is not None:
			await client.aclose()

	if not settings.gemini_api_key:
		logger.warning("GEMINI_API_KEY is not configured; every generation request will fail")
	return app


app = create_app()
