from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .errors import GenerationError
from .settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project
			# Vertex AI Generative REST endpoint (API key via header); unusable without a project
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
				if project
				else None
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	@property
	def configured(self) -> bool:
		return bool(self.api_key)

	async def generate_json(self, prompt: str, response_schema: Dict[str, Any], *, operation: str) -> str:
		"""Request structured output and return the raw JSON text of the first candidate."""
		payload: Dict[str, Any] = {
			"contents": [{"parts": [{"text": prompt}]}],
			"generationConfig": {
				"responseMimeType": "application/json",
				"responseSchema": response_schema,
			},
		}
		return await self._post_payload(payload, operation=operation)

	async def _post_payload(self, payload: Dict[str, Any], *, operation: str) -> str:
		if not self.api_key:
			raise GenerationError(operation, "GEMINI_API_KEY is not configured")
		if self.base_url is None:
			raise GenerationError(operation, "GEMINI_VERTEX_PROJECT is not configured for the vertex provider")
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		logger.debug("gemini request", extra={"operation": operation, "model": self.model})
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.warning("gemini %s request rejected with HTTP %s", operation, http_err.response.status_code)
			raise GenerationError(operation, f"HTTP {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			logger.warning("gemini %s request failed: %s", operation, net_err)
			raise GenerationError(operation, f"transport error: {net_err}") from net_err
		try:
			data = r.json()
			text = data["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError) as exc:
			logger.warning("gemini %s returned an unexpected envelope", operation)
			raise GenerationError(operation, "unexpected Gemini response envelope") from exc
		if not isinstance(text, str):
			raise GenerationError(operation, "candidate text is not a string")
		return text

	async def aclose(self) -> None:
		await self._client.aclose()
