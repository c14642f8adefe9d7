from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from excel_quiz import config


class GeminiError(RuntimeError):
    """Gemini call failed (transport, quota or error payload)."""


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.model = model or config.GEMINI_MODEL
        self.provider = config.GEMINI_PROVIDER
        if self.provider == "vertex":
            region = config.GEMINI_VERTEX_REGION
            project = config.GEMINI_VERTEX_PROJECT or "placeholder-project"
            # Vertex AI Generative REST endpoint (API key via header)
            self.base_url = base_url or (
                f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
            )
            self._auth_in_query = False
        else:
            # Google AI Studio (Generative Language API)
            self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
            self._auth_in_query = True
        self._client = httpx.AsyncClient(timeout=config.GEMINI_TIMEOUT_SECONDS, transport=transport)

    async def generate(self, prompt: str) -> str:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        params: Dict[str, Any] = {}
        headers: Dict[str, str] = {}
        if self._auth_in_query:
            params["key"] = self.api_key
        else:
            headers["x-goog-api-key"] = self.api_key
        try:
            r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
        except httpx.RequestError as net_err:
            raise GeminiError(f"Gemini request failed: {net_err}") from net_err
        try:
            data = r.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise GeminiError(f"Gemini error: {message}")
        if r.is_error:
            raise GeminiError(f"Gemini returned HTTP {r.status_code}")
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise GeminiError(f"Unexpected Gemini response: {r.text[:200]}")

    async def aclose(self) -> None:
        await self._client.aclose()
