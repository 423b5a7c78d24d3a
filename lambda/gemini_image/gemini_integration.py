"""
Gemini 이미지 생성 API 통합
- generateContent 요청 페이로드 구성
- urllib 기반 단일 동기 호출 (재시도 없음)
- 응답 후보(candidates)에서 인라인 이미지 추출
"""
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

logger = logging.getLogger()
logger.setLevel(logging.INFO)

DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL_ID = "gemini-2.5-flash-image-preview"


class GeminiAPIError(Exception):
    """Gemini API가 성공 이외의 HTTP 상태를 반환함"""

    def __init__(self, status: int, body: str):
        super().__init__(f"Gemini API HTTP Error: {status}")
        self.status = status
        self.body = body


def build_payload(text: str, image_b64: str, mime_type: str = "image/png",
                  request_image_modality: bool = False) -> Dict[str, Any]:
    """텍스트 파트 1개 + 인라인 이미지 파트 1개로 구성된 요청 본문"""
    payload = {
        "contents": [{
            "parts": [
                {"text": text},
                {"inlineData": {"mimeType": mime_type, "data": image_b64}},
            ]
        }],
    }
    if request_image_modality:
        payload["generationConfig"] = {"responseModalities": ["IMAGE"]}
    return payload


def extract_inline_image(result: Any) -> Optional[str]:
    """
    첫 번째 후보의 parts 중 inlineData를 가진 첫 파트의 base64 데이터를 반환합니다.
    예상과 다른 응답 구조이면 None.
    """
    if not isinstance(result, dict):
        return None
    candidates = result.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return None

    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None

    for part in parts:
        if isinstance(part, dict) and part.get("inlineData") is not None:
            inline_data = part["inlineData"]
            if isinstance(inline_data, dict):
                return inline_data.get("data") or None
            return None
    return None


class GeminiImageClient:
    """
    Gemini generateContent 엔드포인트 호출 클라이언트
    API 키는 쿼리 파라미터로 전달되므로 URL은 로그에 남기지 않는다
    """

    def __init__(self, api_key: str, model_id: str = DEFAULT_MODEL_ID,
                 api_base_url: str = DEFAULT_API_BASE_URL,
                 timeout: Optional[float] = None):
        self.api_key = api_key
        self.model_id = model_id
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        query = urllib.parse.urlencode({"key": self.api_key})
        return f"{self.api_base_url}/models/{self.model_id}:generateContent?{query}"

    def generate_content(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        req_data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            self.endpoint,
            data=req_data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        logger.info(f"Gemini API 호출 중... (model: {self.model_id})")
        try:
            if self.timeout is None:
                response = urllib.request.urlopen(request)
            else:
                response = urllib.request.urlopen(request, timeout=self.timeout)
            with response:
                response_data = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            error_text = e.read().decode("utf-8", errors="replace")
            logger.error(f"Google API Error: {e.code} - {error_text}")
            raise GeminiAPIError(e.code, error_text)

        logger.info("Gemini API 응답 수신")
        return json.loads(response_data)
