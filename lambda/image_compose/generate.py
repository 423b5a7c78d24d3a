"""
이미지 합성 프록시 Lambda 함수
- 프롬프트 + base64 이미지를 Gemini 이미지 생성 API로 전달
- 생성된 이미지(base64)를 그대로 반환
- 모든 오류는 진입점에서 {"error": ...} JSON 응답으로 변환
"""
import base64
import json
import logging
import traceback

from gemini_image import GeminiAPIError, GeminiImageClient, build_payload, extract_inline_image

from .config import ProxyConfig
from .errors import (
    BadRequest,
    GenerationFailure,
    MethodNotAllowed,
    ProxyError,
    ServerMisconfiguration,
    UpstreamError,
)
from .responses import error_response, preflight_response, success_response

logger = logging.getLogger()
logger.setLevel(logging.INFO)

UPSTREAM_ERROR_MESSAGE = "Google API에서 오류가 반환되었습니다. API 키 또는 결제 설정을 확인해 주세요."
GENERATION_FAILURE_MESSAGE = "AI가 이미지를 생성하지 못했습니다. 프롬프트를 더 구체적으로 작성해 보세요."
UNKNOWN_ERROR_MESSAGE = "서버에서 알 수 없는 오류가 발생했습니다."


class CompositionProxy:
    """요청 하나를 Gemini 호출 하나로 변환하는 무상태 어댑터"""

    def __init__(self, config: ProxyConfig, client=None):
        self.config = config
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = GeminiImageClient(
                api_key=self.config.api_key,
                model_id=self.config.model_id,
                api_base_url=self.config.api_base_url,
                timeout=self.config.timeout,
            )
        return self._client

    def handle(self, event):
        http_method = _get_http_method(event)
        logger.info(f"🔍 HTTP Method: {http_method}")

        if http_method == "OPTIONS":
            return preflight_response()

        try:
            if http_method != "POST":
                raise MethodNotAllowed("허용되지 않은 요청 방식입니다.")

            body = _parse_body(event)
            prompt, image = self._read_fields(body)

            if not self.config.api_key:
                raise ServerMisconfiguration("API 키가 서버에 설정되어 있지 않습니다.")

            return success_response(self._generate(prompt, image))

        except ProxyError as e:
            logger.warning(f"⚠️ 요청 실패 ({e.status_code}): {e.message}")
            return error_response(e.status_code, e.message)
        except Exception as e:
            logger.error(f"❌ Handler 오류: {str(e)}")
            logger.error(f"❌ Traceback: {traceback.format_exc()}")
            return error_response(500, str(e) or UNKNOWN_ERROR_MESSAGE)

    def _read_fields(self, body):
        if not isinstance(body, dict):
            if self.config.strict_field_validation:
                raise BadRequest("요청 본문은 JSON 객체여야 합니다.")
            raise TypeError(f"요청 본문을 해석할 수 없습니다: {type(body).__name__}")

        prompt = body.get("prompt")
        image = body.get("image")

        if self.config.strict_field_validation:
            if not isinstance(prompt, str) or not prompt.strip():
                raise BadRequest("prompt가 필요합니다.")
            if not isinstance(image, str) or not image.strip():
                raise BadRequest("image가 필요합니다.")

        return prompt, image

    def _generate(self, prompt, image):
        payload = build_payload(
            self.config.render_prompt(prompt),
            image,
            mime_type=self.config.mime_type,
            request_image_modality=self.config.request_image_modality,
        )

        try:
            result = self.client.generate_content(payload)
        except GeminiAPIError as e:
            status = e.status if self.config.forward_upstream_status else 500
            raise UpstreamError(UPSTREAM_ERROR_MESSAGE, upstream_status=status)

        base64_data = extract_inline_image(result)
        if not base64_data:
            logger.error(f"No image data in response: {json.dumps(result, indent=2, ensure_ascii=False)}")
            raise GenerationFailure(GENERATION_FAILURE_MESSAGE)

        logger.info("✅ 이미지 생성 완료")
        return base64_data


def _get_http_method(event):
    method = event.get("httpMethod")
    if not method:
        # API Gateway HTTP API (payload v2)
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method", "")
    return method.upper()


def _parse_body(event):
    body = event.get("body")
    if body is None:
        body = ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return json.loads(body)


# --- Lambda 진입점 ---
_default_proxy = None


def _get_default_proxy():
    global _default_proxy
    if _default_proxy is None:
        _default_proxy = CompositionProxy(ProxyConfig.from_environment())
    return _default_proxy


def handler(event, context):
    """
    API Gateway / Netlify 요청을 처리하여 생성된 이미지를 반환합니다.
    설정은 실행 환경당 한 번 로드되어 재사용됩니다.
    """
    try:
        proxy = _get_default_proxy()
    except Exception as e:
        logger.error(f"❌ 설정 로드 오류: {str(e)}")
        logger.error(f"❌ Traceback: {traceback.format_exc()}")
        return error_response(500, f"서버 설정 오류: {e}")
    return proxy.handle(event)
