"""
이미지 합성 프록시 설정
- 두 가지 과거 핸들러 동작을 프로파일로 표현
- 환경 변수 / AWS Secrets Manager에서 API 키 로드
- 핸들러 생성 시점에 한 번 주입
"""
import json
import os
import logging
from dataclasses import dataclass, replace
from typing import Mapping, Optional

import boto3

from gemini_image import gemini_integration

logger = logging.getLogger()
logger.setLevel(logging.INFO)

SCROLL_TEMPLATE = (
    "A realistic, high-quality photograph of a Japanese hanging scroll (kakejiku) "
    "with the following artwork, placed in this setting: {prompt}. "
    "The artwork on the scroll is:"
)

SCROLL_IMAGE_ONLY_TEMPLATE = (
    "Generate a photorealistic image of a Japanese hanging scroll (kakejiku) "
    "displaying the provided artwork. The scroll is placed in this setting: {prompt}. "
    "Keep the artwork on the scroll faithful to the provided image."
)

DEFAULT_PROFILE = "canonical"
DEFAULT_REGION = "ap-northeast-2"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ProxyConfig:
    """핸들러 동작을 결정하는 설정값"""
    api_key: Optional[str]
    template_prompt: str = SCROLL_TEMPLATE
    strict_field_validation: bool = True
    forward_upstream_status: bool = True
    request_image_modality: bool = True
    model_id: str = gemini_integration.DEFAULT_MODEL_ID
    api_base_url: str = gemini_integration.DEFAULT_API_BASE_URL
    mime_type: str = "image/png"
    timeout: Optional[float] = None

    def render_prompt(self, prompt) -> str:
        return self.template_prompt.replace("{prompt}", str(prompt))

    @classmethod
    def for_profile(cls, name: str, api_key: Optional[str] = None) -> "ProxyConfig":
        try:
            base = PROFILES[name]
        except KeyError:
            raise ValueError(f"알 수 없는 프로파일: {name} (지원: {', '.join(sorted(PROFILES))})")
        return replace(base, api_key=api_key)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None,
                         secrets_client=None) -> "ProxyConfig":
        """
        환경 변수로부터 설정을 구성합니다.
        GEMINI_API_KEY가 없으면 GEMINI_API_KEY_SECRET_ID로 Secrets Manager를 조회하고,
        둘 다 없으면 api_key=None (요청 시점에 서버 설정 오류로 보고)
        """
        env = os.environ if environ is None else environ

        config = cls.for_profile(env.get("PROXY_PROFILE", DEFAULT_PROFILE),
                                 api_key=resolve_api_key(env, secrets_client))

        overrides = {}
        if env.get("TEMPLATE_PROMPT"):
            overrides["template_prompt"] = env["TEMPLATE_PROMPT"]
        for field_name, var in (
            ("strict_field_validation", "STRICT_FIELD_VALIDATION"),
            ("forward_upstream_status", "FORWARD_UPSTREAM_STATUS"),
            ("request_image_modality", "REQUEST_IMAGE_MODALITY"),
        ):
            if env.get(var):
                overrides[field_name] = _parse_bool(var, env[var])
        if env.get("GEMINI_MODEL_ID"):
            overrides["model_id"] = env["GEMINI_MODEL_ID"]
        if env.get("GEMINI_API_BASE_URL"):
            overrides["api_base_url"] = env["GEMINI_API_BASE_URL"]
        if env.get("UPSTREAM_TIMEOUT"):
            overrides["timeout"] = float(env["UPSTREAM_TIMEOUT"])

        if overrides:
            config = replace(config, **overrides)

        logger.info(
            f"🔧 설정 로드 - strict: {config.strict_field_validation}, "
            f"forward_status: {config.forward_upstream_status}, "
            f"image_modality: {config.request_image_modality}, model: {config.model_id}, "
            f"api_key: {'설정됨' if config.api_key else '없음'}"
        )
        return config


PROFILES = {
    # v1 핸들러: 필드 검증 없음, 업스트림 오류는 항상 500
    "scroll": ProxyConfig(
        api_key=None,
        template_prompt=SCROLL_TEMPLATE,
        strict_field_validation=False,
        forward_upstream_status=False,
        request_image_modality=False,
    ),
    "scroll_image_only": ProxyConfig(
        api_key=None,
        template_prompt=SCROLL_IMAGE_ONLY_TEMPLATE,
        strict_field_validation=True,
        forward_upstream_status=True,
        request_image_modality=True,
    ),
    "canonical": ProxyConfig(api_key=None),
}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} 값이 올바르지 않습니다: {value}")


def resolve_api_key(environ: Mapping[str, str], secrets_client=None) -> Optional[str]:
    api_key = (environ.get("GEMINI_API_KEY") or "").strip()
    if api_key:
        return api_key

    secret_id = environ.get("GEMINI_API_KEY_SECRET_ID")
    if not secret_id:
        return None

    if secrets_client is None:
        secrets_client = boto3.client(
            "secretsmanager", region_name=environ.get("REGION", DEFAULT_REGION)
        )

    logger.info(f"Secrets Manager에서 API 키 조회: {secret_id}")
    secret_string = secrets_client.get_secret_value(SecretId=secret_id).get("SecretString") or ""

    # SecretString은 키 원문이거나 {"GEMINI_API_KEY": "..."} 형식
    try:
        parsed = json.loads(secret_string)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        secret_string = parsed.get("GEMINI_API_KEY") or ""

    return secret_string.strip() or None
