"""
Gemini 이미지 생성 API 클라이언트
"""

from .gemini_integration import (
    GeminiAPIError,
    GeminiImageClient,
    build_payload,
    extract_inline_image,
)

__all__ = [
    "GeminiAPIError",
    "GeminiImageClient",
    "build_payload",
    "extract_inline_image",
]
