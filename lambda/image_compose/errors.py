"""
이미지 합성 프록시 오류 분류
- 각 오류는 호출자에게 돌려줄 HTTP 상태 코드를 가진다
- 진입점(handler)에서만 응답으로 변환된다
"""
from typing import Optional


class ProxyError(Exception):
    """호출자에게 구조화된 JSON 오류로 전달되는 예외"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MethodNotAllowed(ProxyError):
    status_code = 405


class BadRequest(ProxyError):
    status_code = 400


class ServerMisconfiguration(ProxyError):
    status_code = 500


class UpstreamError(ProxyError):
    """Gemini API가 2xx 이외의 상태를 반환함"""

    def __init__(self, message: str, upstream_status: int):
        super().__init__(message, status_code=upstream_status)
        self.upstream_status = upstream_status


class GenerationFailure(ProxyError):
    status_code = 500
