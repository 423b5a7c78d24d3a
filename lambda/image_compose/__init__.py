"""
이미지 합성 프록시 - 족자(kakejiku) 합성 이미지 생성 Lambda
"""

from .config import PROFILES, ProxyConfig
from .generate import CompositionProxy, handler

__all__ = ["PROFILES", "ProxyConfig", "CompositionProxy", "handler"]
