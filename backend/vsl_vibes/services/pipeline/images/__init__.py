"""
Image Resolver Stage

Stock photo lookup with a per-provider circuit breaker, plus single-slide
keyword inference.
"""

from .breaker import BreakerAction, BreakerState, CircuitBreaker, policy_for
from .keyword import ImageKeywordGenerator, fallback_keyword
from .resolver import ImageResolver, ResolveResult, attach_image, is_image_target, normalize_keyword

__all__ = [
    "BreakerAction",
    "BreakerState",
    "CircuitBreaker",
    "policy_for",
    "ImageKeywordGenerator",
    "fallback_keyword",
    "ImageResolver",
    "ResolveResult",
    "attach_image",
    "is_image_target",
    "normalize_keyword",
]
