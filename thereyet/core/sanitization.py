"""사용자 입력 정제 및 검증."""

from __future__ import annotations

import re

from thereyet.core.errors import InvalidInputError

_MAX_RAW_LENGTH = 1000

_TAG_PATTERN = re.compile(r"<[^>]*>")
_SCRIPT_PATTERN = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_URL_PATTERN = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_PATTERN = re.compile(r"\bon\w+\s*=", re.IGNORECASE)

_SUSPICIOUS_PATTERNS = (
    re.compile(r"\.\."),
    re.compile(r"[<>\"']"),
    re.compile(r"\b(script|javascript|vbscript|onload|onerror)\b", re.IGNORECASE),
)


def sanitize_text(value: object) -> str:
    """HTML 태그, 스크립트, 이벤트 핸들러를 제거하고 앞뒤 공백을 정리합니다."""
    if not isinstance(value, str):
        return ""

    cleaned = _SCRIPT_PATTERN.sub("", value)
    cleaned = _TAG_PATTERN.sub("", cleaned)
    cleaned = _JS_URL_PATTERN.sub("", cleaned)
    cleaned = _EVENT_HANDLER_PATTERN.sub("", cleaned)
    return cleaned[:_MAX_RAW_LENGTH].strip()


def sanitize_destination(value: object, *, min_length: int = 2, max_length: int = 200) -> str:
    """목적지 검색어를 정제하고 길이/문자 조건을 검증합니다."""
    sanitized = sanitize_text(value)

    if len(sanitized) < min_length:
        raise InvalidInputError(
            f"Destination must be at least {min_length} characters long.",
            field="query",
        )
    if len(sanitized) > max_length:
        raise InvalidInputError("Destination search is too long. Please shorten it.", field="query")

    for pattern in _SUSPICIOUS_PATTERNS:
        if pattern.search(sanitized):
            raise InvalidInputError(
                "Input contains invalid characters. Please use only letters, numbers, and common punctuation.",
                field="query",
            )

    return sanitized
