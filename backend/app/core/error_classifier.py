"""
Error classification for inference provider failures

Maps any failure (exception, HTTP status, provider error code) to exactly one
ErrorCategory. Classification is a pure function of the failure's message and
carried code, so identical failures always classify identically.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


class ErrorCategory(str, Enum):
    """Closed set of failure categories"""
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    RATE_LIMIT = "RATE_LIMIT_EXCEEDED"
    CONTENT_SAFETY = "CONTENT_SAFETY_VIOLATION"
    NETWORK = "NETWORK_ERROR"
    QUOTA = "QUOTA_EXHAUSTED"
    INVALID_REQUEST = "INVALID_REQUEST"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GENERIC = "GENERIC_ERROR"


class ProviderError(Exception):
    """
    Failure raised by an inference provider adapter

    Args:
        message: Provider message (kept for logs, never shown to end users)
        status_code: HTTP status returned by the provider, if any
        code: Symbolic error code such as ECONNREFUSED, if any
        provider: Name of the provider that failed
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        provider: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.provider = provider

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r}, "
            f"code={self.code!r}, provider={self.provider!r})"
        )


Code = Union[int, str, None]


@dataclass(frozen=True)
class CategoryRule:
    """Keyword/code predicate for one category"""
    category: ErrorCategory
    phrases: Tuple[str, ...]
    codes: Tuple[Union[int, str], ...] = ()

    def matches(self, message: str, code: Code) -> bool:
        if code is not None and code in self.codes:
            return True
        return any(phrase in message for phrase in self.phrases)


BILLING_PHRASES: Tuple[str, ...] = (
    "invalid_payment_instrument",
    "payment instrument",
    "marketplace subscription",
    "billing",
)

NETWORK_CODES: Tuple[str, ...] = ("ENOTFOUND", "ECONNREFUSED", "ECONNRESET", "ETIMEDOUT", "EAI_AGAIN")

# Precedence is table order
CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(ErrorCategory.AUTHENTICATION, ("api key", "unauthorized", "authentication"), (401,)),
    CategoryRule(ErrorCategory.RATE_LIMIT, ("rate limit", "too many requests"), (429,)),
    CategoryRule(ErrorCategory.CONTENT_SAFETY, ("safety", "blocked", "content policy")),
    CategoryRule(
        ErrorCategory.NETWORK,
        ("network", "connection", "timeout", "timed out", "econnreset"),
        NETWORK_CODES
    ),
    CategoryRule(ErrorCategory.QUOTA, ("quota", "limit exceeded"), (403,)),
    CategoryRule(ErrorCategory.INVALID_REQUEST, ("invalid", "bad request"), (400,)),
    CategoryRule(ErrorCategory.SERVICE_UNAVAILABLE, ("unavailable", "service"), (502, 503, 504)),
)


def _failure_message(failure: object) -> str:
    if isinstance(failure, BaseException):
        message = getattr(failure, "message", None)
        if not isinstance(message, str) or not message:
            message = str(failure)
    elif isinstance(failure, str):
        message = failure
    elif isinstance(failure, dict):
        message = str(failure.get("message", ""))
    else:
        message = ""
    return message.lower()


def _failure_code(failure: object) -> Code:
    """Pull a status or symbolic code from a failure, HTTP status first"""
    if isinstance(failure, dict):
        candidates = (failure.get("status_code"), failure.get("status"), failure.get("code"))
    else:
        candidates = (
            getattr(failure, "status_code", None),
            getattr(failure, "status", None),
            getattr(failure, "code", None),
        )

    for candidate in candidates:
        if isinstance(candidate, bool):
            continue
        if isinstance(candidate, int):
            return candidate
        if isinstance(candidate, str) and candidate:
            return int(candidate) if candidate.isdigit() else candidate.upper()

    if isinstance(failure, (asyncio.TimeoutError, TimeoutError)):
        return "ETIMEDOUT"
    if isinstance(failure, ConnectionError):
        return "ECONNRESET"
    return None


def is_billing_failure(failure: object) -> bool:
    message = _failure_message(failure)
    return any(phrase in message for phrase in BILLING_PHRASES)


def classify(failure: object) -> ErrorCategory:
    """
    Map a failure to exactly one ErrorCategory

    Accepts exceptions, plain messages, or dicts with message/status/code keys.
    Total: unrecognised input yields GENERIC, never an exception.
    """
    try:
        message = _failure_message(failure)
        code = _failure_code(failure)
    except Exception:
        return ErrorCategory.GENERIC

    # Billing has no category of its own; it is a quota condition
    if any(phrase in message for phrase in BILLING_PHRASES):
        return ErrorCategory.QUOTA

    for rule in CATEGORY_RULES:
        if rule.matches(message, code):
            return rule.category
    return ErrorCategory.GENERIC


# =====================================================
# POLICY
# =====================================================

@dataclass(frozen=True)
class ErrorPolicy:
    retryable: bool
    fallback_eligible: bool
    user_message: str
    remediation: str


ERROR_POLICIES: Dict[ErrorCategory, ErrorPolicy] = {
    ErrorCategory.AUTHENTICATION: ErrorPolicy(
        retryable=False,
        fallback_eligible=True,
        user_message="Authentication with the AI service failed.",
        remediation="Verify the provider API key is configured correctly."
    ),
    ErrorCategory.RATE_LIMIT: ErrorPolicy(
        retryable=True,
        fallback_eligible=True,
        user_message="The AI service is temporarily busy.",
        remediation="Wait a few moments and try again."
    ),
    ErrorCategory.CONTENT_SAFETY: ErrorPolicy(
        retryable=False,
        fallback_eligible=True,
        user_message="The document content was flagged by the AI service safety filters.",
        remediation="Review the document content and try again."
    ),
    ErrorCategory.NETWORK: ErrorPolicy(
        retryable=True,
        fallback_eligible=True,
        user_message="Unable to connect to the AI service.",
        remediation="Check network connectivity and try again."
    ),
    ErrorCategory.QUOTA: ErrorPolicy(
        retryable=True,
        fallback_eligible=True,
        user_message="AI service usage limit reached.",
        remediation="Try again later or raise the provider quota."
    ),
    ErrorCategory.INVALID_REQUEST: ErrorPolicy(
        retryable=False,
        fallback_eligible=True,
        user_message="The analysis request was rejected as invalid.",
        remediation="This is likely a configuration problem; contact support if it persists."
    ),
    ErrorCategory.SERVICE_UNAVAILABLE: ErrorPolicy(
        retryable=False,
        fallback_eligible=True,
        user_message="The AI service is temporarily unavailable.",
        remediation="Try again in a few minutes."
    ),
    ErrorCategory.GENERIC: ErrorPolicy(
        retryable=False,
        fallback_eligible=True,
        user_message="An unexpected error occurred during analysis.",
        remediation="Try again; contact support if the problem persists."
    ),
}

BILLING_POLICY = ErrorPolicy(
    retryable=False,
    fallback_eligible=True,
    user_message="The AI service account requires a valid payment method.",
    remediation="Add a valid payment method or subscription for the provider account."
)


def is_retryable(failure: object) -> bool:
    if is_billing_failure(failure):
        return BILLING_POLICY.retryable
    return ERROR_POLICIES[classify(failure)].retryable


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    user_message: str
    remediation: str
    technical_detail: str
    retryable: bool
    fallback_eligible: bool
    billing: bool = False


def describe_error(failure: object) -> ClassifiedError:
    """
    Classify a failure and attach the user-facing and technical descriptions

    technical_detail is meant for logs only.
    """
    category = classify(failure)
    billing = is_billing_failure(failure)
    policy = BILLING_POLICY if billing else ERROR_POLICIES[category]

    if isinstance(failure, BaseException):
        message = getattr(failure, "message", None)
        if not isinstance(message, str) or not message:
            message = str(failure) or repr(failure)
        technical = f"{type(failure).__name__}: {message}"
    else:
        technical = str(failure)

    return ClassifiedError(
        category=category,
        user_message=policy.user_message,
        remediation=policy.remediation,
        technical_detail=technical,
        retryable=policy.retryable,
        fallback_eligible=policy.fallback_eligible,
        billing=billing
    )
