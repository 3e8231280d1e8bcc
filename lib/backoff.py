"""
Retry/backoff execution for AWS API calls.

Every remote call made by a collector goes through execute_with_retry().
Errors are classified into four categories:

- throttling:  rate-limit signals (retried)
- retryable:   timeouts, 5xx, service unavailable (retried)
- credential:  expired/invalid credentials (raised immediately)
- terminal:    everything else, including access denied (raised immediately)

Delays are pure exponential: base_delay_ms * 2**attempt, no jitter.
"""
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, Union

from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .constants import DEFAULT_BASE_DELAY_MS, DEFAULT_RETRY_ATTEMPTS

logger = logging.getLogger(__name__)


# =============================================================================
# Error Classification
# =============================================================================

CATEGORY_THROTTLING = "throttling"
CATEGORY_CREDENTIAL = "credential"
CATEGORY_RETRYABLE = "retryable"
CATEGORY_TERMINAL = "terminal"

THROTTLING_ERROR_CODES = {
    'Throttling',
    'ThrottlingException',
    'TooManyRequestsException',
    'RequestLimitExceeded',
    'ProvisionedThroughputExceededException',
    'SlowDown',
    'RequestThrottled',
}

CREDENTIAL_ERROR_CODES = {
    'CredentialsError',
    'InvalidClientTokenId',
    'SignatureDoesNotMatch',
    'UnrecognizedClientException',
    'InvalidAccessKeyId',
    'ExpiredToken',
    'ExpiredTokenException',
}

RETRYABLE_ERROR_CODES = {
    'RequestTimeout',
    'RequestTimeoutException',
    'ServiceUnavailable',
    'InternalServerError',
    'InternalFailure',
    'InternalError',
}

ACCESS_DENIED_ERROR_CODES = {'AccessDenied', 'AccessDeniedException'}

RETRYABLE_HTTP_STATUS = {500, 503, 504}

TRANSIENT_EXCEPTIONS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)


class InventoryCallError(Exception):
    """Raised when an AWS call fails after classification and any retries.

    Carries the caller-supplied label so a failure can be traced to the
    listing operation that produced it.
    """
    def __init__(
        self,
        message: str,
        label: str,
        category: str,
        original_error: Optional[BaseException] = None,
        attempts: int = 1
    ):
        self.label = label
        self.category = category
        self.original_error = original_error
        self.attempts = attempts
        super().__init__(message)


def get_error_code(exc: BaseException) -> str:
    """Return the AWS error code of a ClientError, or the exception class name."""
    if isinstance(exc, ClientError):
        return exc.response.get('Error', {}).get('Code', '')
    return type(exc).__name__


def get_error_message(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        message = exc.response.get('Error', {}).get('Message', '')
        if message:
            return message
    return str(exc)


def _http_status(exc: BaseException) -> Optional[int]:
    if isinstance(exc, ClientError):
        return exc.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
    return None


def classify_error(exc: BaseException) -> str:
    """
    Classify an exception raised by an AWS call.

    Args:
        exc: The exception to classify

    Returns:
        One of CATEGORY_THROTTLING, CATEGORY_CREDENTIAL, CATEGORY_RETRYABLE,
        CATEGORY_TERMINAL
    """
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return CATEGORY_CREDENTIAL
    if isinstance(exc, TRANSIENT_EXCEPTIONS):
        return CATEGORY_RETRYABLE

    code = get_error_code(exc)
    if code in THROTTLING_ERROR_CODES:
        return CATEGORY_THROTTLING
    if code in CREDENTIAL_ERROR_CODES:
        return CATEGORY_CREDENTIAL
    if code in ACCESS_DENIED_ERROR_CODES:
        return CATEGORY_TERMINAL

    message = get_error_message(exc).lower()
    if 'credential' in message or 'expired' in message:
        return CATEGORY_CREDENTIAL

    if code in RETRYABLE_ERROR_CODES or _http_status(exc) in RETRYABLE_HTTP_STATUS:
        return CATEGORY_RETRYABLE

    return CATEGORY_TERMINAL


def is_retryable(exc: BaseException) -> bool:
    """True for throttling and transient errors."""
    return classify_error(exc) in (CATEGORY_THROTTLING, CATEGORY_RETRYABLE)


def describe_error(exc: BaseException, label: str) -> str:
    """Build a human-readable message for a failed call."""
    category = classify_error(exc)
    message = get_error_message(exc)

    if category == CATEGORY_CREDENTIAL:
        return f"AWS credentials error for {label}: {message}. Please check your credentials."
    if category == CATEGORY_THROTTLING:
        return f"AWS rate limit exceeded for {label}: {message}"
    if get_error_code(exc) in ACCESS_DENIED_ERROR_CODES:
        return f"Access denied for {label}: {message}. Check your IAM permissions."
    return f"Error calling {label}: {message}"


# =============================================================================
# Executor
# =============================================================================

def execute_with_retry(
    operation: Callable[[], Any],
    label: str,
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    sleep: Optional[Callable[[float], None]] = None
) -> Any:
    """
    Invoke operation, retrying throttling and transient failures.

    The operation runs once immediately and at most max_attempts more times,
    sleeping base_delay_ms * 2**attempt between tries. Credential and
    terminal errors are raised on the first failure.

    Args:
        operation: Zero-argument callable performing one AWS request
        label: Short description used in log and error messages
            (e.g. "EC2 DescribeInstances")
        max_attempts: Number of retries after the first call
        base_delay_ms: Delay before the first retry, in milliseconds
        sleep: Sleep function (seconds); defaults to time.sleep

    Returns:
        Whatever operation returns

    Raises:
        InventoryCallError: wrapping the last error raised by operation
    """
    retryer = Retrying(
        stop=stop_after_attempt(max_attempts + 1),
        wait=wait_exponential(multiplier=base_delay_ms / 1000.0, exp_base=2),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep or time.sleep,
        reraise=True,
    )

    try:
        return retryer(operation)
    except Exception as e:
        attempts = retryer.statistics.get('attempt_number', 1)
        category = classify_error(e)
        message = describe_error(e, label)
        if is_retryable(e):
            message = f"{message} (gave up after {attempts} attempts)"
        raise InventoryCallError(
            message,
            label=label,
            category=category,
            original_error=e,
            attempts=attempts,
        ) from e


def iter_pages(
    label: str,
    call: Callable[..., Dict[str, Any]],
    token_param: str,
    token_field: Union[str, Callable[[Dict[str, Any]], Optional[str]]],
    **params: Any
) -> Iterator[Dict[str, Any]]:
    """
    Yield response pages until the service stops returning a cursor.

    Each page request runs through execute_with_retry(), so a throttled
    page is retried on its own without restarting the listing.

    Args:
        label: Label for error messages
        call: Bound client method (e.g. ec2.describe_instances)
        token_param: Request parameter carrying the cursor (e.g. "NextToken")
        token_field: Response key holding the next cursor, or a callable
            extracting it from the response
        **params: Fixed request parameters
    """
    token = None
    while True:
        request = dict(params)
        if token:
            request[token_param] = token
        page = execute_with_retry(lambda: call(**request), label)
        yield page

        if callable(token_field):
            token = token_field(page)
        else:
            token = page.get(token_field)
        if not token:
            break
