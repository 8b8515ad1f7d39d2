"""Query dispatcher — one provider call end to end, normalized to an outcome."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

import httpx

from aicompare.backends.base import ProviderDescriptor
from aicompare.backends.registry import ProviderRegistry, UnknownProvider
from aicompare.models.outcome import ErrorKind, Failure, QueryOutcome, Success

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
RAW_ERROR_MAX_LEN = 200

# Status code -> (kind, user-facing hint). Hints take model and credential name.
STATUS_HINTS: dict[int, tuple[ErrorKind, str]] = {
    401: (ErrorKind.UNAUTHORIZED, "Invalid API key for {model}. Check your {credential}."),
    403: (ErrorKind.BILLING_REQUIRED, "Access denied for {model}. Make sure billing is enabled."),
    429: (
        ErrorKind.RATE_LIMITED,
        "Rate limited by {model}. Wait a moment or check your usage limits.",
    ),
    402: (
        ErrorKind.PAYMENT_REQUIRED,
        "Payment required for {model}. Add a payment method to your account.",
    ),
    404: (
        ErrorKind.MODEL_NOT_FOUND,
        "Model not found. {model} may require special access or the model ID changed.",
    ),
}


def extract_error_message(body: str, fallback: str) -> str:
    """Pull a readable message out of a provider's error body.

    Prefers ``error.message`` then ``message`` from JSON bodies; a short
    non-JSON body is used as-is; anything else yields ``fallback``.
    """
    try:
        parsed = json.loads(body)
    except ValueError:
        return body if body and len(body) < RAW_ERROR_MAX_LEN else fallback

    if isinstance(parsed, dict):
        error = parsed.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if parsed.get("message"):
            return str(parsed["message"])
    return fallback


def classify_status(
    descriptor: ProviderDescriptor, status_code: int, body: str
) -> Failure:
    """Turn a non-success HTTP response into a provider-qualified Failure."""
    generic = f"{descriptor.model_name} error ({status_code})"
    detail = extract_error_message(body, generic)

    if status_code in STATUS_HINTS:
        kind, hint = STATUS_HINTS[status_code]
        message = hint.format(
            model=descriptor.model_name, credential=descriptor.credential_name
        )
    else:
        kind = ErrorKind.PROVIDER_ERROR
        message = detail if detail == generic else f"{generic}: {detail}"
    return Failure(kind=kind, message=message, status_code=status_code)


def _mask(text: str, secret: str) -> str:
    if not secret:
        return text
    return text.replace(secret, "***")


class QueryDispatcher:
    """Sends one prompt to one provider and never lets a failure escape."""

    def __init__(
        self,
        registry: ProviderRegistry,
        credentials: Mapping[str, str],
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.registry = registry
        self.credentials = credentials
        self.client = client
        self.timeout = timeout

    async def dispatch(self, prompt: str, provider_id: str) -> QueryOutcome:
        """Query ``provider_id`` with ``prompt`` and return a normalized outcome."""
        if not prompt or not prompt.strip():
            logger.error("Dispatch to %s rejected: empty prompt", provider_id)
            return Failure(ErrorKind.INVALID_PROMPT, "Missing prompt", status_code=400)

        try:
            descriptor = self.registry.get(provider_id)
        except UnknownProvider:
            logger.error("Dispatch to unknown provider %r", provider_id)
            return Failure(ErrorKind.UNKNOWN_PROVIDER, "Unknown provider", status_code=400)

        api_key = self.credentials.get(descriptor.credential_name) or ""
        if not api_key:
            logger.error(
                "%s: credential %s is not configured", provider_id, descriptor.credential_name
            )
            return Failure(
                ErrorKind.MISSING_CREDENTIAL,
                f"Missing API key: {descriptor.credential_name}. Add it to your environment.",
                status_code=500,
            )

        logger.info("Dispatching to %s (%s)", provider_id, descriptor.model_name)

        try:
            request = descriptor.build_request(prompt, api_key)
            response = await self._post(request.url, request.headers, request.body)
        except httpx.TimeoutException as exc:
            logger.error("%s timed out: %s", provider_id, _mask(repr(exc), api_key))
            return Failure(
                ErrorKind.TRANSPORT_FAILURE,
                f"{descriptor.model_name}: request timed out after {self.timeout:g}s",
                status_code=500,
            )
        except httpx.HTTPError as exc:
            detail = _mask(str(exc) or type(exc).__name__, api_key)
            logger.error("%s transport error: %s", provider_id, detail)
            return Failure(
                ErrorKind.TRANSPORT_FAILURE,
                f"{descriptor.model_name}: {detail}",
                status_code=500,
            )
        except Exception as exc:
            # Bad header values, unparseable URLs and the like
            detail = _mask(str(exc) or type(exc).__name__, api_key)
            logger.error("%s request failed: %s", provider_id, detail)
            return Failure(
                ErrorKind.TRANSPORT_FAILURE,
                f"{descriptor.model_name}: {detail}",
                status_code=500,
            )

        if not response.is_success:
            body = _mask(response.text, api_key)
            logger.error("%s error (%d): %s", provider_id, response.status_code, body)
            return classify_status(descriptor, response.status_code, body)

        try:
            text = descriptor.extract_text(response.json())
        except ValueError as exc:  # MalformedResponse or an undecodable body
            logger.error(
                "%s returned an unexpected body: %s (%s)",
                provider_id,
                exc,
                _mask(response.text[:500], api_key),
            )
            return Failure(
                ErrorKind.MALFORMED_RESPONSE,
                f"{descriptor.model_name}: Unexpected {descriptor.display_name} response format",
                status_code=500,
            )

        logger.info("%s returned %d chars", provider_id, len(text))
        return Success(text=text, model_name=descriptor.model_name)

    async def _post(
        self, url: str, headers: dict[str, str], body: dict
    ) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(url, headers=headers, json=body, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, headers=headers, json=body)
