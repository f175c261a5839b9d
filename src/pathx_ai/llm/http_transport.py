#!filepath: src/pathx_ai/llm/http_transport.py
from __future__ import annotations

import json
import operator
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pathx_ai.llm.errors import (
    ErrorKind,
    LLMErrorDetails,
    ParseError,
    TransportError,
    WireError,
    kind_from_status,
    parse_retry_after_seconds,
    provider_prefix,
)


@dataclass(frozen=True, slots=True)
class HTTPTransport:
    """Shared HTTP transport with explicit timeouts.

    Only connection establishment is retried, a request that reached the
    provider is never sent twice.

    Args:
        connect_timeout_seconds: Socket connect timeout.
        read_timeout_seconds: Timeout between bytes received.
        total_timeout_seconds: Wall clock limit for reading the body.
    """

    connect_timeout_seconds: int = 10
    read_timeout_seconds: int = 60
    total_timeout_seconds: int = 90

    def session(self) -> requests.Session:
        s = requests.Session()
        retry = Retry(
            total=1,
            connect=1,
            read=0,
            status=0,
            other=0,
            backoff_factor=0.3,
            allowed_methods=("POST",),
            raise_on_status=False,
        )
        s.mount("https://", HTTPAdapter(max_retries=retry))
        s.mount("http://", HTTPAdapter(max_retries=retry))
        return s

    def post_json(
        self,
        url: str,
        headers: Mapping[str, str],
        payload: Dict[str, Any],
        provider: str,
        model: str,
        params: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a json body and return the decoded json object.

        Args:
            url: Endpoint.
            headers: Request headers.
            payload: Json body.
            provider: Provider value, used for error prefixes.
            model: Model id, recorded on errors.
            params: Optional query string.

        Returns:
            Decoded response object.

        Raises:
            TransportError: No HTTP response was obtained.
            WireError: Non success status.
            ParseError: Success status with a body that is not a json object.
        """
        total_timeout = int(max(1, int(self.total_timeout_seconds)))
        connect_timeout = int(max(1, int(self.connect_timeout_seconds)))
        read_timeout = int(max(1, int(self.read_timeout_seconds)))
        prefix = provider_prefix(provider)

        s = self.session()
        t0 = time.perf_counter()

        try:
            r = s.post(
                url,
                headers=dict(headers),
                params=dict(params) if params else None,
                json=payload,
                timeout=(connect_timeout, read_timeout),
                stream=True,
            )
        except requests.Timeout as ex:
            raise TransportError(
                LLMErrorDetails(
                    kind=ErrorKind.TIMEOUT,
                    provider=provider,
                    model=model,
                    message=f"{prefix}Request timed out: {_redact(str(ex), params)}",
                )
            ) from ex
        except requests.RequestException as ex:
            raise TransportError(
                LLMErrorDetails(
                    kind=ErrorKind.NETWORK,
                    provider=provider,
                    model=model,
                    message=f"{prefix}Network error: {_redact(str(ex), params)}",
                )
            ) from ex

        try:
            body = self._read_with_total_timeout(
                r=r,
                started_at=t0,
                total_timeout_seconds=total_timeout,
                provider=provider,
                model=model,
            )
            return self._handle_response_text(
                r=r, body_text=body, provider=provider, model=model
            )
        finally:
            r.close()
            s.close()

    def _read_with_total_timeout(
        self,
        r: Response,
        started_at: float,
        total_timeout_seconds: int,
        provider: str,
        model: str,
    ) -> str:
        max_bytes = 4_000_000
        chunks: list[bytes] = []
        size = 0

        try:
            for chunk in r.iter_content(chunk_size=65536):
                if chunk:
                    chunks.append(chunk)
                    size += len(chunk)

                elapsed = operator.sub(time.perf_counter(), started_at)
                if float(elapsed) > float(total_timeout_seconds):
                    raise TransportError(
                        LLMErrorDetails(
                            kind=ErrorKind.TIMEOUT,
                            provider=provider,
                            model=model,
                            status_code=int(r.status_code),
                            message=(
                                f"{provider_prefix(provider)}Total timeout exceeded: "
                                f"{total_timeout_seconds}s"
                            ),
                        )
                    )

                if size > max_bytes:
                    raise ParseError(
                        LLMErrorDetails(
                            kind=ErrorKind.PARSE,
                            provider=provider,
                            model=model,
                            status_code=int(r.status_code),
                            message=(
                                f"{provider_prefix(provider)}Response too large, "
                                f"bytes={size}"
                            ),
                        )
                    )
        except requests.RequestException as ex:
            raise TransportError(
                LLMErrorDetails(
                    kind=ErrorKind.NETWORK,
                    provider=provider,
                    model=model,
                    status_code=int(r.status_code),
                    message=f"{provider_prefix(provider)}Connection dropped: {ex}",
                )
            ) from ex

        return b"".join(chunks).decode("utf8", errors="replace")

    def _handle_response_text(
        self, r: Response, body_text: str, provider: str, model: str
    ) -> Dict[str, Any]:
        status = int(r.status_code)
        prefix = provider_prefix(provider)

        if 200 <= status < 300:
            try:
                parsed = json.loads(body_text)
            except json.JSONDecodeError as ex:
                raise ParseError(
                    LLMErrorDetails(
                        kind=ErrorKind.PARSE,
                        provider=provider,
                        model=model,
                        status_code=status,
                        message=f"{prefix}Invalid JSON in response: {ex}",
                        raw=str(body_text or "")[:2000],
                    )
                ) from ex
            if not isinstance(parsed, dict):
                raise ParseError(
                    LLMErrorDetails(
                        kind=ErrorKind.PARSE,
                        provider=provider,
                        model=model,
                        status_code=status,
                        message=f"{prefix}Response JSON is not an object",
                        raw=str(body_text or "")[:2000],
                    )
                )
            return dict(parsed)

        retry_after = parse_retry_after_seconds(r.headers)
        raw_text = str(body_text or "")[:2000]

        raise WireError(
            LLMErrorDetails(
                kind=kind_from_status(status),
                provider=provider,
                model=model,
                status_code=status,
                retry_after_seconds=retry_after if retry_after else None,
                message=prefix + error_envelope_message(raw_text, status),
                raw=raw_text,
            )
        )


def error_envelope_message(body: str, status: int) -> str:
    """Extract error.message from a provider error body.

    Gemini, OpenRouter and Groq all wrap errors as {"error": {"message": ...}}.
    Anything else reads as "HTTP <status>".
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return f"HTTP {status}"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            m = str(err.get("message") or "").strip()
            if m:
                return m
        if isinstance(err, str) and err.strip():
            return err.strip()
    return f"HTTP {status}"


def _redact(text: str, params: Optional[Mapping[str, str]]) -> str:
    out = text
    for v in (params or {}).values():
        if v:
            out = out.replace(str(v), "***")
    return out
