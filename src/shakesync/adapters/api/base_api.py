"""
Classe base para clientes HTTP do backend.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

import requests

from shakesync.config.constants import DEFAULTS, QUOTA_ERROR_CODES
from shakesync.core.exceptions import (
    AccountDisabledException,
    APIException,
    AuthenticationException,
    InvalidAPIResponseException,
    NetworkException,
    NotSupportedException,
    QuotaExceededException,
    RequestTimeoutException,
    wrap_exception,
)
from shakesync.core.services.credential_store import CredentialStore
from shakesync.infrastructure.logging import get_logger

_DISABLED_HINTS = ("disabled", "deactivated", "desativad", "suspended")


class BaseAPIClient:
    """
    Cliente base sobre ``requests.Session``.

    As chamadas bloqueantes rodam em ``asyncio.to_thread`` para que os
    serviços permaneçam cooperativos. O token é lido do CredentialStore
    a cada requisição e as respostas de erro são classificadas na
    taxonomia de exceções do ShakeSync.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        logger: Optional[Any] = None,
        timeout: int = DEFAULTS["timeout_api"],
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.credentials = credentials
        self._logger = logger or get_logger()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @property
    def logger(self) -> Any:
        return self._logger

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        """Versão assíncrona de ``_request_sync``."""
        return await asyncio.to_thread(self._request_sync, method, endpoint, json=json, params=params, auth=auth)

    def _request_sync(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        """
        Executa a requisição HTTP.

        Returns:
            JSON da resposta, ou None para respostas sem corpo.

        Raises:
            RequestTimeoutException: Timeout
            NetworkException: Erro de conexão
            AuthenticationException: 401/403
            NotSupportedException: 404
            QuotaExceededException: 429 ou código de cota
            APIException: Demais falhas HTTP
        """
        url = f"{self.base_url}{endpoint}"
        headers: Dict[str, str] = self.credentials.auth_headers() if auth else {}
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            response = self.session.request(
                method,
                url,
                json=dict(json) if json is not None else None,
                params=clean_params or None,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            self.logger.erro(f"Timeout ao acessar {url}")
            raise RequestTimeoutException(
                f"Timeout ao acessar {url}",
                details={"url": url, "method": method},
                cause=e,
            ) from e
        except requests.exceptions.ConnectionError as e:
            self.logger.erro(f"Erro de conexão ao acessar {url}")
            raise NetworkException(
                f"Erro de conexão ao acessar {url}",
                details={"url": url, "method": method},
                cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            self.logger.erro(f"Erro ao acessar {url}: {e}")
            raise wrap_exception(e, NetworkException, f"Erro de requisição: {e}", url=url, method=method) from e

        if not response.ok:
            self._raise_for_status(response, method, endpoint)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise InvalidAPIResponseException(
                "Resposta não é JSON",
                status_code=response.status_code,
                details={"endpoint": endpoint},
                cause=e,
            ) from e

    def _raise_for_status(self, response: requests.Response, method: str, endpoint: str) -> None:
        status = response.status_code
        body = _safe_body(response)
        code = str(body.get("code") or body.get("errorCode") or "").upper()
        message = str(body.get("message") or body.get("error") or response.reason or f"HTTP {status}")
        details = {"status_code": status, "method": method, "endpoint": endpoint}

        if status == 429 or code in QUOTA_ERROR_CODES:
            raise QuotaExceededException(
                message,
                limit=_as_int(body.get("limit")),
                count=_as_int(body.get("count") if body.get("count") is not None else body.get("dailyCount")),
                details={"endpoint": endpoint},
            )
        if status in (401, 403):
            if status == 403 and (code == "ACCOUNT_DISABLED" or any(h in message.lower() for h in _DISABLED_HINTS)):
                self.credentials.clear()
                self.logger.erro("Conta desativada, token removido")
                raise AccountDisabledException(message, details=details)
            raise AuthenticationException(message, details=details)
        if status == 404:
            raise NotSupportedException(message, status_code=status, details={"endpoint": endpoint})

        self.logger.erro(f"Erro HTTP {status} em {method} {endpoint}: {message}")
        extra = {"endpoint": endpoint}
        if code:
            extra["code"] = code
        raise APIException(message, status_code=status, details=extra)


def _safe_body(response: requests.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
