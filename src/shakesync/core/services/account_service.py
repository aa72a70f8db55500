"""
Serviço de conta: autenticação, perfil e operações auxiliares.

O perfil exibido é sempre o do backend com o overlay local aplicado por
cima. Quando o backend não expõe ``PATCH /users/me``, a atualização fica
só no overlay e o retorno é marcado como ``skipped``.

Login, registro, feedback e edição de perfil geram uma atividade no feed.
Falhas nesse registro nunca desfazem a operação principal.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from shakesync.core.exceptions import (
    APIException,
    AuthenticationException,
    NetworkException,
    NotSupportedException,
    ShakeSyncBaseException,
    ValidationException,
    is_fallback_error,
)
from shakesync.core.interfaces import BackendGateway
from shakesync.core.models import ProfileUpdateResult
from shakesync.core.services.activity_feed import ActivityFeed
from shakesync.core.services.credential_store import CredentialStore
from shakesync.core.services.overlay_cache import (
    ANONYMOUS_KEY,
    ProfileOverlayCache,
    merge_profile,
    user_key_for,
)
from shakesync.core.timestamps import normalize, to_iso
from shakesync.infrastructure.logging import debug_log, get_logger

CREATED_AT_KEYS = (
    "createdAt",
    "created_at",
    "createdOn",
    "created",
    "registeredAt",
    "registered_at",
    "registrationDate",
    "joinedAt",
    "joined_at",
    "joinDate",
    "dateJoined",
    "signupDate",
    "memberSince",
)

_CREATED_AT_HINTS = ("created", "registered", "joined", "signup", "membersince")

_NESTED_USER_KEYS = ("user", "profile", "data", "account")


def extract_token(payload: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Token em ``token``, ``accessToken``, ``data.token`` ou ``data.accessToken``."""
    if not isinstance(payload, Mapping):
        return None
    candidates = [payload.get("token"), payload.get("accessToken")]
    data = payload.get("data")
    if isinstance(data, Mapping):
        candidates.extend([data.get("token"), data.get("accessToken")])
    for token in candidates:
        if isinstance(token, str) and token:
            return token
    return None


def extract_user(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Usuário dentro de respostas no formato ``{user}``, ``{data: {user}}`` ou plano."""
    if not isinstance(payload, Mapping):
        return {}
    if isinstance(payload.get("user"), Mapping):
        return dict(payload["user"])
    data = payload.get("data")
    if isinstance(data, Mapping):
        if isinstance(data.get("user"), Mapping):
            return dict(data["user"])
        return dict(data)
    return {k: v for k, v in payload.items() if k not in ("token", "accessToken", "success", "message")}


def _deep_scan(node: Any, depth: int) -> Optional[datetime]:
    if depth < 0 or not isinstance(node, Mapping):
        return None
    for key, value in node.items():
        if any(hint in str(key).lower() for hint in _CREATED_AT_HINTS):
            found = normalize(value)
            if found:
                return found
    for value in node.values():
        found = _deep_scan(value, depth - 1)
        if found:
            return found
    return None


def extract_created_at(payload: Optional[Mapping[str, Any]]) -> Optional[datetime]:
    """
    Data de criação da conta procurando chaves alternativas.

    Olha a raiz e os objetos ``user``, ``profile``, ``data`` e ``account``
    (e ``data.user``). Sem sucesso, varre o payload até profundidade 3.
    """
    if not isinstance(payload, Mapping):
        return None

    levels = [payload]
    for key in _NESTED_USER_KEYS:
        nested = payload.get(key)
        if isinstance(nested, Mapping):
            levels.append(nested)
    data = payload.get("data")
    if isinstance(data, Mapping) and isinstance(data.get("user"), Mapping):
        levels.append(data["user"])

    for level in levels:
        for key in CREATED_AT_KEYS:
            found = normalize(level.get(key))
            if found:
                return found
    return _deep_scan(payload, 3)


class AccountService:
    """Login, registro, perfil e ações de conta."""

    def __init__(
        self,
        backend: BackendGateway,
        credentials: CredentialStore,
        overlays: ProfileOverlayCache,
        activity_feed: Optional[ActivityFeed] = None,
        logger: Optional[Any] = None,
    ):
        self._backend = backend
        self._credentials = credentials
        self._overlays = overlays
        self._activities = activity_feed
        self.logger = logger or get_logger()
        self._current_user: Dict[str, Any] = {}

    @property
    def current_user(self) -> Dict[str, Any]:
        return dict(self._current_user)

    @property
    def is_authenticated(self) -> bool:
        return self._credentials.has_token

    # ------------------------------------------------------------------
    # Autenticação
    # ------------------------------------------------------------------

    @debug_log(log_args=False, log_result=False)
    async def login(self, email: str, password: str) -> Dict[str, Any]:
        _require(email and password, "Email e senha são obrigatórios")
        payload = await self._backend.login(email.strip(), password)
        token = extract_token(payload)
        if not token:
            raise AuthenticationException("Resposta de login sem token", details={"email": email})
        self._credentials.set_token(token)
        self._remember(extract_user(payload))
        self.logger.sucesso("Login concluído", usuario=user_key_for(self._current_user))
        await self._log_activity("login", "Login", "Login realizado no aplicativo")
        return self.current_user

    @debug_log(log_args=False, log_result=False)
    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        """Cria a conta; sem token na resposta, tenta login com as mesmas credenciais."""
        _require(name and email and password, "Nome, email e senha são obrigatórios")
        payload = await self._backend.register(name.strip(), email.strip(), password)
        token = extract_token(payload)
        if not token:
            self.logger.info("Registro sem token, tentando login", email=email)
            return await self.login(email, password)
        self._credentials.set_token(token)
        self._remember(extract_user(payload))
        self.logger.sucesso("Conta criada", usuario=user_key_for(self._current_user))
        await self._log_activity("signup", "Cadastro", "Conta criada no aplicativo")
        return self.current_user

    def logout(self) -> None:
        self._credentials.clear()
        self._overlays.clear()
        self._current_user = {}
        self.logger.info("Sessão encerrada")

    async def delete_account(self) -> None:
        await self._backend.delete_me()
        self._credentials.clear()
        self._overlays.clear()
        self._current_user = {}
        self.logger.aviso("Conta removida")

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        _require(email and "@" in email, "Email inválido", email=email)
        return await self._backend.send_password_reset(email.strip())

    async def submit_feedback(
        self,
        message: str,
        rating: Optional[int] = None,
        category: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Envia o feedback; sem título, a própria mensagem é usada como título."""
        _require(message and message.strip(), "Mensagem de feedback vazia")
        if rating is not None:
            _require(1 <= rating <= 5, "Nota deve estar entre 1 e 5", rating=rating)
        title = (title or "").strip() or message.strip()
        payload = {"title": title, "message": message.strip(), "rating": rating, "category": category}
        response = await self._backend.submit_feedback({k: v for k, v in payload.items() if v is not None})
        await self._log_activity(
            "feedback",
            "Feedback",
            f"Feedback ({category or 'general'}) enviado: {title}",
            rating=rating,
        )
        return response

    # ------------------------------------------------------------------
    # Perfil
    # ------------------------------------------------------------------

    @debug_log(log_result=False)
    async def get_current_profile(self) -> Dict[str, Any]:
        """Perfil do backend com overlay aplicado e ``createdAt`` derivado."""
        payload = await self._backend.get_me()
        remote = extract_user(payload)
        overlay = self._remember(remote)

        profile = merge_profile(remote, overlay)
        if not profile.get("createdAt"):
            created = extract_created_at(payload)
            if created:
                profile["createdAt"] = to_iso(created)
        return profile

    @debug_log(log_result=False)
    async def update_profile(self, fields: Mapping[str, Any]) -> ProfileUpdateResult:
        _require(isinstance(fields, Mapping) and fields, "Nenhum campo para atualizar")
        user_key = await self._resolve_user_key()

        try:
            response = await self._backend.update_me(dict(fields))
        except NotSupportedException:
            overlay = self._overlays.update_overlay(user_key, fields)
            self.logger.info("Backend sem suporte a atualização de perfil, salvo localmente", campos=sorted(overlay))
            merged = merge_profile(self._current_user, overlay)
            await self._log_profile_update(fields)
            return ProfileUpdateResult(profile=merged, overlay=overlay, skipped=True)
        except ShakeSyncBaseException:
            self._overlays.update_overlay(user_key, fields)
            raise

        remote = extract_user(response) or {**self._current_user, **dict(fields)}
        self._remember(remote)
        overlay = self._overlays.update_overlay(user_key_for(remote), fields)
        await self._log_profile_update(fields)
        return ProfileUpdateResult(profile=merge_profile(remote, overlay), overlay=overlay)

    def _remember(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Guarda o usuário identificado e devolve o overlay dele.

        A chave fica persistida para identificar a sessão sem rede. Um
        overlay gravado como ``anonymous`` passa para a chave real.
        """
        self._current_user = user
        user_key = user_key_for(user)
        if user_key == ANONYMOUS_KEY:
            return self._overlays.get_overlay(user_key)
        self._credentials.set_user_key(user_key)
        return self._overlays.adopt(ANONYMOUS_KEY, user_key)

    async def _resolve_user_key(self) -> str:
        """Chave do usuário atual: memória, sessão persistida ou ``GET /me``."""
        if self._current_user:
            return user_key_for(self._current_user)
        stored = self._credentials.get_user_key()
        if stored:
            return stored
        try:
            self._remember(extract_user(await self._backend.get_me()))
        except ShakeSyncBaseException as e:
            if not is_fallback_error(e):
                raise
            self.logger.debug("Perfil indisponível para identificar o usuário", erro=type(e).__name__)
        return user_key_for(self._current_user)

    # ------------------------------------------------------------------
    # Atividades
    # ------------------------------------------------------------------

    async def _log_profile_update(self, fields: Mapping[str, Any]) -> None:
        metadata = {"avatarIndex": fields["avatarIndex"]} if "avatarIndex" in fields else {}
        await self._log_activity("profile_update", "Perfil", "Informações do perfil atualizadas", **metadata)

    async def _log_activity(self, kind: str, title: str, description: str, **metadata: Any) -> None:
        if self._activities is None:
            return
        try:
            await self._activities.log_activity(
                kind,
                title=title,
                description=description,
                metadata={k: v for k, v in metadata.items() if v is not None},
            )
        except (NetworkException, APIException) as e:
            self.logger.aviso("Não foi possível registrar a atividade", tipo=kind, erro=type(e).__name__)


def _require(condition: Any, message: str, **details: Any) -> None:
    if not condition:
        raise ValidationException(message, details=details)
