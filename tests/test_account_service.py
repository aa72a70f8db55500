"""Testes do serviço de conta, do token e do overlay de perfil."""

import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from _fakes import FailingStateRepository, ManualClock, build_stack, quiet_logger

from shakesync.adapters.api import OfflineBackend
from shakesync.adapters.repositories import InMemoryStateRepository
from shakesync.core.exceptions import (
    APIException,
    AuthenticationException,
    NetworkException,
    NotSupportedException,
    ValidationException,
)
from shakesync.core.services import ProfileOverlayCache, SafeStateAccess
from shakesync.core.services.account_service import extract_created_at, extract_token, extract_user
from shakesync.core.services.overlay_cache import merge_profile, user_key_for


@pytest.mark.parametrize(
    "payload, esperado",
    [
        ({"token": "abc"}, "abc"),
        ({"accessToken": "abc"}, "abc"),
        ({"data": {"token": "abc"}}, "abc"),
        ({"data": {"accessToken": "abc"}}, "abc"),
        ({"token": "", "data": {"token": "xyz"}}, "xyz"),
        ({"token": 123}, None),
        ({}, None),
        (None, None),
    ],
)
def test_extract_token(payload, esperado):
    assert extract_token(payload) == esperado


def test_extract_user_aceita_formatos_aninhados():
    assert extract_user({"user": {"id": 1}}) == {"id": 1}
    assert extract_user({"data": {"user": {"id": 2}}}) == {"id": 2}
    assert extract_user({"data": {"id": 3}}) == {"id": 3}
    assert extract_user({"id": 4, "token": "t", "success": True}) == {"id": 4}


def test_user_key_por_prioridade():
    assert user_key_for({"id": 7, "email": "a@b.c"}) == "7"
    assert user_key_for({"_id": "abc", "email": "a@b.c"}) == "abc"
    assert user_key_for({"email": "a@b.c"}) == "a@b.c"
    assert user_key_for({}) == "anonymous"
    assert user_key_for(None) == "anonymous"


def test_merge_nunca_altera_campos_do_servidor():
    remoto = {"id": "u1", "email": "a@b.c", "totalShakes": 20, "bio": "antiga"}
    overlay = {"id": "hacker", "totalShakes": 999, "bio": "nova", "avatarIndex": 2}

    merged = merge_profile(remoto, overlay)

    assert merged == {"id": "u1", "email": "a@b.c", "totalShakes": 20, "bio": "nova", "avatarIndex": 2}
    assert remoto["bio"] == "antiga"


class TestExtractCreatedAt:
    esperado = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_chave_na_raiz(self):
        assert extract_created_at({"createdAt": "2023-11-14T22:13:20Z"}) == self.esperado

    def test_chave_alternativa_em_objeto_aninhado(self):
        assert extract_created_at({"user": {"registeredAt": 1700000000000}}) == self.esperado
        assert extract_created_at({"data": {"user": {"joinDate": 1700000000}}}) == self.esperado

    def test_varredura_profunda(self):
        payload = {"meta": {"conta": {"accountCreatedDate": "2023-11-14T22:13:20Z"}}}
        assert extract_created_at(payload) == self.esperado

    def test_sem_data_reconhecivel(self):
        assert extract_created_at({"user": {"createdAt": "nunca"}}) is None
        assert extract_created_at(None) is None


class TestAccountService(unittest.IsolatedAsyncioTestCase):

    def setUp(self) -> None:
        self.clock = ManualClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
        self.backend = OfflineBackend(clock=self.clock)
        self.stack = build_stack(self.clock, self.backend)
        self.accounts = self.stack.accounts

    async def test_login_persiste_token(self) -> None:
        user = await self.accounts.login("ana@example.com", "segredo")

        self.assertEqual(user["email"], "ana@example.com")
        self.assertTrue(self.accounts.is_authenticated)
        self.assertTrue(self.stack.repository.get("auth.token").startswith("offline-"))

    async def test_login_sem_token_na_resposta(self) -> None:
        self.backend.login = AsyncMock(return_value={"user": {"id": 1}})

        with self.assertRaises(AuthenticationException):
            await self.accounts.login("ana@example.com", "segredo")
        self.assertFalse(self.accounts.is_authenticated)

    async def test_login_exige_credenciais(self) -> None:
        with self.assertRaises(ValidationException):
            await self.accounts.login("", "segredo")

    async def test_registro_sem_token_cai_para_login(self) -> None:
        self.backend.register = AsyncMock(return_value={"message": "ok"})
        self.backend.login = AsyncMock(return_value={"token": "tok-1", "user": {"id": "u9"}})

        user = await self.accounts.register("Ana", "ana@example.com", "segredo")

        self.backend.login.assert_awaited_once_with("ana@example.com", "segredo")
        self.assertEqual(user, {"id": "u9"})
        self.assertEqual(self.stack.credentials.get_token(), "tok-1")

    async def test_overlay_absorve_endpoint_ausente(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.backend.supports_profile_patch = False

        result = await self.accounts.update_profile({"avatarIndex": 2})
        profile = await self.accounts.get_current_profile()

        self.assertTrue(result.skipped)
        self.assertEqual(result.overlay, {"avatarIndex": 2})
        self.assertEqual(profile["avatarIndex"], 2)
        self.assertEqual(profile["email"], "ana@example.com")

    async def test_overlay_nao_guarda_campos_do_servidor(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.backend.supports_profile_patch = False

        result = await self.accounts.update_profile({"bio": "oi", "email": "outro@example.com"})

        self.assertEqual(result.overlay, {"bio": "oi"})
        self.assertEqual(result.profile["email"], "ana@example.com")

    async def test_outra_falha_persiste_overlay_e_propaga(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        user_key = user_key_for(self.accounts.current_user)

        with patch.object(self.backend, "update_me", AsyncMock(side_effect=APIException("boom", status_code=500))):
            with self.assertRaises(APIException):
                await self.accounts.update_profile({"phone": "5511999999999", "name": "Outro"})

        self.assertEqual(self.stack.overlays.get_overlay(user_key), {"phone": "5511999999999"})

    async def test_atualizacao_aceita_pelo_backend(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")

        result = await self.accounts.update_profile({"bio": "nova", "name": "Ana Maria"})

        self.assertFalse(result.skipped)
        self.assertEqual(result.profile["name"], "Ana Maria")
        self.assertEqual(result.profile["bio"], "nova")

    async def test_overlay_isolado_por_usuario(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.backend.supports_profile_patch = False
        await self.accounts.update_profile({"avatarIndex": 3})

        await self.accounts.login("bia@example.com", "segredo")
        profile = await self.accounts.get_current_profile()

        self.assertNotIn("avatarIndex", profile)

    async def test_logout_limpa_token_e_overlay(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.backend.supports_profile_patch = False
        await self.accounts.update_profile({"bio": "oi"})

        self.accounts.logout()

        self.assertFalse(self.accounts.is_authenticated)
        self.assertIsNone(self.stack.repository.get("auth.token"))
        self.assertIsNone(self.stack.repository.get("profile.overlay"))
        self.assertEqual(self.accounts.current_user, {})

    async def test_exclusao_de_conta_limpa_credenciais(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")

        await self.accounts.delete_account()

        self.assertFalse(self.accounts.is_authenticated)
        self.assertNotIn("ana@example.com", self.backend.users)

    async def test_perfil_deriva_created_at(self) -> None:
        self.backend.get_me = AsyncMock(return_value={"user": {"id": "u1"}, "meta": {"signupDate": 1700000000}})

        profile = await self.accounts.get_current_profile()

        self.assertEqual(profile["createdAt"], "2023-11-14T22:13:20.000Z")

    async def test_reset_de_senha_valida_email(self) -> None:
        with self.assertRaises(ValidationException):
            await self.accounts.send_password_reset("sem-arroba")
        response = await self.accounts.send_password_reset("ana@example.com")
        self.assertTrue(response["ok"])

    async def test_feedback_valida_nota(self) -> None:
        with self.assertRaises(ValidationException):
            await self.accounts.submit_feedback("legal", rating=7)
        await self.accounts.submit_feedback("  legal  ", rating=5)
        self.assertEqual(self.backend.feedbacks, [{"title": "legal", "message": "legal", "rating": 5}])

    async def test_feedback_envia_titulo_e_registra_atividade(self) -> None:
        await self.accounts.submit_feedback("Funciona offline?", rating=4, category="bug", title="Sync")

        self.assertEqual(
            self.backend.feedbacks,
            [{"title": "Sync", "message": "Funciona offline?", "rating": 4, "category": "bug"}],
        )
        atividade = self.backend.activities[-1]
        self.assertEqual(atividade["type"], "feedback")
        self.assertEqual(atividade["metadata"], {"rating": 4})
        self.assertIn("Sync", atividade["description"])

    async def test_falha_de_armazenamento_nao_interrompe_login(self) -> None:
        stack = build_stack(self.clock, self.backend, repository=FailingStateRepository())

        await stack.accounts.login("ana@example.com", "segredo")

        self.assertTrue(stack.accounts.is_authenticated)

    async def test_edicao_sem_rede_reaparece_quando_backend_volta(self) -> None:
        self.backend.reachable = False
        with self.assertRaises(NetworkException):
            await self.accounts.update_profile({"bio": "oi"})

        self.backend.reachable = True
        profile = await self.accounts.get_current_profile()

        self.assertEqual(profile["bio"], "oi")
        self.assertEqual(self.stack.overlays.get_overlay("anonymous"), {})

    async def test_sessao_persistida_identifica_usuario_sem_rede(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        user_key = user_key_for(self.accounts.current_user)
        reaberto = build_stack(self.clock, self.backend, repository=self.stack.repository)

        self.backend.reachable = False
        with self.assertRaises(NetworkException):
            await reaberto.accounts.update_profile({"bio": "oi"})

        self.assertEqual(reaberto.overlays.get_overlay(user_key), {"bio": "oi"})
        self.backend.reachable = True
        self.assertEqual((await reaberto.accounts.get_current_profile())["bio"], "oi")

    async def test_logout_remove_identidade_da_sessao(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.assertIsNotNone(self.stack.repository.get("auth.user_key"))

        self.accounts.logout()

        self.assertIsNone(self.stack.repository.get("auth.user_key"))

    async def test_login_e_registro_geram_atividade(self) -> None:
        await self.accounts.register("Bia", "bia@example.com", "segredo")
        await self.accounts.login("bia@example.com", "segredo")

        self.assertEqual([a["type"] for a in self.backend.activities], ["signup", "login"])

    async def test_edicao_de_avatar_gera_atividade(self) -> None:
        await self.accounts.login("ana@example.com", "segredo")
        self.backend.supports_profile_patch = False

        await self.accounts.update_profile({"avatarIndex": 4})

        atividade = self.backend.activities[-1]
        self.assertEqual(atividade["type"], "profile_update")
        self.assertEqual(atividade["metadata"], {"avatarIndex": 4})

    async def test_falha_ao_registrar_atividade_nao_desfaz_login(self) -> None:
        self.backend.log_activity = AsyncMock(side_effect=NetworkException("sem rede"))

        user = await self.accounts.login("ana@example.com", "segredo")

        self.assertEqual(user["email"], "ana@example.com")
        self.assertTrue(self.accounts.is_authenticated)
        self.backend.log_activity.assert_awaited_once()

    async def test_atividade_sem_endpoint_e_ignorada(self) -> None:
        self.backend.log_activity = AsyncMock(side_effect=NotSupportedException("404", status_code=404))

        await self.accounts.submit_feedback("legal")

        self.assertEqual(len(self.backend.feedbacks), 1)


class TestOverlayAdopt(unittest.TestCase):

    def setUp(self) -> None:
        self.repo = InMemoryStateRepository()
        self.cache = ProfileOverlayCache(SafeStateAccess(self.repo, quiet_logger()))

    def test_move_overlay_pendente_para_chave_real(self) -> None:
        self.cache.set_overlay("anonymous", {"bio": "nova"})
        self.cache.set_overlay("u1", {"bio": "velha", "phone": "123"})

        self.assertEqual(self.cache.adopt("anonymous", "u1"), {"bio": "nova", "phone": "123"})
        self.assertEqual(self.repo.get("profile.overlay"), {"u1": {"bio": "nova", "phone": "123"}})

    def test_sem_pendencia_nada_muda(self) -> None:
        self.cache.set_overlay("u1", {"bio": "oi"})
        self.assertEqual(self.cache.adopt("anonymous", "u1"), {"bio": "oi"})


if __name__ == "__main__":
    unittest.main()
