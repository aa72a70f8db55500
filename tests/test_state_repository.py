"""Testes dos repositórios de estado local."""

import json

import pytest

from _fakes import FailingStateRepository, quiet_logger

from shakesync.adapters.repositories import InMemoryStateRepository, JsonFileStateRepository
from shakesync.core.exceptions import StorageException
from shakesync.core.services import CredentialStore, ProfileOverlayCache, SafeStateAccess


def test_memoria_get_set_delete():
    repo = InMemoryStateRepository({"a": 1})
    repo.set("b", 2)
    repo.delete("a")
    repo.delete("inexistente")
    assert repo.get("a") is None
    assert repo.get("b") == 2
    assert list(repo.keys()) == ["b"]


def test_arquivo_persiste_entre_instancias(tmp_path):
    path = tmp_path / "estado" / "state.json"
    repo = JsonFileStateRepository(path)
    repo.set("auth.token", "tok")
    repo.set("quota.count", 3)

    reaberto = JsonFileStateRepository(path)
    assert reaberto.get("auth.token") == "tok"
    assert reaberto.get("quota.count") == 3
    assert json.loads(path.read_text(encoding="utf-8"))["quota.count"] == 3
    assert not path.with_suffix(".json.tmp").exists()


def test_arquivo_remove_chave(tmp_path):
    repo = JsonFileStateRepository(tmp_path / "state.json")
    repo.set("a", 1)
    repo.delete("a")
    assert JsonFileStateRepository(tmp_path / "state.json").get("a", "padrao") == "padrao"


def test_arquivo_corrompido_e_substituido_na_proxima_escrita(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{nao e json", encoding="utf-8")
    repo = JsonFileStateRepository(path, logger=quiet_logger())

    assert repo.get("a", "padrao") == "padrao"
    repo.set("auth.token", "tok")
    repo.set("quota.count", 2)

    assert json.loads(path.read_text(encoding="utf-8")) == {"auth.token": "tok", "quota.count": 2}


def test_arquivo_ilegivel_vira_storage_exception(tmp_path):
    with pytest.raises(StorageException):
        JsonFileStateRepository(tmp_path, logger=quiet_logger()).get("a")


def test_valor_nao_serializavel(tmp_path):
    repo = JsonFileStateRepository(tmp_path / "state.json")
    with pytest.raises(StorageException):
        repo.set("a", object())
    assert repo.get("a") is None


def test_acesso_seguro_engole_falhas(tmp_path):
    state = SafeStateAccess(JsonFileStateRepository(tmp_path, logger=quiet_logger()), quiet_logger())

    assert state.get("auth.token", "padrao") == "padrao"
    assert state.get_int("quota.count") == 0
    assert state.set("x", 1) is False


class TestCredentialStore:

    def test_token_carregado_uma_vez_do_armazenamento(self):
        repo = InMemoryStateRepository({"auth.token": "salvo"})
        store = CredentialStore(SafeStateAccess(repo, quiet_logger()))
        assert store.get_token() == "salvo"
        repo.set("auth.token", "trocado por fora")
        assert store.get_token() == "salvo"
        assert store.auth_headers() == {"Authorization": "Bearer salvo"}

    def test_limpar_remove_persistido(self):
        repo = InMemoryStateRepository({"auth.token": "salvo"})
        store = CredentialStore(SafeStateAccess(repo, quiet_logger()))
        store.clear()
        assert store.get_token() is None
        assert store.auth_headers() == {}
        assert repo.get("auth.token") is None

    def test_identidade_da_sessao_persistida_e_limpa(self):
        repo = InMemoryStateRepository()
        store = CredentialStore(SafeStateAccess(repo, quiet_logger()))
        store.set_token("tok")
        store.set_user_key("u1")

        reaberto = CredentialStore(SafeStateAccess(repo, quiet_logger()))
        assert reaberto.get_user_key() == "u1"

        reaberto.clear()
        assert repo.get("auth.user_key") is None
        assert reaberto.get_user_key() is None

    def test_falha_de_escrita_mantem_token_em_memoria(self):
        store = CredentialStore(SafeStateAccess(FailingStateRepository(), quiet_logger()))
        store.set_token("tok")
        assert store.has_token


class TestProfileOverlayCache:

    def setup_method(self):
        self.repo = InMemoryStateRepository()
        self.cache = ProfileOverlayCache(SafeStateAccess(self.repo, quiet_logger()))

    def test_filtra_campos_antes_de_gravar(self):
        assert self.cache.set_overlay("u1", {"bio": "oi", "totalShakes": 99, "id": "x"}) == {"bio": "oi"}
        assert self.repo.get("profile.overlay") == {"u1": {"bio": "oi"}}

    def test_resultado_vazio_remove_entrada(self):
        self.cache.set_overlay("u1", {"bio": "oi"})
        self.cache.set_overlay("u1", {"email": "a@b.c"})
        assert self.cache.get_overlay("u1") == {}
        assert self.repo.get("profile.overlay") is None

    def test_update_mescla_com_existente(self):
        self.cache.set_overlay("u1", {"bio": "oi"})
        assert self.cache.update_overlay("u1", {"phone": "123"}) == {"bio": "oi", "phone": "123"}

    def test_usuarios_isolados(self):
        self.cache.set_overlay("u1", {"avatarIndex": 1})
        self.cache.set_overlay("u2", {"avatarIndex": 2})
        self.cache.clear("u1")
        assert self.cache.get_overlay("u1") == {}
        assert self.cache.get_overlay("u2") == {"avatarIndex": 2}

    def test_conteudo_invalido_armazenado_e_ignorado(self):
        self.repo.set("profile.overlay", {"u1": "lixo", "u2": {"bio": "ok", "id": "x"}})
        assert self.cache.get_overlay("u1") == {}
        assert self.cache.get_overlay("u2") == {"bio": "ok"}
