"""Testes do feed de atividades."""

import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from _fakes import ManualClock, quiet_logger

from shakesync.adapters.api import GUEST_EMAIL, OfflineBackend
from shakesync.core.exceptions import APIException, NotSupportedException, ValidationException
from shakesync.core.services import ActivityFeed
from shakesync.core.services.activity_feed import activity_from_payload, shake_from_payload


class TestActivityFromPayload(unittest.TestCase):

    def test_id_cai_para_timestamp_e_indice(self) -> None:
        item = activity_from_payload({"createdAt": 1700000000}, 0)
        self.assertEqual(item.id, "1700000000")

        item = activity_from_payload({"_id": "a1", "timestamp": {"seconds": 1700000000}}, 3)
        self.assertEqual(item.id, "a1")
        self.assertEqual(item.timestamp, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))

    def test_sem_data_valida_e_descartado(self) -> None:
        self.assertIsNone(activity_from_payload({"_id": "a1", "timestamp": "ontem"}, 0))
        self.assertIsNone(activity_from_payload({"_id": "a1"}, 0))

    def test_tipo_padrao(self) -> None:
        item = activity_from_payload({"updatedAt": "2024-01-15T10:00:00Z"}, 0, "shake")
        self.assertEqual(item.kind, "shake")


class TestShakeFromPayload(unittest.TestCase):

    def test_recompensa_na_raiz_ou_em_metadata(self) -> None:
        item = shake_from_payload({"_id": "s1", "timestamp": "2024-01-15T10:00:00Z", "prize": "Cupom"})
        self.assertEqual(item.reward_payload, {"name": "Cupom", "description": None})

        item = shake_from_payload(
            {"id": 7, "date": 1705312800, "metadata": {"reward": "Brinde", "rewardDescription": "Caneca"}}
        )
        self.assertEqual(item.id, "7")
        self.assertEqual(item.reward_payload, {"name": "Brinde", "description": "Caneca"})

    def test_sem_recompensa_e_contagem_padrao(self) -> None:
        item = shake_from_payload({"timestamp": "2024-01-15T10:00:00Z", "count": True})
        self.assertEqual(item.id, "2024-01-15T10:00:00Z")
        self.assertEqual(item.count, 1)
        self.assertIsNone(item.reward_payload)

    def test_sem_data_e_descartado(self) -> None:
        self.assertIsNone(shake_from_payload({"_id": "s1"}))


class TestActivityFeed(unittest.IsolatedAsyncioTestCase):

    def setUp(self) -> None:
        self.clock = ManualClock(datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc))
        self.backend = OfflineBackend(clock=self.clock)
        self.feed = ActivityFeed(self.backend, logger=quiet_logger())

    async def test_ordena_do_mais_recente_para_o_mais_antigo(self) -> None:
        self.backend.list_activities = AsyncMock(
            return_value=[
                {"_id": "velho", "type": "shake", "timestamp": "2024-01-10T00:15:00Z"},
                {"_id": "invalido", "type": "shake", "timestamp": None},
                {"_id": "novo", "type": "shake", "timestamp": 1705311000000},
                "lixo",
                {"_id": "ontem", "type": "shake", "createdAt": {"seconds": 1705266300}},
            ]
        )

        activities = await self.feed.recent()

        self.assertEqual([a.id for a in activities], ["novo", "ontem", "velho"])
        self.assertEqual(
            ActivityFeed.labels(activities, self.clock.now()),
            ["Today, 09:30 AM", "Yesterday, 09:05 PM", "Jan 10, 12:15 AM"],
        )

    async def test_leitura_sem_rede_devolve_lista_vazia(self) -> None:
        self.backend.reachable = False
        self.assertEqual(await self.feed.recent(), [])

    async def test_endpoint_ausente_devolve_lista_vazia(self) -> None:
        self.backend.list_activities = AsyncMock(side_effect=NotSupportedException("404"))
        self.assertEqual(await self.feed.recent(), [])

    async def test_outros_erros_propagam(self) -> None:
        self.backend.list_activities = AsyncMock(side_effect=APIException("boom", status_code=500))
        with self.assertRaises(APIException):
            await self.feed.recent()

    async def test_limite_de_itens(self) -> None:
        for _ in range(4):
            await self.backend.submit_event(1, self.clock.now())
        self.assertEqual(len(await self.feed.recent(limit=2)), 2)

    async def test_registro_sem_endpoint_e_ignorado(self) -> None:
        self.backend.log_activity = AsyncMock(side_effect=NotSupportedException("404"))
        self.assertEqual(await self.feed.log_activity("login"), {"ok": False, "skipped": True})

    async def test_registro_de_atividade(self) -> None:
        response = await self.feed.log_activity("login", title="Entrou")
        self.assertTrue(response["ok"])
        self.assertEqual(self.backend.activities[-1]["title"], "Entrou")

    async def test_historico_filtra_e_ordena(self) -> None:
        self.backend.seed_shakes(GUEST_EMAIL, day_count=2, total_count=3)

        hoje = await self.feed.history(date="2024-01-15")
        todos = await self.feed.history(start="1999-01-01", end="2024-01-15")

        self.assertEqual(len(hoje), 2)
        self.assertEqual(len(todos), 3)
        self.assertEqual(todos[-1].timestamp, datetime(2000, 1, 1, tzinfo=timezone.utc))

    async def test_historico_sem_rede_devolve_lista_vazia(self) -> None:
        self.backend.reachable = False
        self.assertEqual(await self.feed.history(), [])

    async def test_historico_valida_datas(self) -> None:
        self.backend.list_events = AsyncMock()
        with self.assertRaises(ValidationException):
            await self.feed.history(end="ontem")
        self.backend.list_events.assert_not_awaited()

    async def test_historico_limite(self) -> None:
        self.backend.list_events = AsyncMock(
            return_value=[
                {"_id": "a", "timestamp": "2024-01-13T10:00:00Z"},
                {"_id": "b", "timestamp": "2024-01-15T10:00:00Z"},
                {"_id": "c", "timestamp": "2024-01-14T10:00:00Z"},
            ]
        )

        records = await self.feed.history(limit=2)

        self.assertEqual([r.id for r in records], ["b", "c"])


if __name__ == "__main__":
    unittest.main()
