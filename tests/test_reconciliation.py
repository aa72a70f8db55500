"""Testes da reconciliação entre contadores locais e o backend."""

import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from _fakes import ManualClock, build_stack

from shakesync.adapters.api import GUEST_EMAIL, OfflineBackend
from shakesync.core.exceptions import AuthenticationException, NotSupportedException, QuotaExceededException
from shakesync.core.models import CounterSource
from shakesync.core.services import SyncState

HOJE = "2024-01-15"


class TestReconciliationEngine(unittest.IsolatedAsyncioTestCase):

    def setUp(self) -> None:
        self.clock = ManualClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
        self.backend = OfflineBackend(clock=self.clock)

    async def test_backend_vence_e_nunca_soma(self) -> None:
        self.backend.seed_shakes(GUEST_EMAIL, day_count=3, total_count=20)
        stack = build_stack(
            self.clock,
            self.backend,
            initial={"fallback.daily_count": 2, "fallback.daily_date": HOJE, "fallback.total_count": 15},
        )

        snapshot = await stack.reconciler.refresh()

        self.assertEqual((snapshot.daily, snapshot.total), (3, 20))
        self.assertTrue(snapshot.synced)
        self.assertEqual(snapshot.remaining, 2)
        counters = stack.fallback.load(HOJE)
        self.assertEqual((counters.daily_count, counters.total_count), (3, 20))
        self.assertEqual(stack.quota.count, 3)

    async def test_falha_de_rede_mostra_numeros_locais(self) -> None:
        stack = build_stack(
            self.clock,
            self.backend,
            initial={"fallback.daily_count": 2, "fallback.daily_date": HOJE, "fallback.total_count": 15},
        )
        self.backend.reachable = False

        snapshot = await stack.reconciler.refresh()

        self.assertIs(snapshot.source, CounterSource.LOCAL)
        self.assertEqual((snapshot.daily, snapshot.total), (2, 15))
        self.assertIs(stack.reconciler.state, SyncState.LOCAL_ONLY)

    async def test_transicoes_de_estado(self) -> None:
        stack = build_stack(self.clock, self.backend)
        self.assertIs(stack.reconciler.state, SyncState.UNKNOWN)

        await stack.reconciler.refresh()
        self.assertIs(stack.reconciler.state, SyncState.SYNCED)

        with patch.object(self.backend, "count_events", AsyncMock(side_effect=NotSupportedException("404"))):
            await stack.reconciler.refresh()
        self.assertIs(stack.reconciler.state, SyncState.LOCAL_ONLY)

        await stack.reconciler.refresh()
        self.assertIs(stack.reconciler.state, SyncState.SYNCED)

    async def test_erro_de_autenticacao_propaga(self) -> None:
        stack = build_stack(self.clock, self.backend)

        with patch.object(self.backend, "count_events", AsyncMock(side_effect=AuthenticationException("401"))):
            with self.assertRaises(AuthenticationException):
                await stack.reconciler.refresh()

        self.assertIs(stack.reconciler.state, SyncState.LOCAL_ONLY)

    async def test_leitura_limitada_mostra_numeros_locais(self) -> None:
        stack = build_stack(
            self.clock,
            self.backend,
            initial={"quota.date_key": HOJE, "quota.count": 2, "fallback.total_count": 8},
        )
        limitado = AsyncMock(side_effect=QuotaExceededException("Too Many Requests"))

        with patch.object(self.backend, "count_events", limitado):
            snapshot = await stack.reconciler.refresh()

        self.assertIs(snapshot.source, CounterSource.LOCAL)
        self.assertEqual((snapshot.daily, snapshot.total), (2, 8))
        self.assertIs(stack.reconciler.state, SyncState.LOCAL_ONLY)

    async def test_refresh_vira_a_janela_antes_de_ler(self) -> None:
        stack = build_stack(self.clock, self.backend, initial={"quota.date_key": "2024-01-14", "quota.count": 5})
        self.backend.reachable = False

        snapshot = await stack.reconciler.refresh()

        self.assertEqual(snapshot.date_key, HOJE)
        self.assertEqual(snapshot.daily, 0)

    def test_snapshot_local_usa_o_maior_contador_do_dia(self) -> None:
        stack = build_stack(
            self.clock,
            self.backend,
            initial={
                "quota.date_key": HOJE,
                "quota.count": 4,
                "fallback.daily_count": 1,
                "fallback.daily_date": HOJE,
                "fallback.total_count": 9,
            },
        )
        snapshot = stack.reconciler.local_snapshot()
        self.assertEqual((snapshot.daily, snapshot.total), (4, 9))
        self.assertFalse(snapshot.synced)


if __name__ == "__main__":
    unittest.main()
