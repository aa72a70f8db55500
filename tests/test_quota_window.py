"""Testes da janela de cota diária e dos contadores locais."""

import unittest
from datetime import datetime, timedelta, timezone

from _fakes import FailingStateRepository, ManualClock, quiet_logger

from shakesync.adapters.repositories import InMemoryStateRepository
from shakesync.core.models import ResetCountdown
from shakesync.core.services import FallbackCounterStore, QuotaWindowTracker, SafeStateAccess, time_until_reset


def _tracker(clock, initial=None, repository=None, limit=5):
    repository = repository or InMemoryStateRepository(initial)
    state = SafeStateAccess(repository, quiet_logger())
    return QuotaWindowTracker(state, clock, limit=limit), repository


class TestQuotaWindowTracker(unittest.TestCase):
    """Virada de dia, limite e persistência."""

    def setUp(self) -> None:
        self.clock = ManualClock(datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc))

    def test_virada_zera_contagem_e_persiste(self) -> None:
        tracker, repo = _tracker(self.clock, {"quota.date_key": "2024-01-01", "quota.count": 3})

        self.assertTrue(tracker.ensure_current())
        self.assertEqual(tracker.count, 0)
        self.assertEqual(repo.get("quota.date_key"), "2024-01-02")
        self.assertEqual(repo.get("quota.count"), 0)

    def test_virada_repetida_no_mesmo_dia_nao_altera_nada(self) -> None:
        tracker, repo = _tracker(self.clock, {"quota.date_key": "2024-01-01", "quota.count": 3})
        tracker.ensure_current()
        tracker.increment()

        self.assertFalse(tracker.ensure_current())
        self.assertFalse(tracker.ensure_current())
        self.assertEqual(tracker.count, 1)
        self.assertEqual(repo.get("quota.count"), 1)

    def test_janela_antiga_lida_como_zero(self) -> None:
        tracker, _ = _tracker(self.clock, {"quota.date_key": "2023-12-31", "quota.count": 5})
        self.assertFalse(tracker.exhausted)
        self.assertTrue(tracker.can_record())
        self.assertEqual(tracker.snapshot().remaining, 5)

    def test_limite_atingido_ate_meia_noite(self) -> None:
        self.clock.set(datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc))
        tracker, _ = _tracker(self.clock, {"quota.date_key": "2024-01-01", "quota.count": 5})
        self.assertTrue(tracker.exhausted)
        self.assertFalse(tracker.can_record())

        self.clock.set(datetime(2024, 1, 2, 0, 0, 1, tzinfo=timezone.utc))
        self.assertFalse(tracker.exhausted)
        self.assertTrue(tracker.can_record())

    def test_contagem_invalida_armazenada_vira_zero(self) -> None:
        tracker, _ = _tracker(self.clock, {"quota.date_key": "2024-01-02", "quota.count": "abc"})
        self.assertEqual(tracker.count, 0)

    def test_set_count_de_outro_dia_e_ignorado(self) -> None:
        tracker, _ = _tracker(self.clock)
        tracker.set_count(4, day="2024-01-01")
        self.assertEqual(tracker.count, 0)
        tracker.set_count(4, day="2024-01-02")
        self.assertEqual(tracker.count, 4)

    def test_falha_de_armazenamento_nao_interrompe(self) -> None:
        tracker, _ = _tracker(self.clock, repository=FailingStateRepository())
        tracker.increment()
        tracker.increment()
        self.assertEqual(tracker.count, 2)


class TestTimeUntilReset(unittest.TestCase):

    def test_horas_e_minutos_ate_meia_noite(self) -> None:
        agora = datetime(2024, 1, 1, 22, 30, tzinfo=timezone.utc)
        self.assertEqual(time_until_reset(agora), ResetCountdown(hours=1, minutes=30))

    def test_exatamente_meia_noite_conta_dia_inteiro(self) -> None:
        agora = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(time_until_reset(agora), ResetCountdown(hours=24, minutes=0))

    def test_ultimo_minuto(self) -> None:
        agora = datetime(2024, 1, 1, 23, 59, 30, tzinfo=timezone.utc)
        self.assertEqual(str(time_until_reset(agora)), "0h 0m")

    def test_respeita_fuso_do_instante(self) -> None:
        brasilia = timezone(timedelta(hours=-3))
        agora = datetime(2024, 1, 1, 21, 0, tzinfo=brasilia)
        self.assertEqual(time_until_reset(agora), ResetCountdown(hours=3, minutes=0))


class TestFallbackCounterStore(unittest.TestCase):

    def setUp(self) -> None:
        self.repo = InMemoryStateRepository()
        self.store = FallbackCounterStore(SafeStateAccess(self.repo, quiet_logger()))

    def test_incremento_soma_diario_e_total(self) -> None:
        self.store.increment("2024-01-01")
        counters = self.store.increment("2024-01-01")
        self.assertEqual((counters.daily_count, counters.total_count), (2, 2))

    def test_diario_de_outro_dia_vale_zero(self) -> None:
        self.store.increment("2024-01-01")
        counters = self.store.load("2024-01-02")
        self.assertEqual((counters.daily_count, counters.total_count), (0, 1))

    def test_overwrite_substitui_valores_locais(self) -> None:
        self.store.increment("2024-01-01")
        counters = self.store.overwrite("2024-01-01", daily=4, total=30)
        self.assertEqual((counters.daily_count, counters.total_count), (4, 30))

    def test_valores_corrompidos_lidos_como_zero(self) -> None:
        self.repo.set("fallback.daily_count", "x")
        self.repo.set("fallback.daily_date", "2024-01-01")
        self.repo.set("fallback.total_count", -7)
        counters = self.store.load("2024-01-01")
        self.assertEqual((counters.daily_count, counters.total_count), (0, 0))


if __name__ == "__main__":
    unittest.main()
