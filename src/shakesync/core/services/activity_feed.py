"""Feed de atividades recentes e histórico de shakes."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from shakesync.config.constants import DEFAULTS
from shakesync.core.exceptions import NetworkException, NotSupportedException, ValidationException
from shakesync.core.interfaces import BackendGateway
from shakesync.core.models import Activity, CounterSource, EventRecord
from shakesync.core.timestamps import format_display_time, normalize
from shakesync.infrastructure.logging import get_logger

_REWARD_KEYS = ("reward", "prize", "rewardName")


def activity_from_payload(item: Mapping[str, Any], index: int, default_kind: str = "") -> Optional[Activity]:
    """
    Converte um item cru do backend. Sem timestamp reconhecível, devolve None.

    O id cai de ``_id`` para ``id``, depois para o timestamp cru e por fim
    ``idx-<n>``. O instante vem de ``timestamp``, ``createdAt`` ou ``updatedAt``.
    """
    raw_time = next(
        (item.get(k) for k in ("timestamp", "createdAt", "updatedAt") if item.get(k) is not None),
        None,
    )
    moment = normalize(raw_time)
    if moment is None:
        return None

    raw_id = item.get("_id") or item.get("id") or (str(raw_time) if raw_time is not None else None)
    return Activity(
        id=str(raw_id) if raw_id else f"idx-{index}",
        kind=str(item.get("type") or default_kind),
        timestamp=moment,
        title=str(item.get("title") or ""),
        description=str(item.get("description") or ""),
        raw=dict(item),
    )


def shake_from_payload(item: Mapping[str, Any]) -> Optional[EventRecord]:
    """
    Converte um shake cru de ``GET /api/shakes``.

    O instante vem de ``timestamp``, ``createdAt``, ``date`` ou ``time``. A
    recompensa pode estar na raiz (``reward``, ``prize``, ``rewardName``) ou
    em ``metadata.reward``.
    """
    raw_time = next(
        (item.get(k) for k in ("timestamp", "createdAt", "date", "time") if item.get(k) is not None),
        None,
    )
    moment = normalize(raw_time)
    if moment is None:
        return None

    metadata = item.get("metadata") if isinstance(item.get("metadata"), Mapping) else {}
    reward = next((item[k] for k in _REWARD_KEYS if item.get(k) is not None), metadata.get("reward"))
    description = item.get("rewardDescription") or metadata.get("rewardDescription") or item.get("description")

    count = item.get("count")
    return EventRecord(
        id=str(item.get("id") or item.get("_id") or raw_time),
        timestamp=moment,
        count=count if isinstance(count, int) and not isinstance(count, bool) and count > 0 else 1,
        source=CounterSource.BACKEND,
        reward_payload=_reward_payload(reward, description),
    )


def _reward_payload(reward: Any, description: Any) -> Optional[Dict[str, Any]]:
    if isinstance(reward, Mapping):
        return dict(reward)
    if reward is None:
        return None
    return {"name": str(reward), "description": description}


def _check_date_key(value: Optional[str], field: str) -> None:
    if value is None:
        return
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationException("Data deve estar no formato AAAA-MM-DD", details={field: value})


class ActivityFeed:
    """Leitura e registro de atividades; leituras degradam para lista vazia."""

    def __init__(self, backend: BackendGateway, logger: Optional[Any] = None):
        self._backend = backend
        self.logger = logger or get_logger()

    async def recent(self, kind: Optional[str] = "shake", limit: int = DEFAULTS["activities_limit"]) -> List[Activity]:
        """Atividades mais recentes primeiro; itens sem data válida são descartados."""
        try:
            items = await self._backend.list_activities(kind=kind, limit=limit)
        except (NetworkException, NotSupportedException) as e:
            self.logger.aviso("Atividades indisponíveis", erro=type(e).__name__)
            return []

        activities = []
        for index, item in enumerate(items or []):
            if not isinstance(item, Mapping):
                continue
            activity = activity_from_payload(item, index, kind or "")
            if activity is not None:
                activities.append(activity)
        activities.sort(key=lambda a: a.timestamp, reverse=True)
        return activities[:limit] if limit else activities

    async def history(
        self,
        date: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        """Shakes do backend filtrados por dia ou intervalo, mais recentes primeiro."""
        for field, value in (("date", date), ("from", start), ("to", end)):
            _check_date_key(value, field)
        try:
            items = await self._backend.list_events(date=date, start=start, end=end)
        except (NetworkException, NotSupportedException) as e:
            self.logger.aviso("Histórico de shakes indisponível", erro=type(e).__name__)
            return []

        records = []
        for item in items or []:
            if not isinstance(item, Mapping):
                continue
            record = shake_from_payload(item)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[:limit] if limit else records

    async def log_activity(
        self,
        kind: str,
        title: str = "",
        description: str = "",
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload = {"type": kind, "title": title, "description": description, "metadata": dict(metadata or {})}
        try:
            return await self._backend.log_activity(payload)
        except NotSupportedException:
            self.logger.debug("Endpoint de atividades ausente, registro ignorado", tipo=kind)
            return {"ok": False, "skipped": True}

    @staticmethod
    def labels(activities: List[Activity], now: datetime) -> List[str]:
        return [format_display_time(a.timestamp, now) for a in activities]
