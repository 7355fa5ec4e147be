# agendaai/timeline.py

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence

from agendaai.agenda.models import AgendaItem

DEFAULT_MEETING_START = time(9, 0)

# 日付をまたいでも時刻計算だけできればよいので、固定の日付を基準にする
_ANCHOR_DATE = date(2000, 1, 1)


@dataclass(frozen=True)
class TimelineSlot:
    """表示用に導出した開始・終了時刻。保存はしない。"""
    item: AgendaItem
    start: str
    end: str

    def to_dict(self) -> dict:
        data = self.item.to_dict()
        data.update({"start": self.start, "end": self.end})
        return data


def parse_start(value) -> time:
    """'09:00' 形式の文字列 (または time) を time に変換する。"""
    if isinstance(value, time):
        return value
    return datetime.strptime(value.strip(), '%H:%M').time()


def _label(moment: datetime) -> str:
    return moment.strftime('%H:%M')


def build_timeline(items: Sequence[AgendaItem], start: time = DEFAULT_MEETING_START) -> List[TimelineSlot]:
    """
    アジェンダ項目の所要時間を積み上げて、各項目の開始・終了時刻を計算する。
    項目が無い場合は空リスト (タイムライン自体を表示しない)。
    """
    current = datetime.combine(_ANCHOR_DATE, start)
    slots = []
    for item in items:
        item_start = current
        current = current + timedelta(minutes=item.duration_minutes)
        slots.append(TimelineSlot(item=item, start=_label(item_start), end=_label(current)))
    return slots


def meeting_end(items: Sequence[AgendaItem], start: time = DEFAULT_MEETING_START) -> Optional[str]:
    slots = build_timeline(items, start)
    return slots[-1].end if slots else None
