# agendaai/rendering.py

from datetime import time

from agendaai.agenda.models import AnalysisResult
from agendaai.timeline import DEFAULT_MEETING_START, build_timeline


def format_agenda_text(analysis: AnalysisResult, start: time = DEFAULT_MEETING_START) -> str:
    """AnalysisResult をプレーンテキストのアジェンダに整形する"""

    # Stakeholderをリスト形式のテキストに変換
    stakeholders_text = "\n".join(
        [f"- {s.name} ({s.role}): {s.relevance}" for s in analysis.stakeholders]
    ) if analysis.stakeholders else "None"

    # タイムラインを時刻付きのテキストに変換
    slots = build_timeline(analysis.agenda, start)
    timeline_lines = []
    for slot in slots:
        line = f"{slot.start} - {slot.end}  {slot.item.topic} ({slot.item.duration_minutes} min)"
        if slot.item.speaker:
            line += f" [{slot.item.speaker}]"
        timeline_lines.append(line)
        if slot.item.description:
            timeline_lines.append(f"    {slot.item.description}")
    if slots:
        timeline_lines.append(f"{slots[-1].end}  End of Meeting")
    timeline_text = "\n".join(timeline_lines) if timeline_lines else "None"

    text = f"""
*Proposed Meeting*: {analysis.title}
*Date*: {analysis.date if analysis.date else 'Not specified'}
*Summary*: {analysis.summary}
---
*Key Stakeholders*
{stakeholders_text}
---
*Timeline Agenda*
{timeline_text}
    """
    return text.strip()
