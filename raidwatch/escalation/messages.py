"""Notification texts sent to the responsible person."""

from __future__ import annotations

from raidwatch.core.models import StreamItem, ThreatAssessment, ThreatLevel

LEVEL_EMOJI: dict[ThreatLevel, str] = {
    ThreatLevel.RED: "🟥",
    ThreatLevel.ORANGE: "🟧",
    ThreatLevel.PURPLE: "🟪",
    ThreatLevel.YELLOW: "🟨",
    ThreatLevel.NONE: "🟩",
}

LEVEL_LABEL: dict[ThreatLevel, str] = {
    ThreatLevel.RED: "ЧЕРВОНИЙ (критична небезпека)",
    ThreatLevel.ORANGE: "ПОМАРАНЧЕВИЙ (небезпечно)",
    ThreatLevel.PURPLE: "ФІОЛЕТОВИЙ (балістична загроза)",
    ThreatLevel.YELLOW: "ЖОВТИЙ (відносно безпечно)",
    ThreatLevel.NONE: "ЗЕЛЕНИЙ (безпечно)",
}

CALL_FAILURE_TEXT = (
    "🚨 ТРИВОГА! Не вдалося додзвонитися до тебе. "
    "Перевір канал сповіщень про ракетну небезпеку!"
)


def level_text(level: ThreatLevel) -> str:
    return f"{LEVEL_EMOJI[level]} {LEVEL_LABEL[level]}"


def _details(item: StreamItem, assessment: ThreatAssessment, city: str) -> str:
    return (
        f"Рівень: {level_text(assessment.level)}\n"
        f"Місто: {city}\n"
        f"Впевненість: {assessment.confidence}%\n\n"
        f"Причина: {assessment.reason}\n\n"
        f"Повідомлення з каналу:\n{item.text or '[пусто]'}"
    )


def format_critical_alert(item: StreamItem, assessment: ThreatAssessment, city: str) -> str:
    """Detail message sent right before the call campaign starts."""
    return f"🚨🚨🚨 КРИТИЧНА ЗАГРОЗА!\n\n{_details(item, assessment, city)}\n\n⚠️ НЕГАЙНО В УКРИТТЯ!"


def format_warning(item: StreamItem, assessment: ThreatAssessment, city: str) -> str:
    """Message-only notice for orange and purple threats."""
    emoji = LEVEL_EMOJI[assessment.level]
    return f"{emoji} УВАГА: потенційна загроза\n\n{_details(item, assessment, city)}\n\nСтеж за оновленнями в каналі!"
