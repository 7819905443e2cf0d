import pytest

from raidwatch.classify import RuleClassifier, normalize, strip_footer
from raidwatch.core.models import StreamItem, ThreatAssessment, ThreatLevel

FOOTER = "\n\n[Дніпро Оперативний](https://t.me/dnipro_op) | [Новини](https://t.me/news)"


@pytest.fixture
def rules() -> RuleClassifier:
    return RuleClassifier()


@pytest.mark.parametrize(
    ("text", "level"),
    [
        ("Дніпро червоний! Ракета над містом", ThreatLevel.RED),
        ("Дніпро: критична ситуація", ThreatLevel.RED),
        ("Днепр красный, всем в укрытие", ThreatLevel.RED),
        ("Дніпро помаранчевий", ThreatLevel.ORANGE),
        ("Днепр оранжевый, ракета идёт на город", ThreatLevel.ORANGE),
        ("ББ в напрямку Дніпро", ThreatLevel.PURPLE),
        ("Дніпро фіолетовий", ThreatLevel.PURPLE),
        ("Відбій тривоги у Дніпрі", ThreatLevel.NONE),
        ("Тривога у Дніпрі", ThreatLevel.YELLOW),
    ],
)
def test_keyword_families(rules: RuleClassifier, text: str, level: ThreatLevel) -> None:
    verdict = rules.assess_text(text)
    assert verdict.level is level
    assert verdict.city_mentioned is True


def test_first_family_wins(rules: RuleClassifier) -> None:
    # red beats orange even though both keywords are present
    verdict = rules.assess_text("Дніпро помаранчевий, незабаром червоний")
    assert verdict.level is ThreatLevel.RED


def test_city_not_mentioned(rules: RuleClassifier) -> None:
    verdict = rules.assess_text("Червоний рівень загрози, ракета над містом")
    assert verdict.level is ThreatLevel.NONE
    assert verdict.city_mentioned is False
    assert verdict.need_call is False


def test_other_city_suppresses_danger_keywords(rules: RuleClassifier) -> None:
    verdict = rules.assess_text("Харків червоний! Ракета над містом")
    assert verdict.level is ThreatLevel.NONE
    assert verdict.city_mentioned is False
    assert verdict.need_call is False
    assert verdict.need_message is False


def test_similar_city_name_is_not_a_match(rules: RuleClassifier) -> None:
    verdict = rules.assess_text("Дніпрорудне червоний")
    assert verdict.level is ThreatLevel.NONE
    assert verdict.city_mentioned is False


def test_monitored_city_alongside_other_city(rules: RuleClassifier) -> None:
    verdict = rules.assess_text("Запоріжжя та Дніпро - помаранчевий")
    assert verdict.level is ThreatLevel.ORANGE
    assert verdict.city_mentioned is True


def test_custom_other_cities() -> None:
    rules = RuleClassifier(city_variants=["львів"], other_cities=["київ"])
    assert rules.assess_text("Львів червоний").level is ThreatLevel.RED
    assert rules.assess_text("Київ червоний").city_mentioned is False


def test_footer_does_not_change_verdict(rules: RuleClassifier) -> None:
    body = "Ракета на Дніпро, червоний"
    assert rules.assess_text(body + FOOTER) == rules.assess_text(body)


def test_footer_city_name_is_ignored(rules: RuleClassifier) -> None:
    body = "Увага, ракета у напрямку області"
    with_footer = rules.assess_text(body + FOOTER)
    assert with_footer == rules.assess_text(body)
    assert with_footer.city_mentioned is False


def test_strip_footer_variants() -> None:
    assert strip_footer("alert\n[A] | [B]") == "alert"
    assert strip_footer("alert\n[A](https://t.me/a) | [B](https://t.me/b)\n\n") == "alert"
    assert strip_footer("alert\n[A | B]") == "alert"
    assert strip_footer("alert [A] | [B]") == "alert"
    # a lone bracketed tag is content, not a footer
    assert strip_footer("alert\n[Оновлено]") == "alert\n[Оновлено]"


def test_normalize_lowercases_and_collapses() -> None:
    assert normalize("  ДНІПРО\u200b   Червоний\n[A] | [B]") == "дніпро червоний"


async def test_classify_is_index_aligned(rules: RuleClassifier) -> None:
    items = [
        StreamItem(id=1, text="Дніпро червоний"),
        StreamItem(id=2, text="Погода гарна"),
        StreamItem(id=3, text="Дніпро помаранчевий"),
    ]

    verdicts = await rules.classify(items)

    assert [v.level for v in verdicts] == [ThreatLevel.RED, ThreatLevel.NONE, ThreatLevel.ORANGE]


async def test_classify_empty_batch(rules: RuleClassifier) -> None:
    assert await rules.classify([]) == []


def test_assessment_flags_follow_level() -> None:
    red = ThreatAssessment.for_level(ThreatLevel.RED, confidence=90, reason="x", city_mentioned=True)
    purple = ThreatAssessment.for_level(ThreatLevel.PURPLE, confidence=90, reason="x", city_mentioned=True)
    yellow = ThreatAssessment.for_level(ThreatLevel.YELLOW, confidence=150, reason="x", city_mentioned=True)

    assert red.need_call and red.need_message
    assert purple.need_message and not purple.need_call
    assert not yellow.need_call and not yellow.need_message
    assert yellow.confidence == 100


def test_assessment_rejects_inconsistent_flags() -> None:
    with pytest.raises(ValueError):
        ThreatAssessment(
            level=ThreatLevel.RED,
            need_call=False,
            need_message=True,
            confidence=50,
            reason="x",
            city_mentioned=True,
        )
    with pytest.raises(ValueError):
        ThreatAssessment(
            level=ThreatLevel.NONE,
            need_call=False,
            need_message=True,
            confidence=50,
            reason="x",
            city_mentioned=False,
        )
