from services.chat.fallback_replies import (
    CASHFLOW_REPLY,
    GENERIC_REPLY,
    GREETING_WITH_KEY,
    GREETING_WITHOUT_KEY,
    MINDSET_REPLY,
    ORGANIZATION_REPLY,
    RICH_BOSS_REPLY,
    find_fallback_reply,
    greeting_for,
    match_keyword_group,
)


def test_rich_boss_question_matches_first_group() -> None:
    assert match_keyword_group("什么是富老板思维？") == "富老板"
    assert find_fallback_reply("什么是富老板思维？") == RICH_BOSS_REPLY


def test_unmatched_text_gets_generic_reply() -> None:
    assert match_keyword_group("hello") is None
    assert find_fallback_reply("hello") == GENERIC_REPLY


def test_matching_is_case_insensitive() -> None:
    assert find_fallback_reply("How do I manage CASH?") == CASHFLOW_REPLY
    assert find_fallback_reply("A growth MindSet") == MINDSET_REPLY


def test_first_declared_group_wins_on_overlap() -> None:
    # "现金" (cashflow) and "管理" (organization) both match; cashflow is declared first.
    assert find_fallback_reply("如何管理现金") == CASHFLOW_REPLY
    assert find_fallback_reply("团队的思维") == MINDSET_REPLY
    assert find_fallback_reply("员工") == ORGANIZATION_REPLY


def test_selection_is_deterministic() -> None:
    replies = {find_fallback_reply("穷老板和富老板的区别") for _ in range(20)}
    assert replies == {RICH_BOSS_REPLY}


def test_greeting_depends_on_credential() -> None:
    assert greeting_for(True) == GREETING_WITH_KEY
    assert greeting_for(False) == GREETING_WITHOUT_KEY
