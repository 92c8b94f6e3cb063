import pytest

from screenshot_localizer.locales import (
    APP_STORE_LOCALES,
    GOOGLE_PLAY_LOCALES,
    TRANSLATION_GROUPS,
    UNIFIED_LOCALES,
    Store,
    TranslationGroup,
    app_store_to_unified,
    group_members,
    is_app_store_locale,
    is_google_play_locale,
    is_translatable,
    is_unified_locale,
    language_name,
    store_to_unified,
    unified_to_app_store,
    unified_to_google_play,
    unified_to_store,
    unified_to_translation_group,
)


@pytest.mark.parametrize("store", list(Store))
def test_store_round_trip_for_supported_locales(store):
    for locale in UNIFIED_LOCALES:
        code = unified_to_store(store, locale)
        if code is None:
            continue
        assert store_to_unified(store, code) == locale


def test_reverse_mapping_is_total_over_store_codes():
    for code in APP_STORE_LOCALES:
        assert is_unified_locale(app_store_to_unified(code))
    for code in GOOGLE_PLAY_LOCALES:
        assert is_unified_locale(store_to_unified(Store.GOOGLE_PLAY, code))


def test_store_specific_codes():
    assert unified_to_app_store("ko-KR") == "ko"
    assert unified_to_google_play("ko-KR") == "ko-KR"
    assert unified_to_app_store("es-419") == "es-MX"
    assert unified_to_google_play("zh-Hans") == "zh-CN"
    assert unified_to_google_play("he-IL") == "iw-IL"
    assert app_store_to_unified("zh-Hant") == "zh-Hant"


def test_unsupported_store_locale_is_none():
    assert unified_to_app_store("en-IN") is None
    assert unified_to_app_store("zh-HK") is None
    assert unified_to_google_play("xx-YY") is None
    assert store_to_unified(Store.APP_STORE, "ko-KR") is None


def test_store_accepts_plain_string():
    assert unified_to_store("appStore", "ja-JP") == "ja"


def test_store_predicates():
    assert is_app_store_locale("zh-Hans")
    assert not is_app_store_locale("zh-CN")
    assert is_google_play_locale("es-419")
    assert not is_google_play_locale("es-MX")


def test_every_locale_in_at_most_one_group():
    seen = {}
    for group, members in TRANSLATION_GROUPS.items():
        for locale in members:
            assert locale not in seen, f"{locale} in {seen.get(locale)} and {group}"
            seen[locale] = group


def test_group_lookup_contains_locale():
    for locale in UNIFIED_LOCALES:
        group = unified_to_translation_group(locale)
        if group is not None:
            assert locale in group_members(group)


def test_group_members_are_unified_locales():
    for members in TRANSLATION_GROUPS.values():
        for locale in members:
            assert is_unified_locale(locale)


def test_dialects_share_a_group():
    assert unified_to_translation_group("es-ES") is TranslationGroup.ES_MX
    assert unified_to_translation_group("es-419") is TranslationGroup.ES_MX
    assert unified_to_translation_group("en-GB") is TranslationGroup.EN_US
    assert unified_to_translation_group("zh-Hant") is TranslationGroup.ZH_CN
    assert unified_to_translation_group("uk-UA") is TranslationGroup.UA_UA
    assert group_members(TranslationGroup.ZH_CN) == ("zh-Hans", "zh-Hant", "zh-HK")


def test_untranslatable_locale():
    assert unified_to_translation_group("nl-NL") is None
    assert not is_translatable("th-TH")
    assert is_translatable("pt-PT")


def test_language_name():
    assert language_name("en-US") == "English"
    assert language_name("es-419") == "Spanish"
    assert language_name("ua-UA") == "Ukrainian"
    assert language_name("zh-CN") == "Chinese"
    assert language_name("nl-NL") == "nl-NL"
