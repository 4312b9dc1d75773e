# src/config/languages.py - v2
"""Supported target languages and their translation-provider codes.

Logical language codes are the ones used in CMS documents and file names
(`zh-cn`, `br`, ...). The provider map translates them to DeepL target codes.
"""

from __future__ import annotations

# 19 target languages, Japanese excluded
TARGET_LANGUAGES: tuple[str, ...] = (
    "en",
    "zh-cn",
    "zh-tw",
    "ko",
    "fr",
    "de",
    "es",
    "it",
    "pt",
    "ru",
    "ar",
    "hi",
    "id",
    "ms",
    "th",
    "vi",
    "tl",
    "tr",
    "br",
)

DEEPL_LANGUAGE_MAP: dict[str, str] = {
    "en": "EN-US",
    "zh-cn": "ZH",
    "zh-tw": "ZH",
    "ko": "KO",
    "fr": "FR",
    "de": "DE",
    "es": "ES",
    "it": "IT",
    "pt": "PT-BR",
    "ru": "RU",
    "ar": "AR",
    "hi": "HI",
    "id": "ID",
    "ms": "MS",
    "th": "TH",
    "vi": "VI",
    "tl": "TL",
    "tr": "TR",
    "br": "PT-BR",
}

# Canonical prefecture codes stored in the CMS, mapped to Japanese display names.
PREFECTURE_DISPLAY_NAMES: dict[str, str] = {
    "hokkaido": "北海道",
    "aomori": "青森県",
    "iwate": "岩手県",
    "miyagi": "宮城県",
    "akita": "秋田県",
    "yamagata": "山形県",
    "fukushima": "福島県",
    "ibaraki": "茨城県",
    "tochigi": "栃木県",
    "gunma": "群馬県",
    "saitama": "埼玉県",
    "chiba": "千葉県",
    "tokyo": "東京都",
    "kanagawa": "神奈川県",
    "niigata": "新潟県",
    "toyama": "富山県",
    "ishikawa": "石川県",
    "fukui": "福井県",
    "yamanashi": "山梨県",
    "nagano": "長野県",
    "gifu": "岐阜県",
    "shizuoka": "静岡県",
    "aichi": "愛知県",
    "mie": "三重県",
    "shiga": "滋賀県",
    "kyoto": "京都府",
    "osaka": "大阪府",
    "hyogo": "兵庫県",
    "nara": "奈良県",
    "wakayama": "和歌山県",
    "tottori": "鳥取県",
    "shimane": "島根県",
    "okayama": "岡山県",
    "hiroshima": "広島県",
    "yamaguchi": "山口県",
    "tokushima": "徳島県",
    "kagawa": "香川県",
    "ehime": "愛媛県",
    "kochi": "高知県",
    "fukuoka": "福岡県",
    "saga": "佐賀県",
    "nagasaki": "長崎県",
    "kumamoto": "熊本県",
    "oita": "大分県",
    "miyazaki": "宮崎県",
    "kagoshima": "鹿児島県",
    "okinawa": "沖縄県",
}

PREFECTURE_CODES: dict[str, str] = {v: k for k, v in PREFECTURE_DISPLAY_NAMES.items()}


def parse_language_list(value: str) -> list[str]:
    """Parse a comma-separated language list; `all` expands to every target."""
    value = value.strip()
    if not value or value.lower() == "all":
        return list(TARGET_LANGUAGES)
    return [lang.strip().lower() for lang in value.split(",") if lang.strip()]


def resolve_prefecture(value: str | None, policy: str) -> str | None:
    """Represent a prefecture according to the configured policy.

    `code` keeps (or converts to) the canonical romanised code; `display`
    converts to the Japanese display name. Unknown values pass through.
    """
    if not value:
        return value
    if policy == "display":
        return PREFECTURE_DISPLAY_NAMES.get(value, value)
    return PREFECTURE_CODES.get(value, value)
