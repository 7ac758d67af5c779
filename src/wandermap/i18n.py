"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "여행 지도",
        "en": "Wander Map",
    },
    "stats_title": {
        "ko": "통계",
        "en": "Statistics",
    },
    "stats_visited": {
        "ko": "방문한 나라",
        "en": "Visited Countries",
    },
    "visited_title": {
        "ko": "방문한 나라",
        "en": "Visited Countries",
    },
    "visited_empty": {
        "ko": "아직 방문한 나라가 없어요. 지도에서 나라를 선택해 보세요!",
        "en": "No countries visited yet. Start by selecting countries on the map!",
    },
    "search_placeholder": {
        "ko": "나라 이름을 입력하세요...",
        "en": "Type a country name...",
    },
    "label_color": {
        "ko": "색상",
        "en": "Color",
    },
    "label_view": {
        "ko": "지도 보기",
        "en": "Map view",
    },
    "view_svg": {
        "ko": "기본",
        "en": "Classic",
    },
    "view_plotly": {
        "ko": "확대/이동",
        "en": "Zoom & pan",
    },
    "btn_save_image": {
        "ko": "↓ 이미지로 저장",
        "en": "↓ Save as Image",
    },
    "btn_save_svg": {
        "ko": "↓ SVG로 저장",
        "en": "↓ Save as SVG",
    },
    "btn_remove": {
        "ko": "삭제",
        "en": "Remove country",
    },
    "error_map": {
        "ko": "지도 데이터를 불러오지 못했어요. 페이지를 새로고침해 주세요.",
        "en": "Error loading map data. Please try refreshing the page.",
    },
    "loading_map": {
        "ko": "✦ 지도를 불러오는 중",
        "en": "✦ Loading the map",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
