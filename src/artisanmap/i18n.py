"""Simple two-language (en/hi) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "Artisan Map",
        "hi": "कारीगर मानचित्र",
    },
    "btn_cluster": {
        "en": "Cluster",
        "hi": "क्लस्टर",
    },
    "btn_heatmap": {
        "en": "Heatmap",
        "hi": "हीटमैप",
    },
    "loading": {
        "en": "Loading artisan locations and weather",
        "hi": "कारीगरों के स्थान और मौसम लोड हो रहे हैं",
    },
    "placeholder": {
        "en": "No artisan locations to show right now.",
        "hi": "अभी दिखाने के लिए कोई कारीगर स्थान नहीं है।",
    },
    "summary_title": {
        "en": "Summary",
        "hi": "सारांश",
    },
    "summary_artisans": {
        "en": "Artisans",
        "hi": "कारीगर",
    },
    "summary_avg_temp": {
        "en": "Avg temperature",
        "hi": "औसत तापमान",
    },
    "summary_avg_precip": {
        "en": "Avg precipitation",
        "hi": "औसत वर्षा",
    },
    "popup_category": {
        "en": "Category",
        "hi": "श्रेणी",
    },
    "popup_cluster": {
        "en": "Cluster",
        "hi": "क्लस्टर",
    },
    "popup_temperature": {
        "en": "Temperature",
        "hi": "तापमान",
    },
    "popup_precipitation": {
        "en": "Precipitation",
        "hi": "वर्षा",
    },
    "popup_observed": {
        "en": "Observed",
        "hi": "अवलोकन समय",
    },
    "cluster_popup": {
        "en": "Artisans in cluster: {count}",
        "hi": "क्लस्टर में कारीगर: {count}",
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
