"""Option enums shared by assistant workflows and their settings."""

from __future__ import annotations

from enum import Enum


class IconSources(str, Enum):
    """Icon libraries the icon finder can target."""

    GENERIC = "generic"
    MATERIAL = "material"
    FONT_AWESOME = "font_awesome"
    MUD_BLAZOR = "mud_blazor"

    def to_name(self) -> str:
        return _ICON_SOURCE_NAMES.get(self, "Unknown")

    def url(self) -> str:
        return _ICON_SOURCE_URLS.get(self, "")


_ICON_SOURCE_NAMES = {
    IconSources.GENERIC: "Generic",
    IconSources.MATERIAL: "Google Material Icons",
    IconSources.FONT_AWESOME: "Font Awesome",
    IconSources.MUD_BLAZOR: "MudBlazor",
}

_ICON_SOURCE_URLS = {
    IconSources.GENERIC: "",
    IconSources.MATERIAL: "https://fonts.google.com/icons",
    IconSources.FONT_AWESOME: "https://fontawesome.com/search",
    IconSources.MUD_BLAZOR: "https://mudblazor.com/features/icons#icons",
}


class CommonLanguages(str, Enum):
    """Languages offered by the translation assistant."""

    AS_IS = "as_is"
    EN_US = "en_us"
    EN_GB = "en_gb"
    ZH_CN = "zh_cn"
    HI_IN = "hi_in"
    ES_ES = "es_es"
    FR_FR = "fr_fr"
    DE_DE = "de_de"
    DE_AT = "de_at"
    DE_CH = "de_ch"
    JA_JP = "ja_jp"
    OTHER = "other"

    def to_name(self) -> str:
        return _LANGUAGE_NAMES.get(self, "Other")

    def prompt_translation(self, custom_language: str) -> str:
        """Instruction naming the target language for a translation prompt."""
        if self is CommonLanguages.OTHER:
            return f"Translate the text in {custom_language}."
        if self is CommonLanguages.AS_IS:
            return "Do not change the language of the text."
        return f"Translate the given text in {self.to_name()}."


_LANGUAGE_NAMES = {
    CommonLanguages.AS_IS: "Do not change the language",
    CommonLanguages.EN_US: "English (US)",
    CommonLanguages.EN_GB: "English (UK)",
    CommonLanguages.ZH_CN: "Chinese (Simplified)",
    CommonLanguages.HI_IN: "Hindi (India)",
    CommonLanguages.ES_ES: "Spanish (Spain)",
    CommonLanguages.FR_FR: "French (France)",
    CommonLanguages.DE_DE: "German (Germany)",
    CommonLanguages.DE_AT: "German (Austria)",
    CommonLanguages.DE_CH: "German (Switzerland)",
    CommonLanguages.JA_JP: "Japanese (Japan)",
    CommonLanguages.OTHER: "Other",
}
