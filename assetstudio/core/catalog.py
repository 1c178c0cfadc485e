from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from assetstudio.core.exceptions import EntityNotFoundError


class TargetSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    width: int = Field(ge=1)
    height: int = Field(ge=1)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class LanguageOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    label: str


class FontOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    # Candidate TTF file names, tried in order under FONT_DIR and the system font path.
    files: tuple[str, ...] = ()


SCREENSHOT_SIZES: tuple[TargetSize, ...] = (
    TargetSize(id="iphone-6.5", name='iPhone 6.5" (XS Max / 11 Pro Max)', width=1242, height=2688),
    TargetSize(id="iphone-6.7", name='iPhone 6.7" (12/13/14 Pro Max)', width=1284, height=2778),
    TargetSize(id="iphone-6.9", name='iPhone 15 Pro Max (6.7")', width=1290, height=2796),
    TargetSize(id="iphone-5.5", name='iPhone 5.5" (6s/7/8 Plus)', width=1242, height=2208),
    TargetSize(id="ipad-12.9", name='iPad Pro 12.9"', width=2048, height=2732),
)

SOURCE_LANGUAGE = "source"
SOURCE_LANGUAGE_LABEL = "Original (English)"

TRANSLATION_LANGUAGES: tuple[LanguageOption, ...] = (
    LanguageOption(code="es", label="Spanish"),
    LanguageOption(code="fr", label="French"),
    LanguageOption(code="ja", label="Japanese"),
    LanguageOption(code="de", label="German"),
    LanguageOption(code="pt", label="Portuguese"),
    LanguageOption(code="it", label="Italian"),
    LanguageOption(code="ko", label="Korean"),
    LanguageOption(code="zh", label="Chinese (Simplified)"),
)

DEFAULT_TARGET_LANGUAGES: tuple[str, ...] = ("es", "fr", "ja")

FONT_OPTIONS: tuple[FontOption, ...] = (
    FontOption(label="Space Grotesk", value='"Space Grotesk", sans-serif', files=("SpaceGrotesk-Bold.ttf", "SpaceGrotesk-Regular.ttf")),
    FontOption(label="Poppins", value='"Poppins", sans-serif', files=("Poppins-Bold.ttf", "Poppins-Regular.ttf")),
    FontOption(label="Playfair Display", value='"Playfair Display", serif', files=("PlayfairDisplay-Bold.ttf", "PlayfairDisplay-Regular.ttf")),
    FontOption(label="Bebas Neue", value='"Bebas Neue", sans-serif', files=("BebasNeue-Regular.ttf",)),
    FontOption(label="DM Sans", value='"DM Sans", sans-serif', files=("DMSans-Bold.ttf", "DMSans-Regular.ttf")),
)


def get_target_size(size_id: str) -> TargetSize:
    for size in SCREENSHOT_SIZES:
        if size.id == size_id:
            return size
    raise EntityNotFoundError("TargetSize", size_id)


def language_label(code: str) -> str:
    if code == SOURCE_LANGUAGE:
        return SOURCE_LANGUAGE_LABEL
    for language in TRANSLATION_LANGUAGES:
        if language.code == code:
            return language.label
    return code.upper()


def is_known_language(code: str) -> bool:
    return any(language.code == code for language in TRANSLATION_LANGUAGES)


def find_font(value: str) -> FontOption | None:
    for font in FONT_OPTIONS:
        if font.value == value or font.label == value:
            return font
    return None
