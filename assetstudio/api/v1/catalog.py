from fastapi import APIRouter

from assetstudio.api.v1.schemas import FontRead, LanguageRead, TargetSizeRead
from assetstudio.core.catalog import FONT_OPTIONS, SCREENSHOT_SIZES, TRANSLATION_LANGUAGES


router = APIRouter(tags=["catalog"])


@router.get("/catalog/sizes", response_model=list[TargetSizeRead])
def list_sizes():
    return [TargetSizeRead.model_validate(size) for size in SCREENSHOT_SIZES]


@router.get("/catalog/languages", response_model=list[LanguageRead])
def list_languages():
    return [LanguageRead.model_validate(language) for language in TRANSLATION_LANGUAGES]


@router.get("/catalog/fonts", response_model=list[FontRead])
def list_fonts():
    return [FontRead.model_validate(font) for font in FONT_OPTIONS]
