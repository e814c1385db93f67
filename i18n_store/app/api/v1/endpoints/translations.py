from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from i18n_store.app.api.deps import get_translation_backend
from i18n_store.app.core.exceptions import (
    CacheUnavailable,
    MissingTranslation,
    StoreUnavailable,
)
from i18n_store.app.schemas.translation import (
    LocalesOut,
    StoreTranslationsOut,
    StoreTranslationsRequest,
    TranslationOut,
)
from i18n_store.app.services.missing import MissRecordingResolver
from i18n_store.app.services.resolver import Resolver

router = APIRouter()

Backend = Resolver | MissRecordingResolver


# ─── Reads ────────────────────────────────────────────────────────────────────


@router.get("/locales", response_model=LocalesOut)
def get_locales(backend: Backend = Depends(get_translation_backend)) -> LocalesOut:
    return LocalesOut(locales=backend.available_locales())


@router.get("/{locale}", response_model=TranslationOut)
def get_translation(
    locale: str,
    key: str = Query("", description="Dotted key; empty for the whole locale"),
    scope: str | None = Query(None),
    backend: Backend = Depends(get_translation_backend),
) -> TranslationOut:
    try:
        value = backend.translate(locale, key, scope=scope)
    except MissingTranslation as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (StoreUnavailable, CacheUnavailable) as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return TranslationOut(locale=locale, key=key, value=value)


# ─── Writes ───────────────────────────────────────────────────────────────────


@router.put("/{locale}", response_model=StoreTranslationsOut)
def put_translations(
    locale: str,
    payload: StoreTranslationsRequest,
    backend: Backend = Depends(get_translation_backend),
) -> StoreTranslationsOut:
    try:
        stored = backend.store_translations(locale, payload.translations, escape=payload.escape)
    except (StoreUnavailable, CacheUnavailable) as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return StoreTranslationsOut(locale=locale, stored=stored)


@router.post("/reload", status_code=status.HTTP_204_NO_CONTENT)
def reload_translations(backend: Backend = Depends(get_translation_backend)) -> Response:
    try:
        backend.invalidate()
    except CacheUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
