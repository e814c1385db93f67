from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class TranslationOut(BaseModel):
    locale: str
    key: str
    value: Any


class LocalesOut(BaseModel):
    locales: list[str]


class StoreTranslationsRequest(BaseModel):
    translations: dict[str, Any]
    escape: bool = True

    @field_validator("translations")
    @classmethod
    def not_empty(cls, v: dict[str, Any]) -> dict[str, Any]:
        if not v:
            raise ValueError("translations must not be empty")
        return v


class StoreTranslationsOut(BaseModel):
    locale: str
    stored: int
