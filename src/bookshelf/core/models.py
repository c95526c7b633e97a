"""Data models for catalog entries and the category taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ALL_CATEGORIES = "all"

CATEGORIES: dict[str, tuple[str, ...]] = {
    "Literatura General": (
        "Clásicos",
        "Literatura Latinoamericana",
        "Ciencia Ficción",
        "Romance",
        "Misterio",
        "Historia",
        "Biografía",
        "Ensayo",
    ),
    "Educación Primaria": (
        "Matemáticas",
        "Ciencias",
        "Lenguaje",
        "Historia",
        "Geografía",
        "Cuentos Infantiles",
        "Actividades",
    ),
}

# Serialized key -> attribute name
_REQUIRED_FIELDS = {
    "id": "id",
    "title": "title",
    "author": "author",
    "description": "description",
    "category": "category",
    "subcategory": "subcategory",
    "coverUrl": "cover_url",
    "pdfUrl": "pdf_url",
    "uploadDate": "upload_date",
}
_OPTIONAL_FIELDS = {
    "coverData": "cover_data",
    "pdfData": "pdf_data",
}


def subcategories_of(category: str) -> list[str]:
    """Return the ordered subcategories allowed under ``category``."""
    return list(CATEGORIES.get(category, ()))


def category_filter_options() -> list[str]:
    """Build the category filter choices: the "all" sentinel, then every subcategory."""
    options = [ALL_CATEGORIES]
    for subs in CATEGORIES.values():
        for sub in subs:
            if sub not in options:
                options.append(sub)
    return options


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str
    description: str
    category: str
    subcategory: str
    cover_url: str = ""
    pdf_url: str = ""
    upload_date: str = ""
    cover_data: str | None = None
    pdf_data: str | None = None
    pages: int | None = None

    def is_valid(self) -> bool:
        return self.subcategory in CATEGORIES.get(self.category, ())

    def display_url(self, kind: str) -> str:
        """Embedded content wins over the reference URL."""
        if kind == "cover":
            return self.cover_data or self.cover_url
        if kind == "pdf":
            return self.pdf_data or self.pdf_url
        raise ValueError(f"unknown display kind: {kind!r}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {key: getattr(self, attr) for key, attr in _REQUIRED_FIELDS.items()}
        for key, attr in _OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        if self.pages is not None:
            data["pages"] = self.pages
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> Book:
        """Parse a serialized record, raising ``ValueError`` when it is malformed."""
        if not isinstance(raw, dict):
            raise ValueError(f"book record must be an object, got {type(raw).__name__}")

        kwargs: dict[str, Any] = {}
        for key, attr in _REQUIRED_FIELDS.items():
            value = raw.get(key)
            if not isinstance(value, str):
                raise ValueError(f"book record field {key!r} must be a string")
            kwargs[attr] = value
        for key, attr in _OPTIONAL_FIELDS.items():
            value = raw.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"book record field {key!r} must be a string")
            kwargs[attr] = value

        pages = raw.get("pages")
        # bool is an int subclass; reject it explicitly
        if pages is not None and (isinstance(pages, bool) or not isinstance(pages, int)):
            raise ValueError("book record field 'pages' must be an integer")
        kwargs["pages"] = pages
        return cls(**kwargs)
