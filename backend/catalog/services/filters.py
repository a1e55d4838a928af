"""Parameterized filter expressions for product searches."""

from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from catalog.db.models.product import Product


def normalize_search_term(search_term: str | None) -> str | None:
    """Return the stripped term, or None when there is nothing to search for."""
    if search_term is None:
        return None
    term = search_term.strip()
    return term or None


def search_predicate(search_term: str | None) -> ColumnElement[bool] | None:
    """Build a case-insensitive substring match on name OR description.

    The term is sent as a bound parameter; ``%`` and ``_`` inside it are
    escaped so they match literally. Returns None when no filter applies.
    """
    term = normalize_search_term(search_term)
    if term is None:
        return None
    return or_(
        Product.name.icontains(term, autoescape=True),
        Product.description.icontains(term, autoescape=True),
    )
