"""
Declarative base for the catalog models.
"""

from typing import Any

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    The catalog tables are owned by the storefront; models here only read them.
    """

    type_annotation_map: dict[type, Any] = {}
