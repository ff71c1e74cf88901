"""
Single import point for the Pillow modules used by Retouch.

Pillow provides the `PIL` namespace. Loading the modules here keeps the
set of Pillow features the core depends on in one place and exposes the
commonly-used symbols: `Image`, `ImageDraw`, `ImageFilter` and `ImageFont`.
"""
from importlib import import_module
from types import ModuleType


def _import(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as exc:
        raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'") from exc


Image = _import("PIL.Image")
ImageDraw = _import("PIL.ImageDraw")
ImageFilter = _import("PIL.ImageFilter")
ImageFont = _import("PIL.ImageFont")

# Helper for type hints referencing PIL.Image.Image
ImageClass = Image.Image
