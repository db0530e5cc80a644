"""Utility helpers for the style checker."""

from .fileio import read_yaml_file, read_text_file
from .text_index import SourceText, TextIndex
from .tree import build_tree, load_tree

__all__ = [
    "read_yaml_file",
    "read_text_file",
    "SourceText",
    "TextIndex",
    "build_tree",
    "load_tree",
]
