"""Manifest payload ingestion."""

from .parser import EmptyDatasetError, JsonSyntaxError, ParseError, ParsedInput, parse, parse_file

__all__ = [
    "EmptyDatasetError",
    "JsonSyntaxError",
    "ParseError",
    "ParsedInput",
    "parse",
    "parse_file",
]
