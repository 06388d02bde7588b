"""Document parsing, rendering and normalization."""

from .loader import build_doc, doc_from_record, list_from_record, load_docs, load_markdown_file
from .parser import build_snippet, extract_inline_tags, parse_front_matter, slugify, unique_tags
from .render import render_markdown_with_outline
from .rich_text import render_rich_doc

__all__ = [
    "build_doc",
    "doc_from_record",
    "list_from_record",
    "load_docs",
    "load_markdown_file",
    "build_snippet",
    "extract_inline_tags",
    "parse_front_matter",
    "slugify",
    "unique_tags",
    "render_markdown_with_outline",
    "render_rich_doc",
]
