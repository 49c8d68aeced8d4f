"""Markdown-to-HTML conversion for values rendered in markdown mode.

The generated HTML is final markup: it is written unescaped and must never be
escaped again downstream.
"""

import markdown

from tinhorn.encoding import Encoder


def encode_markdown(source: str, encoder: Encoder) -> None:
    """Convert markdown source to HTML and write it to the encoder.

    Args:
        source: Raw markdown text
        encoder: Destination; its ``markdown_extensions`` select the
            Python-Markdown extensions to enable
    """
    html = markdown.markdown(source, extensions=list(encoder.markdown_extensions))
    encoder.write_unescaped(html)
