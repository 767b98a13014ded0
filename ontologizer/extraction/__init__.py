"""Text extraction from markup and pasted content.

Use explicit imports:
    from ontologizer.extraction.text import TextParts, extract_text_parts
    from ontologizer.extraction.content_format import format_pasted_content
"""
