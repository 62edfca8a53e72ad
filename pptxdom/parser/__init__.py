"""PPTX parser module - reads package parts into domain models.

Covers the whole part pipeline:
- ZIP package access and relationship tables
- Namespace-agnostic XML decoding
- Presentation, slide, master and theme parts
- Transforms, custom geometry paths, fills, strokes and effects
- Text bodies with paragraph and run formatting

The reader lives in ``pptxdom.parser.pptx_reader``; it is not imported here
because the mapper depends on the lower-level parser modules.
"""
