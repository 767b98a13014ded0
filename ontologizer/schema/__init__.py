"""schema.org JSON-LD synthesis.

Use explicit imports:
    from ontologizer.schema.synthesizer import SchemaSynthesizer
    from ontologizer.schema.detector import detect_schema_type
"""
