"""Query fan-out analysis.

Use explicit imports:
    from ontologizer.fanout.chunker import SemanticChunk, extract_semantic_chunks
    from ontologizer.fanout.analyzer import FanoutAnalyzer, parse_fanout_response
"""
