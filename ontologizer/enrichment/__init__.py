"""Entity enrichment against Wikipedia, Wikidata, Google KG and ProductOntology.

Use explicit imports:
    from ontologizer.enrichment.engine import EnrichmentEngine, CircuitBreaker
    from ontologizer.enrichment.models import EnrichedEntity
    from ontologizer.enrichment.scoring import ConfidenceWeights, calculate_confidence
"""
