"""Prompt templates for entity extraction, recommendations and fan-out."""

import json

# Characters of page text sent for entity extraction
ENTITY_PROMPT_CHAR_LIMIT = 8000

# Characters of body text sent for recommendations
RECOMMENDATION_BODY_CHAR_LIMIT = 2500

ENTITY_EXTRACTION_PROMPT = """Analyze this web page content to extract entities and identify the main topic using Wikipedia-style semantic precision.

MAIN TOPIC RULES:
- Extract the PRIMARY business service, product, or subject (2-6 words max)
- For location-specific services: include the key location in the main topic (e.g., 'O'Hare Limo Service', 'Denver Airport Transportation')
- For general limo/transportation: use 'Limo Service' or 'Airport Transportation'
- For SEO articles: use 'SEO' or 'AI Search Optimization'
- For cybersecurity: use 'Cybersecurity' or specific service type
- If content is about a SPECIFIC location's service, include that location in the main topic
- Avoid generic marketing phrases like 'Greater Chicago' unless that's the actual business focus

WIKIPEDIA-STYLE ENTITY EXTRACTION:
- Extract 15-20 HIGH-QUALITY entities that would definitely have Wikipedia pages or be notable enough for Wikipedia
- Think: "Would this entity have its own Wikipedia article or be a redirect to a notable page?"
- PREFER entities that are:
  * Proper nouns (companies, places, people, brands, technologies)
  * Well-known concepts with clear definitions (Search Engine Optimization, not "optimization")
  * Specific institutions, products, or services (Palo Alto University, not "universities")
  * Industry-standard terms (Schema Markup, Technical SEO, Content Marketing)

SEMANTIC ACCURACY RULES:
- For "Student Recruitment" → think "Student recruitment" (general concept), NOT academic papers about recruitment
- For "Higher Education" → think "Higher education" (field of study), NOT "Higher education accreditation"
- For "AI SEO" → think "Search engine optimization" or "Artificial intelligence", NOT "AI Seoul Summit"
- For "Analytics" → think "Analytics" (general field), NOT "Google Analytics" (specific tool)
- AVOID overly specific research papers, academic studies, or location-specific variants
- AVOID adding extra qualifiers unless they're part of the actual entity name

FILTERING RULES:
- Include: companies, brands, people, specific locations, products, technologies, key concepts
- EXCLUDE abstract concepts like: wonder, invention, discernment, tenacity, enablement, galvanizing
- EXCLUDE generic business terms: pricing, location, reliability, efficiency, comfort
- EXCLUDE template elements: Semrush, social media widgets, cookie notices
- Each entity: 1-4 words maximum
- Focus on entities that support the main topic and would be recognized by Wikipedia

EXAMPLES:
- O'Hare limo page: Echo Limousine, O'Hare Airport, Airport Transportation, Chauffeur, Limousine
- SEO page: Search Engine Optimization, Google Search, Schema Markup, Technical SEO, Content Marketing
- Education page: Higher Education, Student Recruitment, Academic Programs, Distance Learning

Return JSON format:
{{
  "main_topic": "(primary service/subject with location if relevant, 2-6 words)",
  "entities": ["Entity 1", "Entity 2", "Entity 3", ...]
}}

Content:
{content}"""

RECOMMENDATION_PROMPT = """You are a world-class Semantic SEO strategist, specializing in topical authority and schema optimization. Analyze the following webpage content and its most salient topical entities to provide expert, actionable recommendations for improving its semantic density and authority.

**Page Text Summary:**
{body}...

**Most Salient Topical Entities Identified:**
{entities}{schema_context}

**Your Task:**
Provide a structured set of recommendations in a JSON object format. The JSON object must contain a single key: `recommendations`. The value should be an array of objects, where each object has two keys: `category` (e.g., 'Semantic Gaps', 'Content Depth', 'Strategic Guidance') and `advice` (the specific recommendation string).

Focus on content improvements, missing entity coverage, and advanced SEO strategies. Avoid recommending already-implemented structured data.

Example:
{{
  "recommendations": [
    {{ "category": "Semantic Gaps", "advice": "Cover the topic of 'Voice Search Optimization' as it's highly relevant." }},
    {{ "category": "Content Depth", "advice": "Expand on 'Local SEO' by including case studies and FAQs." }}
  ]
}}

Return *only* the raw JSON object, without any surrounding text, formatting, or explanations."""

FANOUT_PROMPT_HEADER = (
    "You are analyzing a webpage for Google's AI Mode query fan-out potential. "
    "Google's AI Mode decomposes user queries into multiple sub-queries to "
    "synthesize comprehensive answers.\n\n"
)

FANOUT_PROMPT_TASKS = """Based on this content, perform the following analysis:

1. IDENTIFY PRIMARY ENTITY: What is the main ontological entity or topic of this page?

2. PREDICT FAN-OUT QUERIES: Generate 8-10 likely sub-queries that Google's AI might create when a user asks about this topic. Consider:
   - Related queries (broader context)
   - Implicit queries (unstated user needs)
   - Comparative queries (alternatives, comparisons)
   - Procedural queries (how-to aspects)
   - Contextual refinements (budget, size, location specifics)

3. SEMANTIC COVERAGE SCORE: For each predicted query, assess if the page content provides information to answer it (Yes/Partial/No).

4. FOLLOW-UP QUESTION POTENTIAL: What follow-up questions would users likely ask after reading this content?

OUTPUT FORMAT:
PRIMARY ENTITY: [entity name]

FAN-OUT QUERIES:
• [Query 1] - Coverage: [Yes/Partial/No]
• [Query 2] - Coverage: [Yes/Partial/No]
...

FOLLOW-UP POTENTIAL:
• [Follow-up question 1]
• [Follow-up question 2]
...

COVERAGE SCORE: [X/10 queries covered]
RECOMMENDATIONS: [Specific content gaps to fill]"""


def build_entity_prompt(text: str) -> str:
    """Build the entity extraction prompt for the combined page text."""
    return ENTITY_EXTRACTION_PROMPT.format(content=text[:ENTITY_PROMPT_CHAR_LIMIT])


def build_recommendation_prompt(body: str, entity_names: list[str], schema_context: str = "") -> str:
    """Build the recommendation prompt."""
    return RECOMMENDATION_PROMPT.format(
        body=body[:RECOMMENDATION_BODY_CHAR_LIMIT],
        entities=", ".join(entity_names),
        schema_context=schema_context,
    )


def build_fanout_prompt(chunks: list[dict], url: str = "") -> str:
    """Build the fan-out analysis prompt from semantic chunks."""
    prompt = FANOUT_PROMPT_HEADER
    if url:
        prompt += f"URL: {url}\n\n"
    prompt += "SEMANTIC CHUNKS FROM PAGE:\n"
    prompt += json.dumps(chunks, indent=4, ensure_ascii=False) + "\n\n"
    prompt += FANOUT_PROMPT_TASKS
    return prompt
