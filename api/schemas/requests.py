"""Request bodies for the analysis endpoints."""

from pydantic import BaseModel, Field

from ontologizer.candidates.heuristics import MainTopicStrategy


class AnalyzeRequest(BaseModel):
    """Analyze a page by URL or pasted content."""

    url: str = Field("", description="Page to fetch and analyze")
    paste_content: str = Field("", description="HTML, markdown or plain text to analyze instead")
    main_topic_strategy: MainTopicStrategy = Field(
        MainTopicStrategy.STRICT,
        description="Main-topic heuristic used when the LLM did not pick one",
    )
    clear_cache: bool = Field(False, description="Drop the cached result for the URL first")
    run_fanout_analysis: bool = Field(False, description="Also run the query fan-out analysis")
    fanout_only: bool = Field(False, description="Run only the fan-out analysis")

    @property
    def has_url(self) -> bool:
        return bool(self.url.strip())

    @property
    def has_content(self) -> bool:
        return bool(self.paste_content.strip())
