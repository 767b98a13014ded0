"""Page fetching.

Use explicit imports:
    from ontologizer.crawler.fetcher import PageFetcher, FetchResult
"""
