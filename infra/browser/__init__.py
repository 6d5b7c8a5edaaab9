from .playwright_page_fetcher import PlaywrightPageFetcher

__all__ = [
    "PlaywrightPageFetcher",
]
