# title_scout/crawler/__init__.py
"""Crawl control: frontier, settle detection, extraction and the batch orchestrator."""
from title_scout.crawler.crawler import TitleCrawler
from title_scout.crawler.models import CrawlReport, PageResult, PageVisit

__all__ = ["TitleCrawler", "CrawlReport", "PageResult", "PageVisit"]
