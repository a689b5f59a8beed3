"""Scraping core for the news portal: extractors, persistence gate and run orchestration."""
