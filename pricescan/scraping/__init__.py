"""
Shop price scraping: fetching, parsing, health tracking and run coordination.
"""
