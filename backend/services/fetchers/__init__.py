"""
Fetcher Package
"""
