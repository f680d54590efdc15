"""Legislator scraping pipeline.

This package scrapes lists of legislators from a parliamentary website that
publishes different parliaments in different HTML formats. A selector picks
the extraction strategy for the requested parliament, the strategy fetches
and parses the listing, and a runner dispatches each normalized Person to a
storage connection.
"""
