"""Syndication feeds for the 100 Days of Craft blog."""
