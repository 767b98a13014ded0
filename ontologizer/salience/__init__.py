"""Topical salience scoring and irrelevance detection."""
