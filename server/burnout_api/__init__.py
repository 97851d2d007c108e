"""Burnout Risk API - HTTP surface over the burnout engine."""
