"""Kanban Metrics - workflow metrics calculated from Linear issue data.

This package fetches issues from the Linear GraphQL API, caches them for the
day and calculates cycle time, lead time, throughput and flow efficiency,
both overall and per team.
"""
