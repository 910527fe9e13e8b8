"""Calculators for workflow metrics over collections of IssueView objects."""
