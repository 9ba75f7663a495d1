"""Boundary layer: relational store and embedding provider adapters."""
