"""Builders for objects the operator creates."""
