"""Parsing, aggregation and metric derivation for the campaign performance export."""
