"""Data records for the currency ladder."""
