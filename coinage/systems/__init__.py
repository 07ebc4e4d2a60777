"""Systems operating on currency tiers: ordering, conversion and validation."""
