"""Domain records and API payload schemas."""
