"""Services around the rules engine: stores, feeds and game flow."""
