"""HTTP and WebSocket surface for online games."""
