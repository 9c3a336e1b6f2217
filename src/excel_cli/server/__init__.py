"""Long-lived stdin/stdout request loop."""
