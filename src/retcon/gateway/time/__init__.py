"""Time gateway so timestamps and sleeps can be controlled in tests."""
