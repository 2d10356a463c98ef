"""IPS Patcher utils package."""
