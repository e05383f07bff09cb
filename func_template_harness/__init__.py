"""Local test harness for func templates."""
