"""FastAPI surface for Nexus Dominion."""
