"""Web API for the browser shell."""
