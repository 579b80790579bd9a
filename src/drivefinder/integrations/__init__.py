"""Remote service integrations (Microsoft Graph, OAuth)."""
