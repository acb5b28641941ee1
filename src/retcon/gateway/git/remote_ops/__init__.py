"""Git remote operations subgateway."""
