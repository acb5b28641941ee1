"""Git status operations subgateway."""
