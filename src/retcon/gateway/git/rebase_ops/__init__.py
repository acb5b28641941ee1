"""Git rebase operations subgateway."""
