"""Clients for the gallery service, template fetching and Resource Manager deployments."""
