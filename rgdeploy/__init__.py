"""Resource group template deployment: parameter resolution, submission and status."""
