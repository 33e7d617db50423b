"""HTTP integrations with the portal and the Kong gateway."""
