"""Repository snapshots: mirroring, classification and package discovery."""
