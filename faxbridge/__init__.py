"""Provider-agnostic fax gateway."""
