"""Provider-facing services: genre catalog, query translation, normalization."""
