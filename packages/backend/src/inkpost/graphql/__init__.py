"""GraphQL API: schema, types, and the FastAPI router that serves them."""
