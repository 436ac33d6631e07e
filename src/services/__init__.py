"""Service layer: business logic between routers and the store."""
