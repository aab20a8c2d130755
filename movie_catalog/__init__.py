"""Movie catalog: CRUD over MongoDB with Kafka change events."""
