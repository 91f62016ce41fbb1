"""Order service: order creation and per-product listings over PostgreSQL, Redis and Kafka."""
