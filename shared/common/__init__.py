# Shared Common Library
# Exceptions, middleware, pagination, model mixins and health checks
# used across the microservices.

__version__ = "1.1.0"
