"""HTTP layer: routers, request/response models and error handlers."""
