"""
HTTP API - the FastAPI application and its blog routes.
"""
