"""FastAPI application for the resume analysis gateway."""
