"""Status and metrics backend for the Dockerized web server dashboard."""
