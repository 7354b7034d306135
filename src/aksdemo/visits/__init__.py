"""Visit counter sample app for the orchestration walkthrough."""

from aksdemo.visits.app import create_app, serve

__all__ = ["create_app", "serve"]
