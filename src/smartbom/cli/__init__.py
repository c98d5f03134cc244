"""SmartBOM command-line interface."""

from smartbom.cli.app import app

__all__ = ["app"]
