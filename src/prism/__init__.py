"""Prism - provider routing and resilience for AI backends.

Prism picks one of several text-generation backends (Gemini, DeepSeek,
Claude, OpenAI) for each request from its role and an estimate of its
complexity, falls back along per-backend chains when a backend fails, and
estimates the tokens and cost of every answer.

Example:
    # Using CLI
    prism ask "Review this design" --role reviewer
    prism backends list

    # Using Python
    from prism.config import load_config, resolve_credentials
    from prism.gateway import Gateway
    from prism.routing import Role

    gateway = Gateway.from_config(load_config(), resolve_credentials())
    result = await gateway.complete(Role.CODER, "write a loop")
"""

__version__ = "0.1.0"

__all__ = ["__version__", "main"]


def main() -> None:
    """Main entry point for the Prism CLI."""
    from prism.cli.main import app

    app()
