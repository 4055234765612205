"""CLI command implementations for Prism.

- ask / route: send a prompt, or preview the routing decision
- backends: list, costs, validate, set-default
- config: init, show
"""
