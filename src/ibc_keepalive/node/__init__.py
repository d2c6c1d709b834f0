"""Supervisor that runs the keep-alive probes."""

from .supervisor import Supervisor

__all__ = ["Supervisor"]
