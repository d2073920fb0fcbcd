"""
Build pipeline orchestration.
"""

from .executor import create_client, execute_build, plan_sitemap

__all__ = ["create_client", "execute_build", "plan_sitemap"]
