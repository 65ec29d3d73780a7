"""
CLI entry point for MCP Session Auth server
"""

if __name__ == "__main__":
    from . import run_from_env

    run_from_env()
