"""Entry point for running bashbrew-source as a module."""

from .tool.bashbrew_source import main

if __name__ == "__main__":
    main()
