"""Command line tool for resolving images with a bashbrew library mirror."""
